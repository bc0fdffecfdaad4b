"""Drive a lesson session through the running API and print each step.

Usage: python scripts/walk_lesson.py [lesson_id] [user_id]
Answers every practice question correctly using /quiz/subtopic/{id}.
"""
import sys

import httpx

BASE = "http://localhost:8000/api/v1"
MAX_STEPS = 200


def answer_all(c, sid, view, answers):
    for i, ans in enumerate(answers):
        r = c.post(f"{BASE}/sessions/{sid}/quiz/answers", json={"question_index": i, "option_index": ans})
        r.raise_for_status()
        view = r.json()
    return view


def guessed_answers(view):
    """Options to pick when the answers are not published.

    The backup question (shown with a notice) is always option 0. Generated
    quizzes are answered with option 0 too, so a challenge may fail and repeat.
    """
    quiz = view["quiz"]
    if quiz["notice"] or quiz["source"] == "ai":
        return [0] * quiz["total"]
    return None


def main():
    lesson_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    user_id = int(sys.argv[2]) if len(sys.argv) > 2 else 1
    c = httpx.Client(timeout=60)

    r = c.post(f"{BASE}/sessions", json={"lesson_id": lesson_id, "user_id": user_id})
    if r.status_code != 201:
        print(f"Create failed: {r.status_code} {r.text[:300]}")
        sys.exit(1)
    view = r.json()
    sid = view["id"]
    print(f"Session {sid}: {view['lesson_title']}")

    lesson = c.get(f"{BASE}/lessons/{lesson_id}", params={"user_id": user_id}).json()

    steps = 0
    while view["mode"] != "final-results":
        steps += 1
        if steps > MAX_STEPS:
            print(f"Gave up after {MAX_STEPS} steps")
            sys.exit(1)
        mode = view["mode"]
        print(f"  [{mode}] topic={view['topic_index']} subtopic={view['subtopic_index']} {view['subtopic_title']}")
        if mode == "learning":
            view = c.post(f"{BASE}/sessions/{sid}/events", json={"type": "finish-subtopic"}).json()
        elif mode == "chat":
            r = c.post(f"{BASE}/sessions/{sid}/chat", json={"message": "ready"}).json()
            print(f"    tutor: {r['reply']}")
            view = r["session"]
        elif mode in ("quiz", "final-test"):
            answers = guessed_answers(view)
            if answers is None and mode == "quiz":
                sub = lesson["topics"][view["topic_index"]]["subtopics"][view["subtopic_index"]]
                qs = c.get(f"{BASE}/quiz/subtopic/{sub['id']}").json()["questions"]
                answers = [q["answer"] for q in qs]
            elif answers is None:
                qs = c.get(f"{BASE}/quiz/lesson/{lesson_id}/final").json()["questions"]
                answers = [q["answer"] for q in qs]
            answer_all(c, sid, view, answers)
            view = c.post(f"{BASE}/sessions/{sid}/quiz/submit").json()
            print(f"    score: {view['last_quiz_score']}%")
        elif mode == "quiz-results":
            view = c.post(f"{BASE}/sessions/{sid}/events", json={"type": "continue"}).json()
        else:
            print(f"Unexpected mode {mode}")
            sys.exit(1)

    print(f"Final test score: {view['final_score']}% (overall progress {view['overall_progress']}%)")


if __name__ == "__main__":
    main()
