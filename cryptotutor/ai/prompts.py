"""
Prompt builders for the AI tutor and quiz generator.
"""

import json
from typing import Any, Dict, Optional, Sequence

QUIZ_SYSTEM_PROMPT = (
    "You are an educational quiz generator for a cryptocurrency course. "
    "You reply with a single JSON object and nothing else."
)


def quiz_prompt(
    subtopic_title: str,
    objective: str,
    key_concepts: Sequence[str],
    existing_questions: Sequence[str],
    question_count: int = 5,
) -> str:
    concepts = ", ".join(key_concepts) if key_concepts else "(none listed)"
    existing = "; ".join(existing_questions) if existing_questions else "(none)"
    return (
        f'Create a quiz for the subtopic "{subtopic_title}" '
        f'with the learning objective: "{objective}".\n\n'
        f"The key concepts are: {concepts}.\n\n"
        f"Generate {question_count} multiple-choice questions. Each question must have "
        "exactly 4 options with exactly one correct answer. The questions should be "
        "challenging but fair, and directly related to the key concepts.\n\n"
        f"DO NOT repeat these existing questions: {existing}\n\n"
        "Format your response as a JSON object with this structure:\n"
        "{\n"
        '  "questions": [\n'
        "    {\n"
        '      "question": "Question text here?",\n'
        '      "options": ["Option A", "Option B", "Option C", "Option D"],\n'
        '      "answer": 0,\n'
        '      "explanation": "Why the correct answer is correct"\n'
        "    }\n"
        "  ]\n"
        "}\n"
        '"answer" is the index (0-3) of the correct option.'
    )


def tutor_system_prompt(topic: str, subtopics: Sequence[str]) -> str:
    covered = "\n".join(f"- {s}" for s in subtopics) if subtopics else "- (no subtopics listed)"
    return (
        "You are a friendly, patient cryptocurrency tutor. The learner has just "
        f'finished the topic "{topic}", which covered:\n{covered}\n\n'
        "RULES:\n"
        "- Answer questions about this material clearly and briefly (under 150 words).\n"
        "- Use simple language and concrete examples; avoid jargon or explain it.\n"
        "- Never give financial or investment advice.\n"
        "- If the learner seems ready, remind them they can type 'ready' to start the quiz."
    )


def simplify_prompt(content: str) -> str:
    return (
        "Please simplify the following explanation to make it easier to understand. "
        "Use simpler vocabulary, shorter sentences, and avoid jargon. Explain concepts "
        "as if speaking to a student who is new to this topic.\n\n"
        f"Original explanation:\n{content}"
    )


def feedback_prompt(quiz_results: Dict[str, Any]) -> str:
    return (
        "Please generate personalized educational feedback based on these quiz results:\n"
        f"{json.dumps(quiz_results, default=str)}\n\n"
        "Highlight strengths, areas for improvement, and suggest specific next steps for "
        "learning. Be encouraging but honest. Keep your response under 200 words and in a "
        "friendly, supportive tone."
    )


def subtopic_content_prompt(subtopic_title: str, objective: str, key_concepts: Sequence[str]) -> str:
    concepts = "\n".join(f"- {c}" for c in key_concepts) if key_concepts else "- (none listed)"
    return (
        f'Generate a comprehensive but concise educational explanation about "{subtopic_title}".\n\n'
        f"Learning objective: {objective}\n\n"
        f"Key concepts to cover:\n{concepts}\n\n"
        "Structure your explanation with:\n"
        "1. A brief introduction to the concept\n"
        "2. Clear explanations of each key concept\n"
        "3. How these concepts relate to each other\n"
        "4. Real-world applications or examples\n"
        "5. A brief summary\n\n"
        "Use a friendly, conversational tone. Aim for 300-500 words."
    )


TOPIC_VALIDATION_SYSTEM_PROMPT = (
    "You are a cryptocurrency education expert who validates topics for a learning "
    "platform. Reply in English, starting with YES or NO followed by a brief explanation."
)


def topic_validation_prompt(topic: str) -> str:
    return (
        f'Topic for validation: "{topic}"\n\n'
        "Is this topic directly related to any of the following?\n"
        "- Cryptocurrency (Bitcoin, Ethereum, altcoins, stablecoins)\n"
        "- Blockchain technology\n"
        "- Digital assets or tokens\n"
        "- DeFi (Decentralized Finance)\n"
        "- Crypto trading, investment or markets\n"
        "- Mining or consensus mechanisms\n"
        "- Crypto security or wallets\n"
        "- Crypto regulation or compliance\n"
        "- Web3 or crypto applications\n\n"
        'Start your reply with "YES" if it is, or "NO" if it is not, in capital '
        "letters, followed by a short explanation."
    )


CUSTOM_LESSON_SYSTEM_PROMPT = (
    "You are a cryptocurrency education specialist creating well-structured lessons. "
    "You reply with a single JSON object and nothing else."
)


def custom_lesson_prompt(topic: str, difficulty: str) -> str:
    return (
        f'Create a cryptocurrency lesson about "{topic}" at a {difficulty} level, in English.\n\n'
        "Format your response as a JSON object with this structure:\n"
        "{\n"
        '  "title": "Descriptive lesson title",\n'
        '  "description": "Two or three sentence overview",\n'
        '  "topics": [\n'
        "    {\n"
        '      "title": "Topic title",\n'
        '      "subtopics": [\n'
        "        {\n"
        '          "title": "Subtopic title",\n'
        '          "objective": "Clear learning objective",\n'
        '          "key_concepts": ["3-5 key concepts"],\n'
        '          "resources": [\n'
        '            {"title": "Resource title", "url": "https://...", "type": "link", '
        '"description": "What it covers"}\n'
        "          ],\n"
        '          "quiz_questions": [\n'
        '            {"question": "Question?", "options": ["A", "B", "C", "D"], '
        '"answer": 0, "explanation": "Why"}\n'
        "          ]\n"
        "        }\n"
        "      ]\n"
        "    }\n"
        "  ],\n"
        '  "final_test": [same shape as quiz_questions]\n'
        "}\n\n"
        "Requirements:\n"
        "- Exactly 2 topics, each with exactly 2 subtopics.\n"
        "- Each subtopic has 2 resources and 3 quiz questions.\n"
        '- Resource "type" is one of link, video or text; URLs point to real resources.\n'
        '- "answer" is the index (0-3) of the correct option; every question has 4 options.\n'
        "- The final test has 10 questions covering the whole lesson.\n"
        f"- Vocabulary and depth suit a {difficulty} learner."
    )


def final_assessment_prompt(
    lesson_title: str,
    quiz_results: Sequence[Dict[str, Any]],
    final_test_score: Optional[int],
) -> str:
    final = f"{final_test_score}%" if final_test_score is not None else "not taken"
    return (
        "As an educational AI, analyze these learning results and provide an assessment.\n\n"
        f'Lesson: "{lesson_title}"\n\n'
        f"Quiz results: {json.dumps(list(quiz_results))}\n\n"
        f"Final test score: {final}\n\n"
        "Format your response as a JSON object with this structure:\n"
        "{\n"
        '  "score": 85,\n'
        '  "strengths": ["Concept A", "Concept B"],\n'
        '  "improvement_areas": ["Concept C"],\n'
        '  "recommendations": ["Specific action"],\n'
        '  "encouragement": "Encouraging message"\n'
        "}\n"
        '"score" is the overall percentage (0-100).'
    )
