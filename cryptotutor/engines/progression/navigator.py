"""
Sidebar Navigator - completion, availability and progress over a lesson tree.

Stateless apart from the tree it wraps: every answer is recomputed from the
subtopics' completion flags, so the navigator never disagrees with the
session it projects. Malformed trees (None or empty collections, indexes out
of range) answer "not completed", "not available" and 0% instead of raising.
"""

from typing import List, Optional

from pydantic import BaseModel

from cryptotutor.engines.progression.scoring import percentage
from cryptotutor.schemas.lesson import LessonTree, SubtopicNode, TopicNode


class SidebarSubtopic(BaseModel):
    id: int
    title: str
    completed: bool
    available: bool
    current: bool


class SidebarTopic(BaseModel):
    id: int
    title: str
    completed: bool
    current: bool
    completed_subtopics: int
    total_subtopics: int
    subtopics: List[SidebarSubtopic]


class SidebarView(BaseModel):
    """Everything a client needs to render the lesson sidebar."""

    lesson_id: int
    lesson_title: str
    overall_progress: int
    topics: List[SidebarTopic]


class SidebarNavigator:
    """Read-only projection of a lesson tree plus a current position."""

    def __init__(self, lesson: Optional[LessonTree]):
        self.lesson = lesson

    def _topics(self) -> List[TopicNode]:
        if self.lesson is None or not self.lesson.topics:
            return []
        return self.lesson.topics

    def _topic(self, topic_index: int) -> Optional[TopicNode]:
        topics = self._topics()
        if not 0 <= topic_index < len(topics):
            return None
        return topics[topic_index]

    def _subtopics(self, topic_index: int) -> List[SubtopicNode]:
        topic = self._topic(topic_index)
        if topic is None or not topic.subtopics:
            return []
        return topic.subtopics

    def subtopic(self, topic_index: int, subtopic_index: int) -> Optional[SubtopicNode]:
        subtopics = self._subtopics(topic_index)
        if not 0 <= subtopic_index < len(subtopics):
            return None
        return subtopics[subtopic_index]

    def is_topic_completed(self, topic_index: int) -> bool:
        """
        True when every subtopic of the topic is completed.

        A topic without subtopics is not completed, so it cannot unlock the
        topic after it.
        """
        subtopics = self._subtopics(topic_index)
        if not subtopics:
            return False
        return all(s.completed for s in subtopics)

    def is_subtopic_completed(self, topic_index: int, subtopic_index: int) -> bool:
        node = self.subtopic(topic_index, subtopic_index)
        return bool(node is not None and node.completed)

    def is_subtopic_available(self, topic_index: int, subtopic_index: int) -> bool:
        """
        Strict linear unlocking:
        - (0, 0) is always available (when it exists)
        - (t, s>0) needs (t, s-1) completed
        - (t>0, 0) needs the whole of topic t-1 completed
        """
        if self.subtopic(topic_index, subtopic_index) is None:
            return False
        if topic_index == 0 and subtopic_index == 0:
            return True
        if subtopic_index > 0:
            return self.is_subtopic_completed(topic_index, subtopic_index - 1)
        return self.is_topic_completed(topic_index - 1)

    def completed_subtopics(self, topic_index: int) -> int:
        return sum(1 for s in self._subtopics(topic_index) if s.completed)

    def total_subtopics(self) -> int:
        return sum(len(self._subtopics(i)) for i in range(len(self._topics())))

    def overall_progress(self) -> int:
        """Percent of all subtopics completed, 0 for an empty lesson."""
        completed = sum(self.completed_subtopics(i) for i in range(len(self._topics())))
        return percentage(completed, self.total_subtopics())

    def build(self, topic_index: int = 0, subtopic_index: int = 0) -> SidebarView:
        """Project the whole tree for the given current position."""
        topics: List[SidebarTopic] = []
        for t_idx, topic in enumerate(self._topics()):
            subtopics = [
                SidebarSubtopic(
                    id=sub.id,
                    title=sub.title,
                    completed=bool(sub.completed),
                    available=self.is_subtopic_available(t_idx, s_idx),
                    current=(t_idx == topic_index and s_idx == subtopic_index),
                )
                for s_idx, sub in enumerate(self._subtopics(t_idx))
            ]
            topics.append(
                SidebarTopic(
                    id=topic.id,
                    title=topic.title,
                    completed=self.is_topic_completed(t_idx),
                    current=(t_idx == topic_index),
                    completed_subtopics=self.completed_subtopics(t_idx),
                    total_subtopics=len(subtopics),
                    subtopics=subtopics,
                )
            )
        return SidebarView(
            lesson_id=self.lesson.id if self.lesson is not None else 0,
            lesson_title=self.lesson.title if self.lesson is not None else "",
            overall_progress=self.overall_progress(),
            topics=topics,
        )
