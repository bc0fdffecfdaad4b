"""
Lesson tree schemas.

The same models back the HTTP responses and the in-memory tree a
LessonSession walks. Collections are Optional so a malformed tree can still
be loaded and degrade to safe defaults in the navigator.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from cryptotutor.schemas.quiz import GeneratedQuestion


class ResourceSchema(BaseModel):
    """Supporting material attached to a subtopic."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str = "text"
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    purpose: Optional[str] = None
    content_tags: List[str] = Field(default_factory=list)
    recommended_when: Optional[str] = None
    is_optional: bool = True


class SubtopicNode(BaseModel):
    """Subtopic annotated with the learner's progress."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    objective: Optional[str] = None
    key_concepts: List[str] = Field(default_factory=list)
    resources: Optional[List[ResourceSchema]] = None
    completed: bool = False
    db_quiz_score: Optional[int] = None
    ai_quiz_score: Optional[int] = None


class TopicNode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    order: int = 0
    subtopics: Optional[List[SubtopicNode]] = None


class LessonTree(BaseModel):
    """A lesson with its ordered topics and subtopics."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    level: Optional[str] = None
    language: Optional[str] = None
    icon: Optional[str] = None
    owner_id: Optional[int] = None
    topics: Optional[List[TopicNode]] = None


class LessonSummary(BaseModel):
    """Lesson list entry with the learner's overall progress."""

    id: int
    title: str
    description: Optional[str] = None
    level: Optional[str] = None
    language: Optional[str] = None
    icon: Optional[str] = None
    topic_count: int = 0
    subtopic_count: int = 0
    completed_subtopics: int = 0
    progress: int = 0


class SubtopicDetail(BaseModel):
    """Subtopic as served by /subtopics/{id}."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    topic_id: int
    title: str
    objective: Optional[str] = None
    key_concepts: List[str] = Field(default_factory=list)
    order: int = 0
    resources: List[ResourceSchema] = Field(default_factory=list)


class CustomLessonRequest(BaseModel):
    """Body for POST /lessons/custom."""

    user_id: int
    topic: str = Field(..., min_length=1, max_length=200)
    difficulty: Literal["beginner", "intermediate", "advanced"] = "beginner"


class GeneratedResource(BaseModel):
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    type: Literal["link", "video", "text"] = "link"
    description: Optional[str] = None


class GeneratedSubtopic(BaseModel):
    title: str = Field(..., min_length=1)
    objective: str = Field(..., min_length=1)
    key_concepts: List[str] = Field(default_factory=list)
    resources: List[GeneratedResource] = Field(default_factory=list)
    quiz_questions: List[GeneratedQuestion] = Field(..., min_length=1)


class GeneratedTopic(BaseModel):
    title: str = Field(..., min_length=1)
    subtopics: List[GeneratedSubtopic] = Field(..., min_length=1)


class GeneratedLessonPayload(BaseModel):
    """
    Lesson object the model is asked to return.

    Validated as a whole like a generated quiz: one malformed question or an
    empty topic rejects the lesson.
    """

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    topics: List[GeneratedTopic] = Field(..., min_length=1)
    final_test: List[GeneratedQuestion] = Field(default_factory=list)
