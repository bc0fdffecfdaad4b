"""
Lesson content models - lessons, topics, subtopics, resources and quiz questions.

Content is authored by admins (outside this service) or generated on demand
as a learner's custom lesson. It is read-only for the learner flow.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cryptotutor.kernel.models.base import Base


class ResourceType(str, Enum):
    """Kinds of supporting material attached to a subtopic."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    LINK = "link"


class Lesson(Base):
    """Aggregate root: an ordered tree of topics and subtopics."""

    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default="book")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Set on AI-generated custom lessons; only the owner sees them in listings
    owner_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    topics: Mapped[List["Topic"]] = relationship(
        "Topic",
        back_populates="lesson",
        order_by="Topic.order",
        cascade="all, delete-orphan",
    )
    final_test_questions: Mapped[List["FinalTestQuestion"]] = relationship(
        "FinalTestQuestion",
        back_populates="lesson",
        order_by="FinalTestQuestion.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Lesson {self.id} {self.title!r}>"


class Topic(Base):
    """A chapter of a lesson."""

    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="topics")
    subtopics: Mapped[List["Subtopic"]] = relationship(
        "Subtopic",
        back_populates="topic",
        order_by="Subtopic.order",
        cascade="all, delete-orphan",
    )


class Subtopic(Base):
    """Smallest unit of content and the unit of completion tracking."""

    __tablename__ = "subtopics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    topic_id: Mapped[int] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    objective: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    key_concepts: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    topic: Mapped["Topic"] = relationship("Topic", back_populates="subtopics")
    resources: Mapped[List["Resource"]] = relationship(
        "Resource",
        back_populates="subtopic",
        order_by="Resource.id",
        cascade="all, delete-orphan",
    )
    quiz_questions: Mapped[List["QuizQuestion"]] = relationship(
        "QuizQuestion",
        back_populates="subtopic",
        order_by="QuizQuestion.id",
        cascade="all, delete-orphan",
    )


class Resource(Base):
    """Read-only reference material for a subtopic."""

    __tablename__ = "resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subtopic_id: Mapped[int] = mapped_column(
        ForeignKey("subtopics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=ResourceType.TEXT.value)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purpose: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recommended_when: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_optional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    subtopic: Mapped["Subtopic"] = relationship("Subtopic", back_populates="resources")


class QuizQuestion(Base):
    """Pre-authored practice question for a subtopic."""

    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subtopic_id: Mapped[int] = mapped_column(
        ForeignKey("subtopics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    answer: Mapped[int] = mapped_column(Integer, nullable=False)  # index of correct option
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    subtopic: Mapped["Subtopic"] = relationship("Subtopic", back_populates="quiz_questions")


class FinalTestQuestion(Base):
    """Lesson-level assessment question."""

    __tablename__ = "final_test_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    answer: Mapped[int] = mapped_column(Integer, nullable=False)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="final_test_questions")
