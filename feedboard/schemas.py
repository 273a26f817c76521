"""
Pydantic schemas for the feedback board entities and their input payloads.

Attributes are snake_case in Python; the persisted JSON uses camelCase
aliases so snapshots keep the layout the web client has always written.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# Serialized stand-ins for "no signed-in user".
ANONYMOUS_ID = "anonymous"
ANONYMOUS_NAME = "Anonymous"


class FeedbackStatus(StrEnum):
    UNDER_REVIEW = "under-review"
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class FeedbackCategory(StrEnum):
    FEATURE = "feature"
    BUG = "bug"
    IMPROVEMENT = "improvement"
    QUESTION = "question"
    OTHER = "other"


@dataclass(frozen=True)
class CategoryLabel:
    label: str
    emoji: str


STATUS_LABELS: dict[FeedbackStatus, str] = {
    FeedbackStatus.UNDER_REVIEW: "Under Review",
    FeedbackStatus.PLANNED: "Planned",
    FeedbackStatus.IN_PROGRESS: "In Progress",
    FeedbackStatus.COMPLETED: "Completed",
}

CATEGORY_LABELS: dict[FeedbackCategory, CategoryLabel] = {
    FeedbackCategory.FEATURE: CategoryLabel("Feature Request", "✨"),
    FeedbackCategory.BUG: CategoryLabel("Bug Report", "🐛"),
    FeedbackCategory.IMPROVEMENT: CategoryLabel("Improvement", "📈"),
    FeedbackCategory.QUESTION: CategoryLabel("Question", "❓"),
    FeedbackCategory.OTHER: CategoryLabel("Other", "💬"),
}


def _anonymous_to_none(value):
    if value == ANONYMOUS_ID:
        return None
    return value


class _Entity(BaseModel):
    """Immutable stored record; new versions are produced with model_copy."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(_Entity):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime


class Company(_Entity):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    # None means the company was created without a signed-in user.
    owner_id: Optional[str] = None
    created_at: datetime

    @field_validator("owner_id", mode="before")
    @classmethod
    def owner_from_sentinel(cls, value):
        return _anonymous_to_none(value)

    @field_serializer("owner_id", when_used="json")
    def owner_to_sentinel(self, value: Optional[str]) -> str:
        return value or ANONYMOUS_ID


class Board(_Entity):
    id: str
    name: str
    slug: str
    description: str = ""
    company_id: str
    is_public: bool = True
    allow_anonymous: bool = True
    created_at: datetime
    updated_at: datetime


class Feedback(_Entity):
    id: str
    title: str
    description: str
    category: FeedbackCategory
    status: FeedbackStatus = FeedbackStatus.UNDER_REVIEW
    board_id: str
    author_id: Optional[str] = None
    author_name: str
    author_email: Optional[str] = None
    upvotes: tuple[str, ...] = ()
    comment_count: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    @field_validator("author_id", mode="before")
    @classmethod
    def author_from_sentinel(cls, value):
        return _anonymous_to_none(value)

    @field_validator("upvotes")
    @classmethod
    def dedupe_upvotes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Keep first occurrence, drop repeats.
        return tuple(dict.fromkeys(value))

    @field_serializer("author_id", when_used="json")
    def author_to_sentinel(self, value: Optional[str]) -> str:
        return value or ANONYMOUS_ID

    @property
    def upvote_count(self) -> int:
        return len(self.upvotes)


class Comment(_Entity):
    id: str
    content: str
    feedback_id: str
    author_id: Optional[str] = None
    author_name: str
    is_official: bool = False
    created_at: datetime

    @field_validator("author_id", mode="before")
    @classmethod
    def author_from_sentinel(cls, value):
        return _anonymous_to_none(value)

    @field_serializer("author_id", when_used="json")
    def author_to_sentinel(self, value: Optional[str]) -> str:
        return value or ANONYMOUS_ID


class CompanyInput(_Payload):
    name: str
    description: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None


class BoardInput(_Payload):
    name: str
    description: str = ""
    company_id: str
    is_public: bool = True
    allow_anonymous: bool = True


class FeedbackInput(_Payload):
    title: str
    description: str
    category: FeedbackCategory
    board_id: str
    author_name: Optional[str] = None
    author_email: Optional[str] = None


class CommentInput(_Payload):
    content: str
    feedback_id: str
    is_official: bool = False
