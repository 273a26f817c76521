"""
The closed set of transitions the store accepts.

Every action carries fully built values (ids and timestamps included) so
the reducer stays a pure function of (state, action).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from feedboard.schemas import Board, Comment, Company, Feedback, FeedbackStatus, User


@dataclass(frozen=True)
class HydrateState:
    """Replace the collections with a loaded snapshot and finish loading."""

    companies: tuple[Company, ...] = ()
    boards: tuple[Board, ...] = ()
    feedbacks: tuple[Feedback, ...] = ()
    comments: tuple[Comment, ...] = ()
    current_user: Optional[User] = None


@dataclass(frozen=True)
class FinishLoading:
    """Clear the loading flag without touching the collections."""


@dataclass(frozen=True)
class SetUser:
    user: Optional[User]


@dataclass(frozen=True)
class AddCompany:
    company: Company


@dataclass(frozen=True)
class UpdateCompany:
    company: Company


@dataclass(frozen=True)
class DeleteCompany:
    company_id: str


@dataclass(frozen=True)
class AddBoard:
    board: Board


@dataclass(frozen=True)
class UpdateBoard:
    board: Board


@dataclass(frozen=True)
class DeleteBoard:
    board_id: str


@dataclass(frozen=True)
class AddFeedback:
    feedback: Feedback


@dataclass(frozen=True)
class UpdateFeedback:
    feedback: Feedback


@dataclass(frozen=True)
class UpdateFeedbackStatus:
    feedback_id: str
    status: FeedbackStatus
    at: datetime


@dataclass(frozen=True)
class DeleteFeedback:
    feedback_id: str


@dataclass(frozen=True)
class ToggleUpvote:
    feedback_id: str
    user_id: str
    at: datetime


@dataclass(frozen=True)
class AddComment:
    comment: Comment


@dataclass(frozen=True)
class DeleteComment:
    comment_id: str


Action = Union[
    HydrateState,
    FinishLoading,
    SetUser,
    AddCompany,
    UpdateCompany,
    DeleteCompany,
    AddBoard,
    UpdateBoard,
    DeleteBoard,
    AddFeedback,
    UpdateFeedback,
    UpdateFeedbackStatus,
    DeleteFeedback,
    ToggleUpvote,
    AddComment,
    DeleteComment,
]
