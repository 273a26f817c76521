"""
Immutable snapshot of everything the store holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from feedboard.schemas import Board, Comment, Company, Feedback, User


@dataclass(frozen=True)
class AppState:
    companies: tuple[Company, ...] = ()
    boards: tuple[Board, ...] = ()
    feedbacks: tuple[Feedback, ...] = ()
    comments: tuple[Comment, ...] = ()
    current_user: Optional[User] = None
    # Cleared once the initial load from storage finishes; never set again.
    is_loading: bool = True


INITIAL_STATE = AppState()
