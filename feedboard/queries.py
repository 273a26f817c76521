"""
Read-only lookups over an AppState.

Everything here is recomputed on demand; dangling references simply yield
nothing.
"""

from __future__ import annotations

from typing import Optional

from feedboard.schemas import Board, Comment, Company, Feedback, User
from feedboard.state import AppState


def get_company(state: AppState, company_id: str) -> Optional[Company]:
    return next((c for c in state.companies if c.id == company_id), None)


def get_board(state: AppState, board_id: str) -> Optional[Board]:
    return next((b for b in state.boards if b.id == board_id), None)


def get_feedback(state: AppState, feedback_id: str) -> Optional[Feedback]:
    return next((f for f in state.feedbacks if f.id == feedback_id), None)


def get_company_by_slug(state: AppState, slug: str) -> Optional[Company]:
    """First company with this exact slug; slugs are not unique."""
    return next((c for c in state.companies if c.slug == slug), None)


def get_board_by_slug(
    state: AppState, company_slug: str, board_slug: str
) -> Optional[Board]:
    company = get_company_by_slug(state, company_slug)
    if company is None:
        return None
    return next(
        (
            b
            for b in state.boards
            if b.company_id == company.id and b.slug == board_slug
        ),
        None,
    )


def get_boards_by_company(state: AppState, company_id: str) -> list[Board]:
    return [b for b in state.boards if b.company_id == company_id]


def get_feedbacks_by_board(state: AppState, board_id: str) -> list[Feedback]:
    return [f for f in state.feedbacks if f.board_id == board_id]


def get_comments_by_feedback(state: AppState, feedback_id: str) -> list[Comment]:
    return [c for c in state.comments if c.feedback_id == feedback_id]


def is_owner(company: Company, user: Optional[User]) -> bool:
    """Anonymous visitors never own a company, even an anonymously created one."""
    if user is None or company.owner_id is None:
        return False
    return company.owner_id == user.id
