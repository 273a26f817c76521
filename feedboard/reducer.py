"""
Pure transition function for the feedback store.

``reduce(state, action)`` never mutates ``state``; it returns a new
``AppState`` (or ``state`` itself when the action targets an id that is not
present). Cascades and the comment counter are applied inside the same
transition so callers never observe a half-applied change.
"""

from __future__ import annotations

import typing
from dataclasses import replace
from typing import Callable, Iterable, TypeVar

from feedboard.actions import (
    Action,
    AddBoard,
    AddComment,
    AddCompany,
    AddFeedback,
    DeleteBoard,
    DeleteComment,
    DeleteCompany,
    DeleteFeedback,
    FinishLoading,
    HydrateState,
    SetUser,
    ToggleUpvote,
    UpdateBoard,
    UpdateCompany,
    UpdateFeedback,
    UpdateFeedbackStatus,
)
from feedboard.state import AppState

T = TypeVar("T")


def _find(items: Iterable[T], item_id: str) -> T | None:
    for item in items:
        if item.id == item_id:
            return item
    return None


def _replace_item(
    items: tuple[T, ...], item_id: str, build: Callable[[T], T]
) -> tuple[T, ...] | None:
    """Return items with the matching entry rebuilt, or None if id is absent."""
    for index, item in enumerate(items):
        if item.id == item_id:
            return items[:index] + (build(item),) + items[index + 1 :]
    return None


def _hydrate(state: AppState, action: HydrateState) -> AppState:
    return replace(
        state,
        companies=tuple(action.companies),
        boards=tuple(action.boards),
        feedbacks=tuple(action.feedbacks),
        comments=tuple(action.comments),
        current_user=action.current_user,
        is_loading=False,
    )


def _finish_loading(state: AppState, action: FinishLoading) -> AppState:
    if not state.is_loading:
        return state
    return replace(state, is_loading=False)


def _set_user(state: AppState, action: SetUser) -> AppState:
    if action.user == state.current_user:
        return state
    return replace(state, current_user=action.user)


def _add_company(state: AppState, action: AddCompany) -> AppState:
    return replace(state, companies=state.companies + (action.company,))


def _update_company(state: AppState, action: UpdateCompany) -> AppState:
    companies = _replace_item(
        state.companies,
        action.company.id,
        lambda current: action.company.model_copy(
            update={"created_at": current.created_at}
        ),
    )
    if companies is None:
        return state
    return replace(state, companies=companies)


def _delete_company(state: AppState, action: DeleteCompany) -> AppState:
    company = _find(state.companies, action.company_id)
    if company is None:
        return state
    # Boards go with the company; their feedback and comments stay behind.
    return replace(
        state,
        companies=tuple(c for c in state.companies if c.id != company.id),
        boards=tuple(b for b in state.boards if b.company_id != company.id),
    )


def _add_board(state: AppState, action: AddBoard) -> AppState:
    return replace(state, boards=state.boards + (action.board,))


def _update_board(state: AppState, action: UpdateBoard) -> AppState:
    boards = _replace_item(
        state.boards,
        action.board.id,
        lambda current: action.board.model_copy(
            update={"created_at": current.created_at}
        ),
    )
    if boards is None:
        return state
    return replace(state, boards=boards)


def _delete_board(state: AppState, action: DeleteBoard) -> AppState:
    if _find(state.boards, action.board_id) is None:
        return state
    # Feedback goes with the board; comments on that feedback stay behind.
    return replace(
        state,
        boards=tuple(b for b in state.boards if b.id != action.board_id),
        feedbacks=tuple(f for f in state.feedbacks if f.board_id != action.board_id),
    )


def _add_feedback(state: AppState, action: AddFeedback) -> AppState:
    return replace(state, feedbacks=state.feedbacks + (action.feedback,))


def _update_feedback(state: AppState, action: UpdateFeedback) -> AppState:
    incoming = action.feedback
    feedbacks = _replace_item(
        state.feedbacks,
        incoming.id,
        lambda current: incoming.model_copy(
            update={
                "created_at": current.created_at,
                "comment_count": current.comment_count,
                "upvotes": tuple(dict.fromkeys(incoming.upvotes)),
            }
        ),
    )
    if feedbacks is None:
        return state
    return replace(state, feedbacks=feedbacks)


def _update_feedback_status(state: AppState, action: UpdateFeedbackStatus) -> AppState:
    feedbacks = _replace_item(
        state.feedbacks,
        action.feedback_id,
        lambda current: current.model_copy(
            update={"status": action.status, "updated_at": action.at}
        ),
    )
    if feedbacks is None:
        return state
    return replace(state, feedbacks=feedbacks)


def _delete_feedback(state: AppState, action: DeleteFeedback) -> AppState:
    if _find(state.feedbacks, action.feedback_id) is None:
        return state
    return replace(
        state,
        feedbacks=tuple(f for f in state.feedbacks if f.id != action.feedback_id),
        comments=tuple(c for c in state.comments if c.feedback_id != action.feedback_id),
    )


def _toggle_upvote(state: AppState, action: ToggleUpvote) -> AppState:
    def toggle(current):
        if action.user_id in current.upvotes:
            upvotes = tuple(u for u in current.upvotes if u != action.user_id)
        else:
            upvotes = current.upvotes + (action.user_id,)
        return current.model_copy(update={"upvotes": upvotes, "updated_at": action.at})

    feedbacks = _replace_item(state.feedbacks, action.feedback_id, toggle)
    if feedbacks is None:
        return state
    return replace(state, feedbacks=feedbacks)


def _add_comment(state: AppState, action: AddComment) -> AppState:
    comment = action.comment
    feedbacks = _replace_item(
        state.feedbacks,
        comment.feedback_id,
        lambda current: current.model_copy(
            update={"comment_count": current.comment_count + 1}
        ),
    )
    return replace(
        state,
        comments=state.comments + (comment,),
        feedbacks=state.feedbacks if feedbacks is None else feedbacks,
    )


def _delete_comment(state: AppState, action: DeleteComment) -> AppState:
    comment = _find(state.comments, action.comment_id)
    if comment is None:
        return state
    feedbacks = _replace_item(
        state.feedbacks,
        comment.feedback_id,
        lambda current: current.model_copy(
            update={"comment_count": max(0, current.comment_count - 1)}
        ),
    )
    return replace(
        state,
        comments=tuple(c for c in state.comments if c.id != comment.id),
        feedbacks=state.feedbacks if feedbacks is None else feedbacks,
    )


_HANDLERS: dict[type, Callable[[AppState, typing.Any], AppState]] = {
    HydrateState: _hydrate,
    FinishLoading: _finish_loading,
    SetUser: _set_user,
    AddCompany: _add_company,
    UpdateCompany: _update_company,
    DeleteCompany: _delete_company,
    AddBoard: _add_board,
    UpdateBoard: _update_board,
    DeleteBoard: _delete_board,
    AddFeedback: _add_feedback,
    UpdateFeedback: _update_feedback,
    UpdateFeedbackStatus: _update_feedback_status,
    DeleteFeedback: _delete_feedback,
    ToggleUpvote: _toggle_upvote,
    AddComment: _add_comment,
    DeleteComment: _delete_comment,
}

_missing = set(typing.get_args(Action)) - set(_HANDLERS)
if _missing:
    raise RuntimeError(
        f"No reducer handler for: {sorted(cls.__name__ for cls in _missing)}"
    )


def reduce(state: AppState, action: Action) -> AppState:
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown store action: {action!r}")
    return handler(state, action)
