"""
Board listing helpers: search, filter, sort and per-status counts.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable, Optional

from feedboard.schemas import Feedback, FeedbackCategory, FeedbackStatus


class SortOption(StrEnum):
    MOST_VOTES = "most-votes"
    NEWEST = "newest"
    OLDEST = "oldest"
    MOST_COMMENTS = "most-comments"


def _matches_search(feedback: Feedback, query: str) -> bool:
    return query in feedback.title.lower() or query in feedback.description.lower()


def filter_feedbacks(
    feedbacks: Iterable[Feedback],
    *,
    search: Optional[str] = None,
    status: Optional[FeedbackStatus] = None,
    category: Optional[FeedbackCategory] = None,
    sort_by: SortOption = SortOption.MOST_VOTES,
) -> list[Feedback]:
    """
    Apply the board page filters and return a new, sorted list.

    Sorting is stable, so items that tie keep their insertion order.
    """
    items = list(feedbacks)
    if search:
        query = search.lower()
        items = [f for f in items if _matches_search(f, query)]
    if status is not None:
        items = [f for f in items if f.status == status]
    if category is not None:
        items = [f for f in items if f.category == category]

    sort_by = SortOption(sort_by)
    if sort_by == SortOption.NEWEST:
        items.sort(key=lambda f: f.created_at, reverse=True)
    elif sort_by == SortOption.OLDEST:
        items.sort(key=lambda f: f.created_at)
    elif sort_by == SortOption.MOST_VOTES:
        items.sort(key=lambda f: f.upvote_count, reverse=True)
    elif sort_by == SortOption.MOST_COMMENTS:
        items.sort(key=lambda f: f.comment_count, reverse=True)
    return items


def status_counts(feedbacks: Iterable[Feedback]) -> dict[FeedbackStatus, int]:
    counts = {status: 0 for status in FeedbackStatus}
    for feedback in feedbacks:
        counts[feedback.status] += 1
    return counts
