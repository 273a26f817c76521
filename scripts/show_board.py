"""
CLI helper to print a board's feedback from the configured storage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from feedboard.config import get_settings
from feedboard.dependencies import build_key_value_storage
from feedboard.persistence import SnapshotPersistence
from feedboard.schemas import CATEGORY_LABELS, STATUS_LABELS, FeedbackCategory, FeedbackStatus
from feedboard.store import FeedbackStore
from feedboard.views import SortOption, filter_feedbacks, status_counts


def main() -> int:
    parser = argparse.ArgumentParser(description="Show feedback on a board")
    parser.add_argument("company_slug", help="Company slug, e.g. acme-saas")
    parser.add_argument("board_slug", help="Board slug, e.g. feature-requests")
    parser.add_argument(
        "--sort",
        choices=[option.value for option in SortOption],
        default=SortOption.MOST_VOTES.value,
    )
    parser.add_argument(
        "--status",
        choices=[status.value for status in FeedbackStatus],
        default=None,
    )
    parser.add_argument(
        "--category",
        choices=[category.value for category in FeedbackCategory],
        default=None,
    )
    parser.add_argument("--search", type=str, default=None)
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s:%(message)s")

    store = FeedbackStore(
        SnapshotPersistence(
            build_key_value_storage(settings), key_prefix=settings.storage_key_prefix
        )
    )
    store.load()

    board = store.get_board_by_slug(args.company_slug, args.board_slug)
    if board is None:
        print(f"Board not found: {args.company_slug}/{args.board_slug}", file=sys.stderr)
        return 1

    all_feedback = store.get_feedbacks_by_board(board.id)
    items = filter_feedbacks(
        all_feedback,
        search=args.search,
        status=FeedbackStatus(args.status) if args.status else None,
        category=FeedbackCategory(args.category) if args.category else None,
        sort_by=SortOption(args.sort),
    )

    print(f"{board.name} ({len(items)} of {len(all_feedback)} items)")
    counts = status_counts(all_feedback)
    print(", ".join(f"{STATUS_LABELS[s]}: {n}" for s, n in counts.items()))
    for feedback in items:
        category = CATEGORY_LABELS[feedback.category]
        print(
            f"{feedback.upvote_count:>4} votes  {feedback.comment_count:>3} comments  "
            f"[{STATUS_LABELS[feedback.status]}] {category.emoji} {feedback.title}"
            f" ({feedback.author_name})"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
