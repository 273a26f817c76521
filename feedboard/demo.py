"""
Demo company, board and feedback used to show off a populated board.
"""

from __future__ import annotations

import logging

from feedboard.schemas import (
    Board,
    BoardInput,
    Company,
    CompanyInput,
    FeedbackCategory,
    FeedbackInput,
    FeedbackStatus,
)
from feedboard.store import FeedbackStore

logger = logging.getLogger(__name__)

DEMO_COMPANY = CompanyInput(
    name="Acme SaaS",
    description="The best SaaS product for your business needs",
    website="https://acme.example.com",
)

DEMO_BOARD_NAME = "Feature Requests"
DEMO_BOARD_DESCRIPTION = "Share your ideas and help us build the features you need"

# (title, description, category, status, author)
DEMO_FEEDBACK = [
    (
        "Dark mode support",
        "It would be great to have a dark mode option for the app. This would help "
        "reduce eye strain during late-night work sessions and save battery on OLED screens.",
        FeedbackCategory.FEATURE,
        FeedbackStatus.IN_PROGRESS,
        "Sarah Chen",
    ),
    (
        "Export data to CSV",
        "Need the ability to export all my data to CSV format for reporting purposes. "
        "This is essential for our quarterly reports.",
        FeedbackCategory.FEATURE,
        FeedbackStatus.PLANNED,
        "Michael Roberts",
    ),
    (
        "Mobile app improvements",
        "The mobile app is slow and sometimes crashes when loading large datasets. "
        "Please optimize the performance.",
        FeedbackCategory.BUG,
        FeedbackStatus.UNDER_REVIEW,
        "Alex Thompson",
    ),
    (
        "Integration with Slack",
        "Would love to receive notifications and updates directly in Slack. This would "
        "help our team stay informed without switching contexts.",
        FeedbackCategory.FEATURE,
        FeedbackStatus.COMPLETED,
        "Emily Davis",
    ),
    (
        "Better search functionality",
        "The current search is basic. Need advanced filters, boolean operators, and the "
        "ability to save search queries.",
        FeedbackCategory.IMPROVEMENT,
        FeedbackStatus.PLANNED,
        "David Wilson",
    ),
    (
        "Team collaboration features",
        "Add real-time collaboration so multiple team members can work on the same "
        "project simultaneously.",
        FeedbackCategory.FEATURE,
        FeedbackStatus.UNDER_REVIEW,
        "Jennifer Park",
    ),
]


def setup_demo_board(store: FeedbackStore) -> tuple[Company, Board]:
    """
    Create the demo company and board unless they already exist.

    Feedback is only seeded when the board itself is created here, so
    running this twice never duplicates items.
    """
    company = store.get_company_by_slug("acme-saas")
    if company is None:
        company = store.create_company(DEMO_COMPANY)

    board = store.get_board_by_slug(company.slug, "feature-requests")
    if board is not None:
        return company, board

    board = store.create_board(
        BoardInput(
            name=DEMO_BOARD_NAME,
            description=DEMO_BOARD_DESCRIPTION,
            company_id=company.id,
            is_public=True,
            allow_anonymous=True,
        )
    )
    for title, description, category, status, author in DEMO_FEEDBACK:
        feedback = store.create_feedback(
            FeedbackInput(
                title=title,
                description=description,
                category=category,
                board_id=board.id,
                author_name=author,
            )
        )
        if status != FeedbackStatus.UNDER_REVIEW:
            store.update_feedback_status(feedback.id, status)

    logger.info("Seeded demo board with %d feedback items", len(DEMO_FEEDBACK))
    return company, board
