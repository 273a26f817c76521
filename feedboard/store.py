"""
FeedbackStore: the single writer over the feedback board state.

The store owns the current AppState, turns caller input into fully built
actions (ids, timestamps, current-user defaults), runs them through the
reducer and mirrors every applied change into storage once the initial
load has finished.
"""

from __future__ import annotations

import logging
import random
import string
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel

from feedboard import queries
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
from feedboard.persistence import SnapshotPersistence
from feedboard.reducer import reduce
from feedboard.schemas import (
    ANONYMOUS_ID,
    ANONYMOUS_NAME,
    Board,
    BoardInput,
    Comment,
    CommentInput,
    Company,
    CompanyInput,
    Feedback,
    FeedbackInput,
    FeedbackStatus,
    User,
)
from feedboard.slugs import slugify
from feedboard.state import INITIAL_STATE, AppState

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)
Listener = Callable[[AppState], None]

_BASE36 = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _anonymous_voter_id() -> str:
    return f"{ANONYMOUS_ID}-" + "".join(random.choices(_BASE36, k=9))


def _coerce(model: type[P], data: Union[P, Mapping[str, Any]]) -> P:
    if isinstance(data, model):
        return data
    return model.model_validate(data)


class FeedbackStore:
    """
    One instance per running application; pass it to whatever renders the UI.

    ``clock``, ``id_factory`` and ``anonymous_id_factory`` exist so tests can
    pin timestamps and ids.
    """

    def __init__(
        self,
        persistence: Optional[SnapshotPersistence] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
        anonymous_id_factory: Callable[[], str] = _anonymous_voter_id,
    ):
        self._persistence = persistence
        self._clock = clock
        self._new_id = id_factory
        self._anonymous_id = anonymous_id_factory
        self._state: AppState = INITIAL_STATE
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def current_user(self) -> Optional[User]:
        return self._state.current_user

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every applied change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> AppState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is previous:
            return self._state
        # The transition out of loading only mirrors what storage already holds.
        if not previous.is_loading:
            self._persist()
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _persist(self) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save(self._state)
        except Exception:
            logger.exception("Failed to write store snapshot to storage")

    def load(self) -> AppState:
        """Hydrate from storage and clear the loading flag, exactly once."""
        if not self._state.is_loading:
            logger.warning("Store already loaded; ignoring repeated load()")
            return self._state
        if self._persistence is None:
            return self.dispatch(FinishLoading())
        try:
            snapshot = self._persistence.load()
        except Exception:
            logger.exception("Failed to load store snapshot; starting empty")
            return self.dispatch(FinishLoading())
        return self.dispatch(
            HydrateState(
                companies=snapshot.companies,
                boards=snapshot.boards,
                feedbacks=snapshot.feedbacks,
                comments=snapshot.comments,
                current_user=snapshot.current_user,
            )
        )

    def _current_user_id(self) -> Optional[str]:
        user = self._state.current_user
        return user.id if user else None

    def login(self, name: str, email: str) -> User:
        # Every login is a fresh identity, even for a known email.
        user = User(id=self._new_id(), name=name, email=email, created_at=self._clock())
        self.dispatch(SetUser(user))
        return user

    def logout(self) -> None:
        self.dispatch(SetUser(None))

    def create_company(self, data: Union[CompanyInput, Mapping[str, Any]]) -> Company:
        data = _coerce(CompanyInput, data)
        company = Company(
            id=self._new_id(),
            name=data.name,
            slug=slugify(data.name),
            description=data.description,
            website=data.website,
            logo=data.logo,
            primary_color=data.primary_color,
            owner_id=self._current_user_id(),
            created_at=self._clock(),
        )
        self.dispatch(AddCompany(company))
        return company

    def update_company(self, company: Company) -> None:
        self.dispatch(UpdateCompany(company))

    def delete_company(self, company_id: str) -> None:
        self.dispatch(DeleteCompany(company_id))

    def create_board(self, data: Union[BoardInput, Mapping[str, Any]]) -> Board:
        data = _coerce(BoardInput, data)
        now = self._clock()
        board = Board(
            id=self._new_id(),
            name=data.name,
            slug=slugify(data.name),
            description=data.description,
            company_id=data.company_id,
            is_public=data.is_public,
            allow_anonymous=data.allow_anonymous,
            created_at=now,
            updated_at=now,
        )
        self.dispatch(AddBoard(board))
        return board

    def update_board(self, board: Board) -> None:
        self.dispatch(UpdateBoard(board.model_copy(update={"updated_at": self._clock()})))

    def delete_board(self, board_id: str) -> None:
        self.dispatch(DeleteBoard(board_id))

    def create_feedback(self, data: Union[FeedbackInput, Mapping[str, Any]]) -> Feedback:
        data = _coerce(FeedbackInput, data)
        user = self._state.current_user
        now = self._clock()
        feedback = Feedback(
            id=self._new_id(),
            title=data.title,
            description=data.description,
            category=data.category,
            status=FeedbackStatus.UNDER_REVIEW,
            board_id=data.board_id,
            author_id=user.id if user else None,
            author_name=data.author_name or (user.name if user else None) or ANONYMOUS_NAME,
            author_email=data.author_email or (user.email if user else None),
            # Authors implicitly vote for their own feedback.
            upvotes=(user.id,) if user else (),
            comment_count=0,
            created_at=now,
            updated_at=now,
        )
        self.dispatch(AddFeedback(feedback))
        return feedback

    def update_feedback(self, feedback: Feedback) -> None:
        self.dispatch(
            UpdateFeedback(feedback.model_copy(update={"updated_at": self._clock()}))
        )

    def update_feedback_status(self, feedback_id: str, status: FeedbackStatus) -> None:
        self.dispatch(
            UpdateFeedbackStatus(
                feedback_id=feedback_id,
                status=FeedbackStatus(status),
                at=self._clock(),
            )
        )

    def delete_feedback(self, feedback_id: str) -> None:
        self.dispatch(DeleteFeedback(feedback_id))

    def toggle_upvote(self, feedback_id: str) -> None:
        # Anonymous visitors get a new id per call, so their votes only add.
        user_id = self._current_user_id() or self._anonymous_id()
        self.dispatch(ToggleUpvote(feedback_id=feedback_id, user_id=user_id, at=self._clock()))

    def add_comment(self, data: Union[CommentInput, Mapping[str, Any]]) -> Comment:
        data = _coerce(CommentInput, data)
        user = self._state.current_user
        comment = Comment(
            id=self._new_id(),
            content=data.content,
            feedback_id=data.feedback_id,
            author_id=user.id if user else None,
            author_name=user.name if user else ANONYMOUS_NAME,
            is_official=data.is_official,
            created_at=self._clock(),
        )
        self.dispatch(AddComment(comment))
        return comment

    def delete_comment(self, comment_id: str) -> None:
        self.dispatch(DeleteComment(comment_id))

    def get_company(self, company_id: str) -> Optional[Company]:
        return queries.get_company(self._state, company_id)

    def get_board(self, board_id: str) -> Optional[Board]:
        return queries.get_board(self._state, board_id)

    def get_feedback(self, feedback_id: str) -> Optional[Feedback]:
        return queries.get_feedback(self._state, feedback_id)

    def get_company_by_slug(self, slug: str) -> Optional[Company]:
        return queries.get_company_by_slug(self._state, slug)

    def get_board_by_slug(self, company_slug: str, board_slug: str) -> Optional[Board]:
        return queries.get_board_by_slug(self._state, company_slug, board_slug)

    def get_boards_by_company(self, company_id: str) -> list[Board]:
        return queries.get_boards_by_company(self._state, company_id)

    def get_feedbacks_by_board(self, board_id: str) -> list[Feedback]:
        return queries.get_feedbacks_by_board(self._state, board_id)

    def get_comments_by_feedback(self, feedback_id: str) -> list[Comment]:
        return queries.get_comments_by_feedback(self._state, feedback_id)

    def is_owner(self, company: Company) -> bool:
        return queries.is_owner(company, self._state.current_user)
