"""
Snapshot persistence: mirrors the store into five fixed storage keys.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from feedboard.schemas import Board, Comment, Company, Feedback, User
from feedboard.state import AppState
from feedboard.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "feedback-board"

_COMPANIES = TypeAdapter(tuple[Company, ...])
_BOARDS = TypeAdapter(tuple[Board, ...])
_FEEDBACKS = TypeAdapter(tuple[Feedback, ...])
_COMMENTS = TypeAdapter(tuple[Comment, ...])
_USER = TypeAdapter(Optional[User])


@dataclass(frozen=True)
class StorageKeys:
    companies: str
    boards: str
    feedbacks: str
    comments: str
    user: str

    @classmethod
    def with_prefix(cls, prefix: str = DEFAULT_KEY_PREFIX) -> "StorageKeys":
        return cls(
            companies=f"{prefix}-companies",
            boards=f"{prefix}-boards",
            feedbacks=f"{prefix}-feedbacks",
            comments=f"{prefix}-comments",
            user=f"{prefix}-user",
        )


@dataclass(frozen=True)
class Snapshot:
    companies: tuple[Company, ...] = ()
    boards: tuple[Board, ...] = ()
    feedbacks: tuple[Feedback, ...] = ()
    comments: tuple[Comment, ...] = ()
    current_user: Optional[User] = None


class SnapshotPersistence:
    """
    Loads and saves the store through a KeyValueStorage.

    Each key is parsed on its own: a missing or malformed value falls back
    to that key's empty default and the other keys still load.
    """

    def __init__(self, storage: KeyValueStorage, key_prefix: str = DEFAULT_KEY_PREFIX):
        self.storage = storage
        self.keys = StorageKeys.with_prefix(key_prefix)

    def _read(self, key: str, adapter: TypeAdapter, default: Any) -> Any:
        try:
            raw = self.storage.get_item(key)
        except UnicodeDecodeError:
            # Byte-oriented backends decode on read; bad bytes count as malformed.
            logger.warning("Discarding undecodable value under %s", key)
            return default
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed value under %s (%d errors)",
                key,
                exc.error_count(),
            )
            return default

    def load(self) -> Snapshot:
        snapshot = Snapshot(
            companies=self._read(self.keys.companies, _COMPANIES, ()),
            boards=self._read(self.keys.boards, _BOARDS, ()),
            feedbacks=self._read(self.keys.feedbacks, _FEEDBACKS, ()),
            comments=self._read(self.keys.comments, _COMMENTS, ()),
            current_user=self._read(self.keys.user, _USER, None),
        )
        logger.info(
            "Loaded snapshot: %d companies, %d boards, %d feedbacks, %d comments",
            len(snapshot.companies),
            len(snapshot.boards),
            len(snapshot.feedbacks),
            len(snapshot.comments),
        )
        return snapshot

    def save(self, state: AppState) -> None:
        self.storage.set_item(self.keys.companies, _dump(_COMPANIES, state.companies))
        self.storage.set_item(self.keys.boards, _dump(_BOARDS, state.boards))
        self.storage.set_item(self.keys.feedbacks, _dump(_FEEDBACKS, state.feedbacks))
        self.storage.set_item(self.keys.comments, _dump(_COMMENTS, state.comments))
        if state.current_user is not None:
            self.storage.set_item(self.keys.user, _dump(_USER, state.current_user))
        else:
            self.storage.remove_item(self.keys.user)


def _dump(adapter: TypeAdapter, value: Any) -> str:
    return adapter.dump_json(value, by_alias=True).decode("utf-8")
