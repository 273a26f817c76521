"""
Process-wide wiring for the storage backend and the shared store.
"""

from __future__ import annotations

import logging

from feedboard.config import Settings, get_settings
from feedboard.persistence import SnapshotPersistence
from feedboard.storage import (
    InMemoryKeyValueStorage,
    KeyValueStorage,
    ObjectKeyValueStorage,
    RedisKeyValueStorage,
    SqlKeyValueStorage,
)
from feedboard.store import FeedbackStore

logger = logging.getLogger(__name__)

_storage: KeyValueStorage | None = None
_store: FeedbackStore | None = None


def build_key_value_storage(settings: Settings) -> KeyValueStorage:
    """
    Pick a backend from settings, falling back to memory when the selected
    backend is not configured.
    """
    backend = settings.storage_backend
    if settings.use_in_memory_backends or backend == "memory":
        return InMemoryKeyValueStorage()
    if backend == "sql" and settings.database_url:
        return SqlKeyValueStorage(settings.database_url)
    if backend == "redis" and settings.redis_url:
        return RedisKeyValueStorage(url=settings.redis_url)
    if backend == "object" and settings.object_bucket:
        return ObjectKeyValueStorage(
            bucket=settings.object_bucket,
            region=settings.object_region or "",
            endpoint=settings.object_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    logger.warning(
        "Storage backend %r is not configured; using in-memory storage", backend
    )
    return InMemoryKeyValueStorage()


def get_key_value_storage() -> KeyValueStorage:
    global _storage
    if _storage:
        return _storage
    _storage = build_key_value_storage(get_settings())
    return _storage


def get_store() -> FeedbackStore:
    """
    Return the shared store, loaded from storage on first use.
    """
    global _store
    if _store:
        return _store

    settings = get_settings()
    persistence = SnapshotPersistence(
        get_key_value_storage(), key_prefix=settings.storage_key_prefix
    )
    _store = FeedbackStore(persistence)
    _store.load()
    return _store


def reset_dependencies() -> None:
    """Forget the cached storage and store (useful in tests)."""
    global _storage, _store
    _storage = None
    _store = None
