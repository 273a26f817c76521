"""
Key-value storage backends for the store snapshot.

Supports an in-memory implementation for tests/local runs, a SQLAlchemy
table (SQLite file by default, Postgres in production), Redis, and an
S3-compatible object store.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
import redis
from botocore.config import Config
from botocore.exceptions import ClientError
from redis import exceptions as redis_exceptions
from sqlalchemy import Column, Float, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class KeyValueStorage(Protocol):
    """String values under string keys, the shape of browser local storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStorage:
    """Test double for storage interactions."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.items.clear()


Base = declarative_base()


class KeyValueRow(Base):
    __tablename__ = "key_value_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Float, nullable=False)


class SqlKeyValueStorage:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("database_url is required for SqlKeyValueStorage")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get_item(self, key: str) -> Optional[str]:
        with self.Session() as session:
            row = session.get(KeyValueRow, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self.Session() as session:
            row = session.get(KeyValueRow, key)
            if row:
                row.value = value
                row.updated_at = time.time()
            else:
                session.add(KeyValueRow(key=key, value=value, updated_at=time.time()))
            session.commit()

    def remove_item(self, key: str) -> None:
        with self.Session() as session:
            row = session.get(KeyValueRow, key)
            if not row:
                return
            session.delete(row)
            session.commit()


@dataclass
class RedisKeyValueStorage:
    """Redis-backed storage using plain string keys."""

    url: str

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _reconnect(self) -> None:
        self.client = redis.Redis.from_url(self.url)

    def get_item(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; retry once on a fresh client.
            self._reconnect()
            value = self.client.get(key)
        if value is None:
            return None
        return value.decode("utf-8")

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value.encode("utf-8"))
        except redis_exceptions.ConnectionError:
            self._reconnect()
            self.client.set(key, value.encode("utf-8"))

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis_exceptions.ConnectionError:
            self._reconnect()
            self.client.delete(key)


@dataclass
class ObjectKeyValueStorage:
    """
    S3-compatible object storage (AWS S3, Tencent COS, MinIO); one object per key.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    key_suffix: str = ".json"

    def __post_init__(self):
        # Virtual-hosted style addressing keeps COS happy.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def _object_key(self, key: str) -> str:
        return f"{key}{self.key_suffix}"

    def get_item(self, key: str) -> Optional[str]:
        try:
            response = self._client.get_object(
                Bucket=self.bucket, Key=self._object_key(key)
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return response["Body"].read().decode("utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=self._object_key(key),
            Body=value.encode("utf-8"),
            ContentType="application/json",
        )

    def remove_item(self, key: str) -> None:
        # S3 delete is idempotent; a missing object is not an error.
        self._client.delete_object(Bucket=self.bucket, Key=self._object_key(key))
