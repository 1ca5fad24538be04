"""Durable key-value slots backing the credential and the cached session snapshot."""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from sqlalchemy.orm import Session, sessionmaker

from .models import StorageEntry


class KeyValueStorage(Protocol):
    """Interface implemented by storage backends."""

    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Write ``value`` under ``key``; durable once the call returns."""

    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""


class MemoryStorage:
    """Process-local storage used by tests and ephemeral CLI runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqlKeyValueStorage:
    """SQLAlchemy-backed storage; every write commits before returning."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        logger.debug("Stored value for key {}", key)

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            entry = session.get(StorageEntry, key)
            if entry is None:
                return
            session.delete(entry)
            session.commit()
        logger.debug("Deleted key {}", key)


__all__ = ["KeyValueStorage", "MemoryStorage", "SqlKeyValueStorage"]
