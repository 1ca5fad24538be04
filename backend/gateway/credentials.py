from __future__ import annotations

from loguru import logger

from app.storage import KeyValueStorage


class CredentialStore:
    """Owns the single bearer credential and mirrors it to durable storage."""

    def __init__(self, storage: KeyValueStorage, *, storage_key: str = "auth_token") -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._token: str | None = None
        self.hydrate()

    def hydrate(self) -> str | None:
        """Seed the in-memory credential from storage; absence is not an error."""

        try:
            stored = self._storage.get(self._storage_key)
        except Exception as exc:
            logger.warning("Credential storage unreadable; starting signed out: {}", exc)
            return self._token
        if stored:
            self._token = stored
            logger.debug("Hydrated credential from storage")
        return self._token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str | None) -> None:
        if token:
            self._storage.set(self._storage_key, token)
        else:
            token = None
            self._storage.delete(self._storage_key)
        self._token = token

    def clear(self) -> None:
        self.set(None)

    def clear_if(self, token: str) -> bool:
        """Clear the credential only if it is still ``token``."""

        if self._token != token:
            return False
        self.set(None)
        return True

    @property
    def is_present(self) -> bool:
        return self._token is not None
