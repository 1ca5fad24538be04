"""Immutable state snapshots shared between the controllers and their observers."""

from __future__ import annotations

from dataclasses import dataclass

from app.schemas import TradePreview, UserIdentity


@dataclass(frozen=True, slots=True)
class SessionState:
    """Who is signed in, and whether the first rehydration has settled."""

    identity: UserIdentity | None = None
    authenticated: bool = False
    loading: bool = False
    ready: bool = False
    last_error: str | None = None

    def __post_init__(self) -> None:
        if self.authenticated != (self.identity is not None):
            raise ValueError("authenticated must be True exactly when an identity is set")

    @classmethod
    def anonymous(cls, *, loading: bool = False) -> "SessionState":
        return cls(loading=loading, ready=True)

    @classmethod
    def signed_in(cls, identity: UserIdentity, *, loading: bool = False) -> "SessionState":
        return cls(identity=identity, authenticated=True, loading=loading, ready=True)

    def persisted_view(self) -> dict[str, object]:
        """Return the only fields allowed to reach durable storage."""

        identity = (
            self.identity.model_dump(mode="json", by_alias=True) if self.identity else None
        )
        return {"identity": identity, "authenticated": self.authenticated}


@dataclass(frozen=True, slots=True)
class TradingState:
    preview: TradePreview | None = None
    loading_preview: bool = False
    executing: bool = False
    error: str | None = None
