"""Domain state snapshots for the session and trading controllers."""

from .models import SessionState, TradingState

__all__ = [
    "SessionState",
    "TradingState",
]
