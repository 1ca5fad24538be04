"""Trade preview and execution on top of the market API."""

from __future__ import annotations

import secrets
import threading
import time
from collections import Counter
from typing import Callable

from loguru import logger
from pydantic import ValidationError

from app.domain import TradingState
from app.schemas import Outcome, TradePreview, TradeResult
from gateway.client import RequestFailed, is_auth_failure
from gateway.endpoints import MarketApi

from .base import Navigator, Notifier
from .session_controller import SessionController
from .state import StateStore

LOGIN_ROUTE = "/login"
SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."
PREVIEW_FAILED = "Failed to calculate trade"
BUY_FAILED = "Trade failed"
SELL_FAILED = "Sell failed"

_key_lock = threading.Lock()
_last_key_millis = 0


def generate_idempotency_key() -> str:
    """Return ``<epoch-millis>-<random hex>``; the time part never goes backwards."""

    global _last_key_millis
    with _key_lock:
        millis = max(time.time_ns() // 1_000_000, _last_key_millis)
        _last_key_millis = millis
    return f"{millis}-{secrets.token_hex(8)}"


class TradeCoordinator:
    """Debounce-friendly previews plus single-shot buy/sell submission.

    Previews follow "last request issued wins": each call takes a new
    generation number and a response is applied only while its generation is
    still current. Debouncing keystrokes is left to the caller.
    """

    def __init__(
        self,
        api: MarketApi,
        session: SessionController,
        *,
        notifier: Notifier,
        navigator: Navigator,
    ) -> None:
        self._api = api
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self._store: StateStore[TradingState] = StateStore(TradingState())
        self._preview_generation = 0
        self._executing: Counter[str] = Counter()

    def get(self) -> TradingState:
        return self._store.get()

    def subscribe(self, listener: Callable[[TradingState], None]) -> Callable[[], None]:
        return self._store.subscribe(listener)

    async def handle_auth_failure(self, exc: Exception) -> bool:
        """Tear the session down when ``exc`` is an authorization failure."""

        if not is_auth_failure(exc):
            return False
        logger.warning("Authorization rejected during trading; signing out")
        await self._session.logout()
        self._notifier.error(SESSION_EXPIRED_MESSAGE)
        self._navigator.navigate(LOGIN_ROUTE)
        return True

    async def fetch_preview(
        self, market_id: str, outcome: Outcome | str, stake: float
    ) -> TradePreview | None:
        if stake <= 0:
            self._preview_generation += 1
            self._store.update(preview=None, loading_preview=False)
            return None

        outcome = Outcome(outcome)
        self._preview_generation += 1
        generation = self._preview_generation

        self._store.update(loading_preview=True, error=None)
        try:
            preview = await self._api.preview_trade(market_id, outcome, stake)
        except (RequestFailed, ValidationError) as exc:
            # An expired session is torn down even when the preview itself is stale.
            handled = await self.handle_auth_failure(exc)
            if generation != self._preview_generation:
                logger.debug("Discarding failure of superseded preview {}", generation)
                return None
            changes: dict[str, object] = {"preview": None, "loading_preview": False}
            if not handled:
                changes["error"] = exc.message if isinstance(exc, RequestFailed) else PREVIEW_FAILED
            self._store.update(**changes)
            return None

        if generation != self._preview_generation:
            logger.debug("Discarding superseded preview {}", generation)
            return None
        self._store.update(preview=preview, loading_preview=False)
        return preview

    def clear_preview(self) -> None:
        self._preview_generation += 1
        self._store.update(preview=None, loading_preview=False, error=None)

    def _begin_execution(self, kind: str) -> None:
        self._executing[kind] += 1
        self._store.update(executing=True, error=None)

    def _end_execution(self, kind: str, **changes: object) -> None:
        self._executing[kind] -= 1
        if self._executing[kind] <= 0:
            del self._executing[kind]
        self._store.update(executing=bool(self._executing), **changes)

    async def execute_buy(
        self,
        market_id: str,
        outcome: Outcome | str,
        stake: float,
        *,
        idempotency_key: str | None = None,
    ) -> TradeResult | None:
        """Submit one buy. Pass the previous ``idempotency_key`` only to retry that same order."""

        outcome = Outcome(outcome)
        key = idempotency_key or generate_idempotency_key()
        self._begin_execution("buy")
        try:
            result = await self._api.buy_shares(market_id, outcome, stake, key)
        except (RequestFailed, ValidationError) as exc:
            await self._report_failure(exc, "buy", BUY_FAILED)
            return None
        self._end_execution("buy")
        self._notifier.success(
            f"Successfully bought {result.trade.shares:.2f} {outcome.value} shares"
        )
        return result

    async def execute_sell(self, position_id: str, shares: float) -> TradeResult | None:
        # Sells carry no idempotency key; a retried sell may execute twice.
        self._begin_execution("sell")
        try:
            result = await self._api.sell_shares(position_id, shares)
        except (RequestFailed, ValidationError) as exc:
            await self._report_failure(exc, "sell", SELL_FAILED)
            return None
        self._end_execution("sell")
        self._notifier.success(f"Successfully sold {shares:.2f} shares")
        return result

    async def _report_failure(self, exc: Exception, kind: str, fallback: str) -> None:
        if await self.handle_auth_failure(exc):
            self._end_execution(kind)
            return
        message = exc.message if isinstance(exc, RequestFailed) and exc.message else fallback
        self._end_execution(kind, error=message)
        self._notifier.error(message)


__all__ = ["TradeCoordinator", "generate_idempotency_key"]
