"""Typed wrappers over the remote market API, one method per endpoint."""

from __future__ import annotations

from typing import Any, Literal

from loguru import logger

from app.schemas import (
    AuthResponse,
    CountriesResponse,
    CryptoToken,
    Currency,
    CurrentUserResponse,
    DepositAddress,
    DepositHistoryResponse,
    Market,
    MarketsResponse,
    OrderBookResponse,
    OtpRequestResponse,
    Outcome,
    PendingDeposit,
    PortfolioResponse,
    PositionHistoryResponse,
    TradePreview,
    TradeResult,
    TradesResponse,
    TransactionsResponse,
    UserProfile,
    WalletBalance,
    WalletChallenge,
)

from .client import RequestGateway
from .normalize import normalize_deposit_addresses, normalize_pending_deposits


def _query(**params: Any) -> dict[str, Any]:
    """Drop unset parameters so they never reach the query string."""

    return {key: value for key, value in params.items() if value is not None}


def _outcome(value: Outcome | str) -> str:
    return Outcome(value).value


class MarketApi:
    """Thin typed facade; all normalization and auth lives in :class:`RequestGateway`."""

    def __init__(self, gateway: RequestGateway) -> None:
        self.gateway = gateway

    # auth

    async def request_otp(self, email: str) -> OtpRequestResponse:
        payload = await self.gateway.post("/auth/request-otp", {"email": email})
        return OtpRequestResponse.model_validate(payload)

    async def verify_otp(self, email: str, code: str) -> AuthResponse:
        payload = await self.gateway.post("/auth/verify-otp", {"email": email, "code": code})
        return AuthResponse.model_validate(payload)

    async def wallet_challenge(self, address: str) -> WalletChallenge:
        payload = await self.gateway.post("/auth/wallet/challenge", {"walletAddress": address})
        return WalletChallenge.model_validate(payload)

    async def verify_wallet_signature(self, message: str, signature: str) -> AuthResponse:
        payload = await self.gateway.post(
            "/auth/wallet/verify", {"message": message, "signature": signature}
        )
        return AuthResponse.model_validate(payload)

    async def current_user(self) -> CurrentUserResponse:
        payload = await self.gateway.get("/auth/me")
        return CurrentUserResponse.model_validate(payload)

    async def logout(self) -> dict[str, Any]:
        return await self.gateway.post("/auth/logout")

    # markets

    async def countries(self) -> CountriesResponse:
        return CountriesResponse.model_validate(await self.gateway.get("/markets/countries"))

    async def list_markets(
        self,
        *,
        category: str | None = None,
        status: str | None = None,
        currency: str | None = None,
        country: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> MarketsResponse:
        params = _query(
            category=category,
            status=status,
            currency=currency,
            country=country,
            limit=limit,
            offset=offset,
        )
        return MarketsResponse.model_validate(await self.gateway.get("/markets", params=params))

    async def get_market(self, slug: str) -> Market:
        return Market.model_validate(await self.gateway.get(f"/markets/{slug}"))

    async def order_book(self, slug: str) -> OrderBookResponse:
        return OrderBookResponse.model_validate(
            await self.gateway.get(f"/markets/{slug}/orderbook")
        )

    async def market_trades(self, slug: str, limit: int = 50) -> TradesResponse:
        payload = await self.gateway.get(f"/markets/{slug}/trades", params={"limit": limit})
        return TradesResponse.model_validate(payload)

    # trading

    async def preview_trade(
        self, market_id: str, outcome: Outcome | str, stake: float
    ) -> TradePreview:
        payload = await self.gateway.post(
            "/trade/preview",
            {"marketId": market_id, "outcome": _outcome(outcome), "stake": stake},
        )
        return TradePreview.model_validate(payload)

    async def buy_shares(
        self,
        market_id: str,
        outcome: Outcome | str,
        stake: float,
        idempotency_key: str,
    ) -> TradeResult:
        logger.info(
            "Submitting buy market={} outcome={} stake={} key={}",
            market_id,
            _outcome(outcome),
            stake,
            idempotency_key,
        )
        payload = await self.gateway.post(
            "/trade/buy",
            {
                "marketId": market_id,
                "outcome": _outcome(outcome),
                "stake": stake,
                "idempotencyKey": idempotency_key,
            },
        )
        return TradeResult.model_validate(payload)

    async def sell_shares(self, position_id: str, shares_to_sell: float) -> TradeResult:
        logger.info("Submitting sell position={} shares={}", position_id, shares_to_sell)
        payload = await self.gateway.post(
            "/trade/sell", {"positionId": position_id, "sharesToSell": shares_to_sell}
        )
        return TradeResult.model_validate(payload)

    # portfolio

    async def portfolio(self, currency: str | None = None) -> PortfolioResponse:
        payload = await self.gateway.get("/portfolio", params=_query(currency=currency))
        return PortfolioResponse.model_validate(payload)

    async def position_history(
        self,
        *,
        currency: str | None = None,
        status: Literal["won", "lost", "sold", "all"] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> PositionHistoryResponse:
        params = _query(currency=currency, status=status, limit=limit, offset=offset)
        payload = await self.gateway.get("/portfolio/history", params=params)
        return PositionHistoryResponse.model_validate(payload)

    # wallet

    async def currencies(self) -> list[Currency]:
        payload = await self.gateway.get("/wallet/currencies")
        return [Currency.model_validate(item) for item in payload]

    async def balance(self, currency: str) -> WalletBalance:
        payload = await self.gateway.get("/wallet/balance", params={"currency": currency})
        return WalletBalance.model_validate(payload)

    async def balances(self) -> list[WalletBalance]:
        payload = await self.gateway.get("/wallet/balances")
        return [WalletBalance.model_validate(item) for item in payload]

    async def transactions(
        self,
        *,
        currency: str | None = None,
        type: Literal["deposit", "withdrawal", "trade", "trade_payout", "fee"] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> TransactionsResponse:
        params = _query(currency=currency, type=type, limit=limit, offset=offset)
        payload = await self.gateway.get("/wallet/transactions", params=params)
        return TransactionsResponse.model_validate(payload)

    # crypto

    async def crypto_tokens(self) -> list[CryptoToken]:
        payload = await self.gateway.get("/crypto/tokens")
        return [CryptoToken.model_validate(item) for item in payload]

    async def deposit_address(self, token: str) -> DepositAddress:
        payload = await self.gateway.get(f"/crypto/deposit-address/{token}")
        return DepositAddress.model_validate(payload)

    async def deposit_addresses(self) -> dict[str, dict[str, str]]:
        return normalize_deposit_addresses(await self.gateway.get("/crypto/deposit-addresses"))

    async def pending_deposits(self) -> list[PendingDeposit]:
        payload = await self.gateway.get("/crypto/deposits/pending")
        return [PendingDeposit.model_validate(item) for item in normalize_pending_deposits(payload)]

    async def deposit_history(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> DepositHistoryResponse:
        payload = await self.gateway.get(
            "/crypto/deposits/history", params=_query(limit=limit, offset=offset)
        )
        return DepositHistoryResponse.model_validate(payload)

    # users

    async def profile(self) -> UserProfile:
        return UserProfile.model_validate(await self.gateway.get("/users/me"))

    async def update_profile(
        self, *, name: str | None = None, default_currency: str | None = None
    ) -> UserProfile:
        body = _query(name=name, defaultCurrency=default_currency)
        return UserProfile.model_validate(await self.gateway.patch("/users/me", body))

    async def update_risk_settings(
        self, currency: str, *, max_stake: float, max_daily_volume: float
    ) -> dict[str, Any]:
        return await self.gateway.patch(
            "/users/me/risk-settings",
            {"currency": currency, "maxStake": max_stake, "maxDailyVolume": max_daily_volume},
        )


class AdminApi:
    """Admin-only endpoints; payloads are passed through untyped."""

    def __init__(self, gateway: RequestGateway) -> None:
        self.gateway = gateway

    async def list_markets(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> MarketsResponse:
        params = _query(status=status, category=category, limit=limit, offset=offset)
        payload = await self.gateway.get("/admin/markets", params=params)
        return MarketsResponse.model_validate(payload)

    async def create_market(self, data: dict[str, Any]) -> Market:
        return Market.model_validate(await self.gateway.post("/admin/markets", data))

    async def update_market(self, market_id: str, data: dict[str, Any]) -> Market:
        return Market.model_validate(await self.gateway.patch(f"/admin/markets/{market_id}", data))

    async def update_market_prices(
        self, market_id: str, yes_price: float, reason: str | None = None
    ) -> Market:
        body = _query(yesPrice=yes_price, reason=reason)
        payload = await self.gateway.patch(f"/admin/markets/{market_id}/prices", body)
        return Market.model_validate(payload)

    async def resolve_market(
        self, market_id: str, outcome: Outcome | str, notes: str | None = None
    ) -> dict[str, Any]:
        return await self.gateway.post(
            f"/admin/markets/{market_id}/resolve",
            _query(outcome=_outcome(outcome), notes=notes),
        )

    async def resolution_queue(self) -> dict[str, Any]:
        return await self.gateway.get("/admin/settlement/queue")

    async def settlement_stats(self) -> dict[str, Any]:
        return await self.gateway.get("/admin/settlement/stats")

    async def settlement_preview(self, market_id: str, outcome: Outcome | str) -> dict[str, Any]:
        return await self.gateway.get(
            f"/admin/settlement/preview/{market_id}", params={"outcome": _outcome(outcome)}
        )

    async def settle_market(
        self, market_id: str, outcome: Outcome | str, notes: str | None = None
    ) -> dict[str, Any]:
        return await self.gateway.post(
            f"/admin/settlement/resolve/{market_id}",
            _query(outcome=_outcome(outcome), notes=notes),
        )

    async def trigger_settlement_check(self) -> dict[str, Any]:
        return await self.gateway.post("/admin/settlement/trigger-check")

    async def deposits(
        self,
        *,
        status: Literal["pending", "credited", "failed"] | None = None,
        token: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict[str, Any]:
        params = _query(status=status, token=token, limit=limit, offset=offset)
        return await self.gateway.get("/admin/crypto/deposits", params=params)

    async def deposit_stats(self) -> dict[str, Any]:
        return await self.gateway.get("/admin/crypto/deposits/stats")

    async def credit_deposit(self, deposit_id: str) -> dict[str, Any]:
        return await self.gateway.post(f"/admin/crypto/deposits/{deposit_id}/credit")

    async def withdrawals(
        self,
        *,
        status: Literal["pending", "approved", "rejected", "completed"] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict[str, Any]:
        params = _query(status=status, limit=limit, offset=offset)
        return await self.gateway.get("/admin/crypto/withdrawals", params=params)

    async def approve_withdrawal(self, withdrawal_id: str, notes: str | None = None) -> dict[str, Any]:
        return await self.gateway.post(
            f"/admin/crypto/withdrawals/{withdrawal_id}/approve", _query(notes=notes)
        )

    async def reject_withdrawal(self, withdrawal_id: str, reason: str) -> dict[str, Any]:
        return await self.gateway.post(
            f"/admin/crypto/withdrawals/{withdrawal_id}/reject", {"reason": reason}
        )

    async def complete_withdrawal(self, withdrawal_id: str, tx_hash: str) -> dict[str, Any]:
        return await self.gateway.post(
            f"/admin/crypto/withdrawals/{withdrawal_id}/complete", {"txHash": tx_hash}
        )


__all__ = ["AdminApi", "MarketApi"]
