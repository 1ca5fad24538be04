from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"


class ApiModel(BaseModel):
    """Base for wire payloads; fields are camelCase on the wire."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
    }


class UserIdentity(ApiModel):
    id: str
    email: str | None = None
    name: str | None = None
    wallet_address: str | None = None
    role: Literal["user", "admin"] = "user"
    balance: float | None = None
    kyc_status: str | None = None
    default_currency: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None

    model_config = {**ApiModel.model_config, "frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class AuthResponse(ApiModel):
    success: bool = True
    token: str = Field(min_length=1)
    expires_at: datetime | None = None
    user: UserIdentity


class CurrentUserResponse(ApiModel):
    user: UserIdentity


class OtpRequestResponse(ApiModel):
    success: bool = True
    message: str | None = None
    expires_in: int | None = None


class WalletChallenge(ApiModel):
    message: str = Field(min_length=1)
    nonce: str
    expires_at: datetime | None = None


class TradePreview(ApiModel):
    market_id: str | None = None
    outcome: Outcome
    stake: float
    currency: str | None = None
    symbol: str | None = None
    current_price: float | None = None
    shares: float
    fee: float
    total_cost: float
    estimated_payout: float
    estimated_profit: float
    implied_odds: float | None = None


class Position(ApiModel):
    id: str
    market_id: str
    market_slug: str | None = None
    market_question: str | None = None
    outcome: Outcome
    shares: float
    stake: float
    price: float | None = None
    avg_price: float | None = None
    status: Literal["open", "won", "lost", "sold"] = "open"
    currency: str | None = None
    symbol: str | None = None
    timestamp: datetime | None = None
    payout: float | None = None
    profit: float | None = None
    settled_at: datetime | None = None


class ExecutedTrade(ApiModel):
    id: str
    market_id: str
    outcome: Outcome
    shares: float
    avg_price: float | None = None
    stake: float | None = None
    fee: float | None = None
    total_cost: float | None = None
    currency: str | None = None
    symbol: str | None = None
    timestamp: datetime | None = None


class TradeResult(ApiModel):
    success: bool = True
    trade: ExecutedTrade
    position: Position | None = None
    new_balance: float | None = None


class Market(ApiModel):
    id: str
    slug: str
    question: str
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    status: Literal["draft", "open", "closed", "resolved"] = "open"
    yes_price: float
    no_price: float
    volume: float = 0.0
    currency: str | None = None
    symbol: str | None = None
    closes_at: datetime | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    winning_outcome: Outcome | None = None
    country_code: str | None = None
    country_name: str | None = None


class MarketsResponse(ApiModel):
    markets: list[Market] = Field(default_factory=list)
    total: int = 0
    limit: int | None = None
    offset: int | None = None


class Country(ApiModel):
    code: str
    name: str
    slug: str | None = None
    region: str | None = None
    flag_emoji: str | None = None


class CountriesResponse(ApiModel):
    countries: list[Country] = Field(default_factory=list)


class OrderBookLevel(ApiModel):
    price: float
    size: float


class OrderBookResponse(ApiModel):
    market_id: str
    currency: str | None = None
    symbol: str | None = None
    yes_bids: list[OrderBookLevel] = Field(default_factory=list)
    no_asks: list[OrderBookLevel] = Field(default_factory=list)
    updated_at: datetime | None = None

    def best_bid(self) -> OrderBookLevel | None:
        if not self.yes_bids:
            return None
        return max(self.yes_bids, key=lambda level: level.price)

    def best_ask(self) -> OrderBookLevel | None:
        if not self.no_asks:
            return None
        return min(self.no_asks, key=lambda level: level.price)


class Trade(ApiModel):
    id: str
    outcome: Outcome
    shares: float
    price: float
    stake: float
    fee: float
    timestamp: datetime | None = None


class TradesResponse(ApiModel):
    trades: list[Trade] = Field(default_factory=list)
    currency: str | None = None
    symbol: str | None = None


class PortfolioRow(ApiModel):
    position: Position
    mark_price: float
    mark_payout: float
    mark_profit: float


class PortfolioSummary(ApiModel):
    currency: str
    symbol: str | None = None
    total_stake: float
    total_payout: float
    total_profit: float


class PortfolioResponse(ApiModel):
    rows: list[PortfolioRow] = Field(default_factory=list)
    summary_by_currency: list[PortfolioSummary] = Field(default_factory=list)


class PositionHistoryResponse(ApiModel):
    positions: list[Position] = Field(default_factory=list)
    total: int = 0


class WalletBalance(ApiModel):
    currency: str
    symbol: str | None = None
    available: float
    reserved: float = 0.0
    total: float


class WalletTransaction(ApiModel):
    id: str
    type: Literal["deposit", "withdrawal", "trade", "trade_payout", "fee"]
    amount: float
    currency: str
    symbol: str | None = None
    description: str | None = None
    status: Literal["pending", "completed", "failed"] | None = None
    created_at: datetime | None = None


class TransactionsResponse(ApiModel):
    transactions: list[WalletTransaction] = Field(default_factory=list)
    total: int = 0


class Currency(ApiModel):
    code: str
    name: str
    symbol: str


class CryptoToken(ApiModel):
    token: str
    name: str
    decimals: int
    contract_address: str | None = None


class DepositAddress(ApiModel):
    address: str
    token: str
    network: str
    min_confirmations: int | None = None
    is_testnet: bool | None = None
    note: str | None = None


class PendingDeposit(ApiModel):
    id: str
    tx_hash: str
    token: str
    amount: float
    confirmations: int = 0
    required_confirmations: int | None = None
    status: Literal["pending", "credited"] = "pending"
    created_at: datetime | None = None


class DepositHistoryResponse(ApiModel):
    deposits: list[PendingDeposit] = Field(default_factory=list)
    total: int = 0


class RiskSetting(ApiModel):
    currency: str
    symbol: str | None = None
    max_stake: float
    max_daily_volume: float


class UserProfile(ApiModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: Literal["user", "admin"] = "user"
    kyc_status: str | None = None
    default_currency: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None
    balances: list[WalletBalance] = Field(default_factory=list)
    risk_settings: list[RiskSetting] = Field(default_factory=list)


class EndpointCheck(BaseModel):
    name: str
    url: str
    method: str = "GET"
    status: Literal["ok", "error", "timeout"]
    response_time_ms: int
    status_code: int | None = None
    error: str | None = None


class HealthSummary(BaseModel):
    total: int
    successful: int
    failed: int
    timeouts: int
    avg_response_time_ms: int


class HealthReport(BaseModel):
    status: Literal["healthy", "degraded"]
    timestamp: datetime
    api_base_url: str
    checks: list[EndpointCheck] = Field(default_factory=list)

    @computed_field
    @property
    def summary(self) -> HealthSummary:
        total = len(self.checks)
        average = (
            round(sum(check.response_time_ms for check in self.checks) / total) if total else 0
        )
        return HealthSummary(
            total=total,
            successful=sum(1 for check in self.checks if check.status == "ok"),
            failed=sum(1 for check in self.checks if check.status == "error"),
            timeouts=sum(1 for check in self.checks if check.status == "timeout"),
            avg_response_time_ms=average,
        )
