from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.domain import SessionState
from app.schemas import AuthResponse, Outcome, TradePreview, UserIdentity


def test_identity_parses_camel_case_and_coerces_id():
    """Verify wire aliases map onto snake_case fields."""
    identity = UserIdentity.model_validate(
        {"id": 42, "walletAddress": "0xabc", "defaultCurrency": "USDC", "role": "admin"}
    )

    assert identity.id == "42"
    assert identity.wallet_address == "0xabc"
    assert identity.default_currency == "USDC"
    assert identity.role == "admin"


def test_identity_is_immutable():
    """Verify an identity snapshot cannot be edited in place."""
    identity = UserIdentity(id="u1")

    with pytest.raises(ValidationError):
        identity.email = "x@y.com"


def test_auth_response_requires_token():
    """Verify a success payload without a credential is rejected."""
    with pytest.raises(ValidationError):
        AuthResponse.model_validate({"success": True, "token": "", "user": {"id": "u1"}})


def test_trade_preview_outcome_enum():
    """Verify outcomes outside YES and NO are rejected."""
    payload = {
        "outcome": "NO",
        "stake": 10,
        "shares": 16.6,
        "fee": 0.1,
        "totalCost": 10.1,
        "estimatedPayout": 16.6,
        "estimatedProfit": 6.6,
    }

    assert TradePreview.model_validate(payload).outcome is Outcome.NO
    with pytest.raises(ValidationError):
        TradePreview.model_validate({**payload, "outcome": "MAYBE"})


def test_persisted_view_uses_wire_names():
    """Verify the cached snapshot keeps only identity and the auth flag."""
    state = SessionState.signed_in(UserIdentity(id="u1", default_currency="USDT"))

    view = state.persisted_view()

    assert set(view) == {"identity", "authenticated"}
    assert view["identity"]["defaultCurrency"] == "USDT"
    assert SessionState.anonymous().persisted_view() == {
        "identity": None,
        "authenticated": False,
    }
