from __future__ import annotations

import pytest

MARKET = {
    "id": "m1",
    "slug": "rain-tomorrow",
    "question": "Will it rain tomorrow?",
    "category": "Weather",
    "status": "open",
    "yesPrice": 0.4,
    "noPrice": 0.6,
    "volume": 1200,
    "currency": "USDC",
}


@pytest.mark.asyncio
async def test_list_markets_drops_unset_filters(context, fake_api):
    """Verify only supplied filters reach the query string."""
    fake_api.add_json("GET", "/markets", {"markets": [MARKET], "total": 1})

    response = await context.api.list_markets(category="Weather", limit=10)

    assert response.total == 1
    assert response.markets[0].yes_price == 0.4
    params = dict(fake_api.calls("GET", "/markets")[0].url.params)
    assert params == {"category": "Weather", "limit": "10"}


@pytest.mark.asyncio
async def test_order_book_best_levels(context, fake_api):
    """Verify order book levels parse and expose the best prices."""
    fake_api.add_json(
        "GET",
        "/markets/rain-tomorrow/orderbook",
        {
            "marketId": "m1",
            "yesBids": [{"price": 0.38, "size": 10}, {"price": 0.39, "size": 4}],
            "noAsks": [{"price": 0.62, "size": 7}, {"price": 0.61, "size": 2}],
        },
    )

    book = await context.api.order_book("rain-tomorrow")

    assert book.best_bid().price == 0.39
    assert book.best_ask().price == 0.61


@pytest.mark.asyncio
async def test_market_trades_sends_limit(context, fake_api):
    fake_api.add_json("GET", "/markets/rain-tomorrow/trades", {"trades": []})

    await context.api.market_trades("rain-tomorrow")

    assert fake_api.calls("GET", "/markets/rain-tomorrow/trades")[0].url.params["limit"] == "50"


@pytest.mark.asyncio
async def test_deposit_addresses_are_normalized(context, fake_api):
    """Verify both server shapes collapse to token -> address and network."""
    fake_api.add_json(
        "GET",
        "/crypto/deposit-addresses",
        {"addresses": [{"token": "USDC", "address": "0xusdc"}]},
    )

    addresses = await context.api.deposit_addresses()

    assert addresses == {"USDC": {"address": "0xusdc", "network": "Ethereum Sepolia Testnet"}}


@pytest.mark.asyncio
async def test_pending_deposits_from_wrapped_payload(context, fake_api):
    fake_api.add_json(
        "GET",
        "/crypto/deposits/pending",
        {"deposits": [{"id": "d1", "txHash": "0x1", "token": "ETH", "amount": 0.5}]},
    )

    deposits = await context.api.pending_deposits()

    assert [deposit.tx_hash for deposit in deposits] == ["0x1"]
    assert deposits[0].status == "pending"


@pytest.mark.asyncio
async def test_update_profile_sends_only_changed_fields(context, fake_api):
    fake_api.add_json("PATCH", "/users/me", {"id": "user-1", "defaultCurrency": "USDT"})

    profile = await context.api.update_profile(default_currency="USDT")

    assert profile.default_currency == "USDT"
    assert fake_api.body(fake_api.calls("PATCH", "/users/me")[0]) == {"defaultCurrency": "USDT"}


@pytest.mark.asyncio
async def test_admin_settlement_preview_passes_outcome(context, fake_api):
    """Verify admin calls share the authenticated gateway."""
    context.credentials.set("admin-token")
    fake_api.add_json("GET", "/admin/settlement/preview/m1", {"payouts": []})

    payload = await context.admin.settlement_preview("m1", "NO")

    assert payload == {"payouts": []}
    request = fake_api.calls("GET", "/admin/settlement/preview/m1")[0]
    assert request.url.params["outcome"] == "NO"
    assert request.headers["authorization"] == "Bearer admin-token"


@pytest.mark.asyncio
async def test_admin_reject_withdrawal_body(context, fake_api):
    fake_api.add_json("POST", "/admin/crypto/withdrawals/w1/reject", {"success": True})

    await context.admin.reject_withdrawal("w1", "Suspicious destination")

    request = fake_api.calls("POST", "/admin/crypto/withdrawals/w1/reject")[0]
    assert fake_api.body(request) == {"reason": "Suspicious destination"}
