from __future__ import annotations

import pytest

from app.core.config import Settings
from app.storage import MemoryStorage
from gateway.client import RequestFailed, RequestGateway
from gateway.credentials import CredentialStore
from gateway.endpoints import MarketApi


@pytest.mark.network
@pytest.mark.asyncio
async def test_market_api_live_lists_markets():
    gateway = RequestGateway(CredentialStore(MemoryStorage()), settings=Settings())
    try:
        response = await MarketApi(gateway).list_markets(limit=5)
    except RequestFailed as exc:
        pytest.skip(f"Market API unavailable: {exc.message}")
    finally:
        await gateway.aclose()

    for market in response.markets:
        assert market.id, "market payload missing identifier"
        assert market.slug
        assert 0 <= market.yes_price <= 1
