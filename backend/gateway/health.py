"""Unauthenticated reachability probe over the load-bearing API endpoints."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

import httpx
from loguru import logger

from app.core.config import Settings, settings as default_settings
from app.schemas import EndpointCheck, HealthReport

DEFAULT_CHECKS: tuple[tuple[str, str], ...] = (
    ("Markets List", "/markets"),
    ("Markets (Politics)", "/markets?category=Politics"),
    ("Markets (Sports)", "/markets?category=Sports"),
    ("User Profile (requires auth)", "/users/me"),
    ("Wallet Balances (requires auth)", "/wallet/balances"),
    ("Portfolio (requires auth)", "/portfolio"),
    ("Deposit Addresses (requires auth)", "/crypto/deposit-addresses"),
    ("Admin Markets (requires admin)", "/admin/markets"),
    ("Settlement Queue (requires admin)", "/admin/settlement/queue"),
    ("Settlement Stats (requires admin)", "/admin/settlement/stats"),
    ("Admin Deposits (requires admin)", "/admin/crypto/deposits"),
)


class HealthChecker:
    """Probe endpoints without credentials; 401 still proves the route is alive."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        checks: tuple[tuple[str, str], ...] = DEFAULT_CHECKS,
    ) -> None:
        self._settings = settings or default_settings
        self.base_url = self._settings.resolved_api_base_url
        self.checks = checks
        self._transport = transport

    async def check_endpoint(
        self, client: httpx.AsyncClient, name: str, path: str, method: str = "GET"
    ) -> EndpointCheck:
        url = f"{self.base_url}{path}"
        started = time.perf_counter()
        try:
            response = await client.request(
                method, url, headers={"Content-Type": "application/json"}
            )
        except httpx.TimeoutException as exc:
            return EndpointCheck(
                name=name,
                url=url,
                method=method,
                status="timeout",
                response_time_ms=_elapsed_ms(started),
                error=str(exc) or "Request timed out",
            )
        except httpx.HTTPError as exc:
            return EndpointCheck(
                name=name,
                url=url,
                method=method,
                status="error",
                response_time_ms=_elapsed_ms(started),
                error=str(exc) or "Unknown error",
            )

        healthy = response.is_success or response.status_code == 401
        return EndpointCheck(
            name=name,
            url=url,
            method=method,
            status="ok" if healthy else "error",
            response_time_ms=_elapsed_ms(started),
            status_code=response.status_code,
        )

    async def run(self) -> HealthReport:
        client_kwargs: dict[str, Any] = {"timeout": self._settings.health_check_timeout_seconds}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        results: list[EndpointCheck] = []
        async with httpx.AsyncClient(**client_kwargs) as client:
            for name, path in self.checks:
                results.append(await self.check_endpoint(client, name, path))
            slug = await self._discover_market_slug(client)
            if slug:
                results.append(await self.check_endpoint(client, "Market Detail", f"/markets/{slug}"))
                results.append(
                    await self.check_endpoint(client, "Order Book", f"/markets/{slug}/orderbook")
                )

        degraded = any(check.status != "ok" for check in results)
        report = HealthReport(
            status="degraded" if degraded else "healthy",
            timestamp=datetime.now(timezone.utc),
            api_base_url=self.base_url,
            checks=results,
        )
        logger.info(
            "Upstream health {}: {}/{} endpoints ok",
            report.status,
            report.summary.successful,
            report.summary.total,
        )
        return report

    async def _discover_market_slug(self, client: httpx.AsyncClient) -> str | None:
        try:
            response = await client.get(f"{self.base_url}/markets", params={"limit": 1})
            payload = response.json() if response.is_success else None
        except (httpx.HTTPError, ValueError):
            return None
        markets = payload.get("markets") if isinstance(payload, dict) else None
        if not isinstance(markets, list) or not markets or not isinstance(markets[0], dict):
            return None
        return markets[0].get("slug")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["HealthChecker"]
