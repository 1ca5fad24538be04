from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.core.config import Settings
from app.db import build_db_components, init_db
from app.services.base import LoggingNavigator, LoggingNotifier, Navigator, Notifier
from app.services.session_controller import SessionController
from app.services.trade_coordinator import TradeCoordinator
from app.storage import KeyValueStorage, SqlKeyValueStorage
from gateway.client import RequestGateway
from gateway.credentials import CredentialStore
from gateway.endpoints import AdminApi, MarketApi


@dataclass(slots=True)
class AppContext:
    """Everything that issues requests, owned by the application root."""

    settings: Settings
    storage: KeyValueStorage
    credentials: CredentialStore
    gateway: RequestGateway
    api: MarketApi
    admin: AdminApi
    session: SessionController
    trading: TradeCoordinator

    async def aclose(self) -> None:
        await self.gateway.aclose()

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def build_storage(settings: Settings) -> SqlKeyValueStorage:
    engine, session_factory = build_db_components(settings.storage_url, echo=settings.debug)
    init_db(engine)
    return SqlKeyValueStorage(session_factory)


def build_context(
    settings: Settings,
    *,
    storage: KeyValueStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    notifier: Notifier | None = None,
    navigator: Navigator | None = None,
) -> AppContext:
    storage = storage if storage is not None else build_storage(settings)
    credentials = CredentialStore(storage, storage_key=settings.credential_storage_key)
    gateway = RequestGateway(credentials, transport=transport, settings=settings)
    api = MarketApi(gateway)
    session = SessionController(
        api,
        credentials,
        storage=storage,
        snapshot_key=settings.session_storage_key,
    )
    trading = TradeCoordinator(
        api,
        session,
        notifier=notifier or LoggingNotifier(),
        navigator=navigator or LoggingNavigator(),
    )
    return AppContext(
        settings=settings,
        storage=storage,
        credentials=credentials,
        gateway=gateway,
        api=api,
        admin=AdminApi(gateway),
        session=session,
        trading=trading,
    )


__all__ = ["AppContext", "build_context", "build_storage"]
