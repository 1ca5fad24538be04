from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
import pytest_asyncio

from app.context import AppContext, build_context
from app.core.config import Settings
from app.storage import MemoryStorage
from helpers import FakeMarketApi, RecordingNavigator, RecordingNotifier

BASE_URL = "https://api.test/api/v1"


@pytest.fixture
def test_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(
        api_base_url=BASE_URL,
        storage_url=f"sqlite:///{tmp_path / 'session.db'}",
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    return settings


@pytest.fixture
def fake_api() -> FakeMarketApi:
    return FakeMarketApi()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest_asyncio.fixture
async def make_context(test_settings, fake_api, storage, notifier, navigator):
    created: list[AppContext] = []

    def factory(**overrides: Any) -> AppContext:
        kwargs: dict[str, Any] = {
            "storage": storage,
            "transport": fake_api.transport,
            "notifier": notifier,
            "navigator": navigator,
        }
        kwargs.update(overrides)
        context = build_context(test_settings, **kwargs)
        created.append(context)
        return context

    yield factory
    for context in created:
        await context.aclose()


@pytest.fixture
def context(make_context) -> AppContext:
    return make_context()
