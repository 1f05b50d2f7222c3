"""Fixtures running the full application against SQLite and a temp directory."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from quart.typing import TestClientProtocol as QuartTestClient
from sqlalchemy.ext.asyncio import AsyncEngine

from smolpaste.app import create_app
from smolpaste.config import Settings
from smolpaste.models_db import tokens_table
from smolpaste.quart_app import SmolpasteApp

BASE_URL = "http://127.0.0.1:3001"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        BASE_URL=BASE_URL,
        DATABASE_URL=str(tmp_path / "smolpaste.sqlite"),
        PASTE_DIRECTORY=tmp_path / "pastes",
    )


@pytest.fixture
def app(settings: Settings) -> SmolpasteApp:
    return create_app(settings)


@pytest.fixture
async def client(app: SmolpasteApp) -> AsyncGenerator[QuartTestClient, None]:
    """Test client for an app that has run its startup hooks."""
    async with app.test_app() as test_app:
        yield test_app.test_client()


@pytest.fixture
async def engine(app: SmolpasteApp, client: QuartTestClient) -> AsyncEngine:
    return await app.container.get(AsyncEngine)


@pytest.fixture
def add_token(engine: AsyncEngine) -> Callable[[str], Awaitable[None]]:
    async def _add_token(value: str) -> None:
        async with engine.begin() as conn:
            await conn.execute(
                tokens_table.insert().values(value=value, created_at=int(time.time()))
            )

    return _add_token
