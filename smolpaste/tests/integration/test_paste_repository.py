"""Tests for the SQLite-backed metadata store."""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from smolpaste.error_handling import ErrorCode, SmolpasteError
from smolpaste.implementations.paste_repository_impl import PasteRepository
from smolpaste.models_db import tokens_table


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'meta.sqlite'}",
        pool_size=5,
        max_overflow=0,
        pool_timeout=3,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def repository(db_engine: AsyncEngine) -> PasteRepository:
    repo = PasteRepository(db_engine)
    await repo.ensure_schema()
    return repo


async def _insert_token(engine: AsyncEngine, value: str) -> None:
    async with engine.begin() as conn:
        await conn.execute(tokens_table.insert().values(value=value, created_at=int(time.time())))


class TestSchema:
    async def test_ensure_schema_is_idempotent(
        self, repository: PasteRepository, db_engine: AsyncEngine
    ) -> None:
        await repository.ensure_schema()

        async with db_engine.connect() as conn:
            result = await conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
            )
            tables = [row[0] for row in result]
        assert tables == ["pastes", "tokens"]

    async def test_pastes_columns(self, repository: PasteRepository, db_engine: AsyncEngine) -> None:
        async with db_engine.connect() as conn:
            result = await conn.execute(text("PRAGMA table_info(pastes)"))
            columns = {row[1]: (row[2], row[3], row[5]) for row in result}

        assert columns == {
            "id": ("TEXT", 1, 1),
            "size": ("INTEGER", 0, 0),
            "filename": ("TEXT", 0, 0),
            "timestamp": ("INTEGER", 0, 0),
        }


class TestCountToken:
    async def test_counts_exact_matches_only(
        self, repository: PasteRepository, db_engine: AsyncEngine
    ) -> None:
        await _insert_token(db_engine, "abc")

        assert await repository.count_token("abc") == 1
        assert await repository.count_token("ABC") == 0
        assert await repository.count_token(" abc") == 0

    async def test_counts_duplicates(
        self, repository: PasteRepository, db_engine: AsyncEngine
    ) -> None:
        await _insert_token(db_engine, "dup")
        await _insert_token(db_engine, "dup")

        assert await repository.count_token("dup") == 2


class TestPasteRows:
    async def test_pop_returns_filename_once(self, repository: PasteRepository) -> None:
        paste_id = str(uuid.uuid4())
        await repository.insert_paste(paste_id, 3, f"{paste_id}.txt", 1_700_000_000)

        assert await repository.pop_paste_filename(paste_id) == f"{paste_id}.txt"

        with pytest.raises(SmolpasteError) as exc_info:
            await repository.pop_paste_filename(paste_id)
        assert exc_info.value.error_detail.error_code == ErrorCode.NOT_FOUND

    async def test_duplicate_id_is_a_storage_error(self, repository: PasteRepository) -> None:
        paste_id = str(uuid.uuid4())
        await repository.insert_paste(paste_id, 1, paste_id, 1)

        with pytest.raises(SmolpasteError) as exc_info:
            await repository.insert_paste(paste_id, 1, paste_id, 1)

        assert exc_info.value.error_detail.error_code == ErrorCode.STORAGE_ERROR

    async def test_concurrent_pops_see_one_row(self, repository: PasteRepository) -> None:
        paste_id = str(uuid.uuid4())
        await repository.insert_paste(paste_id, 1, paste_id, 1)

        results = await asyncio.gather(
            *(repository.pop_paste_filename(paste_id) for _ in range(4)),
            return_exceptions=True,
        )

        assert results.count(paste_id) == 1
        errors = [r for r in results if isinstance(r, SmolpasteError)]
        assert len(errors) == 3
        assert all(e.error_detail.error_code == ErrorCode.NOT_FOUND for e in errors)

    async def test_failures_surface_as_storage_errors(
        self, repository: PasteRepository, db_engine: AsyncEngine
    ) -> None:
        async with db_engine.begin() as conn:
            await conn.execute(text("DROP TABLE tokens"))

        correlation_id = uuid.uuid4()

        with pytest.raises(SmolpasteError) as exc_info:
            await repository.count_token("anything", correlation_id)

        assert exc_info.value.error_detail.error_code == ErrorCode.STORAGE_ERROR
        assert exc_info.value.correlation_id == str(correlation_id)

    async def test_ping(self, repository: PasteRepository) -> None:
        await repository.ping()
