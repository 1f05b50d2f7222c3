"""SQLite-backed metadata store implementation."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from smolpaste.error_handling import raise_not_found, raise_storage_error
from smolpaste.logging_utils import create_service_logger
from smolpaste.models_db import Base, Paste, tokens_table
from smolpaste.protocols import PasteRepositoryProtocol

logger = create_service_logger("store.metadata")


class PasteRepository(PasteRepositoryProtocol):
    """Repository for paste rows and token lookups."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def _get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a database session with proper transaction handling."""
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ensure_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Metadata schema ensured")

    async def count_token(self, value: str, correlation_id: UUID | None = None) -> int:
        stmt = select(func.count()).select_from(tokens_table).where(tokens_table.c.value == value)
        try:
            async with self._get_session() as session:
                count = await session.scalar(stmt)
        except SQLAlchemyError as exc:
            logger.error(f"Token lookup failed: {exc}", exc_info=True)
            raise_storage_error(
                operation="count_token",
                message=f"Token lookup failed: {exc}",
                correlation_id=correlation_id,
            )
        return int(count or 0)

    async def insert_paste(
        self,
        paste_id: str,
        size: int,
        filename: str,
        timestamp: int,
        correlation_id: UUID | None = None,
    ) -> None:
        try:
            async with self._get_session() as session:
                session.add(Paste(id=paste_id, size=size, filename=filename, timestamp=timestamp))
        except SQLAlchemyError as exc:
            logger.error(f"Failed to insert paste {paste_id}: {exc}", exc_info=True)
            raise_storage_error(
                operation="insert_paste",
                message=f"Failed to insert paste: {exc}",
                correlation_id=correlation_id,
                paste_id=paste_id,
            )

    async def pop_paste_filename(
        self, paste_id: str, correlation_id: UUID | None = None
    ) -> str:
        # Single DELETE ... RETURNING so concurrent deletes see at most one row.
        stmt = (
            delete(Paste)
            .where(Paste.id == paste_id)
            .returning(Paste.filename)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._get_session() as session:
                result = await session.execute(stmt)
                row = result.one_or_none()
        except SQLAlchemyError as exc:
            logger.error(f"Failed to delete paste {paste_id}: {exc}", exc_info=True)
            raise_storage_error(
                operation="pop_paste_filename",
                message=f"Failed to delete paste: {exc}",
                correlation_id=correlation_id,
                paste_id=paste_id,
            )

        if row is None:
            raise_not_found(
                operation="pop_paste_filename",
                resource_type="paste",
                resource_id=paste_id,
                correlation_id=correlation_id,
            )
        return row.filename

    async def ping(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
