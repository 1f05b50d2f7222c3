"""
Behavioral contracts for smolpaste components.

Route handlers depend only on these protocols; concrete implementations are
bound in ``smolpaste.di``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol, runtime_checkable
from uuid import UUID

from quart import Response

from smolpaste.enums import OperationStatus, PasteOperation


class PasteRepositoryProtocol(Protocol):
    """Metadata store holding the ``pastes`` and ``tokens`` tables."""

    async def ensure_schema(self) -> None:
        """Create both tables if they are absent. Idempotent."""
        ...

    async def count_token(self, value: str, correlation_id: UUID | None = None) -> int:
        """
        Count token rows whose value equals ``value`` exactly.

        Raises:
            SmolpasteError: STORAGE_ERROR on any database failure
        """
        ...

    async def insert_paste(
        self,
        paste_id: str,
        size: int,
        filename: str,
        timestamp: int,
        correlation_id: UUID | None = None,
    ) -> None:
        """
        Insert a new paste row.

        Raises:
            SmolpasteError: STORAGE_ERROR on any database failure, including
                a primary key collision
        """
        ...

    async def pop_paste_filename(
        self, paste_id: str, correlation_id: UUID | None = None
    ) -> str:
        """
        Delete the paste row and return its stored filename in one statement.

        Raises:
            SmolpasteError: NOT_FOUND when no row matches, STORAGE_ERROR otherwise
        """
        ...

    async def ping(self) -> None:
        """Round-trip a trivial query. Raises on failure."""
        ...


class BlobStoreProtocol(Protocol):
    """A directory holding one file per paste."""

    @property
    def root(self) -> Path: ...

    async def ensure_directory(self) -> None:
        """Create the directory and its parents if missing."""
        ...

    async def create(
        self,
        filename: str,
        chunks: AsyncIterator[bytes],
        correlation_id: UUID | None = None,
    ) -> int:
        """
        Stream ``chunks`` into a new file and return the bytes written.

        The file must not exist beforehand. A failed write leaves no file.

        Raises:
            SmolpasteError: IO_ERROR on filesystem or stream failure,
                PAYLOAD_TOO_LARGE when the upload limit is exceeded
        """
        ...

    async def remove(self, filename: str, correlation_id: UUID | None = None) -> None:
        """
        Unlink a stored file.

        Raises:
            SmolpasteError: IO_ERROR if the file is missing or cannot be removed
        """
        ...

    async def discard(self, filename: str, correlation_id: UUID | None = None) -> None:
        """Best-effort unlink used to roll back a failed upload. Never raises."""
        ...

    async def serve_file(self, filename: str) -> Response:
        """
        Build a response streaming a stored file.

        Raises:
            werkzeug.exceptions.NotFound: missing file or path traversal
        """
        ...


class TokenAuthenticatorProtocol(Protocol):
    async def authenticate(self, token: str | None, correlation_id: UUID | None = None) -> None:
        """
        Accept the request or raise.

        Raises:
            SmolpasteError: UNAUTHORIZED for an unknown or missing token,
                INTERNAL_ERROR when the lookup itself fails
        """
        ...


@runtime_checkable
class PasteMetricsProtocol(Protocol):
    """Protocol for paste operation metrics collection."""

    def record_operation(self, operation: PasteOperation, status: OperationStatus) -> None: ...
