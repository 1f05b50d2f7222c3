"""Filesystem-based blob storage implementation."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from uuid import UUID

import aiofiles.os
from quart import Response, send_from_directory

from smolpaste.error_handling import SmolpasteError, raise_io_error
from smolpaste.ingest import DEFAULT_BUFFER_SIZE, stream_to_file
from smolpaste.logging_utils import create_service_logger
from smolpaste.protocols import BlobStoreProtocol

logger = create_service_logger("store.blob")


class FileSystemBlobStore(BlobStoreProtocol):
    """One file per paste under a single managed directory."""

    def __init__(
        self,
        root: Path,
        max_upload_bytes: int,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """
        Initialize the blob store.

        Args:
            root: Directory holding the paste files
            max_upload_bytes: Largest accepted blob
            buffer_size: Write buffer size for streamed uploads
        """
        self._root = root.absolute()
        self.max_upload_bytes = max_upload_bytes
        self.buffer_size = buffer_size

    @property
    def root(self) -> Path:
        return self._root

    async def ensure_directory(self) -> None:
        await aiofiles.os.makedirs(self._root, exist_ok=True)
        logger.info(f"Paste directory ready at {self._root}")

    async def create(
        self,
        filename: str,
        chunks: AsyncIterator[bytes],
        correlation_id: UUID | None = None,
    ) -> int:
        path = self._root / filename
        try:
            written = await stream_to_file(
                chunks,
                path,
                max_bytes=self.max_upload_bytes,
                buffer_size=self.buffer_size,
            )
        except FileExistsError as exc:
            # Not ours to clean up
            logger.error(f"Refusing to overwrite {path}")
            raise_io_error(
                operation="create_blob",
                message=f"Blob already exists: {exc}",
                correlation_id=correlation_id,
                filename=filename,
            )
        except SmolpasteError:
            await self.discard(filename, correlation_id)
            raise
        except asyncio.CancelledError:
            # Client went away mid-upload
            await self.discard(filename, correlation_id)
            raise
        except (OSError, ValueError) as exc:
            logger.error(f"Failed to write {path}: {exc}", exc_info=True)
            await self.discard(filename, correlation_id)
            raise_io_error(
                operation="create_blob",
                message=f"Failed to store upload: {exc}",
                correlation_id=correlation_id,
                filename=filename,
            )

        logger.info(f"Created a {written} byte file.", filename=filename)
        return written

    async def remove(self, filename: str, correlation_id: UUID | None = None) -> None:
        path = self._root / filename
        try:
            await aiofiles.os.remove(path)
        except OSError as exc:
            logger.error(f"Failed to remove {path}: {exc}")
            raise_io_error(
                operation="remove_blob",
                message=f"Failed to remove blob: {exc}",
                correlation_id=correlation_id,
                filename=filename,
            )

    async def discard(self, filename: str, correlation_id: UUID | None = None) -> None:
        path = self._root / filename
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error(f"Could not discard {path}, file is orphaned: {exc}")
            return
        logger.info(f"Discarded {filename}")

    async def serve_file(self, filename: str) -> Response:
        return await send_from_directory(self._root, filename)
