"""Streaming ingest: copy an unbounded chunk stream into a new file."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles

from smolpaste.error_handling import raise_payload_too_large

DEFAULT_BUFFER_SIZE = 64 * 1024


async def stream_to_file(
    chunks: AsyncIterator[bytes],
    path: Path,
    *,
    max_bytes: int,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> int:
    """
    Write every chunk to ``path`` through a buffered writer.

    The file is opened in exclusive-create mode, so an existing file is never
    overwritten. Nothing is cleaned up here; the caller owns the file on error.

    Args:
        chunks: Lazy, finite, non-restartable byte chunk source
        path: Destination file, which must not exist yet
        max_bytes: Largest accepted total size
        buffer_size: Size of the write buffer

    Returns:
        Total number of bytes written

    Raises:
        FileExistsError: If ``path`` already exists
        OSError: On any other filesystem failure
        SmolpasteError: PAYLOAD_TOO_LARGE once ``max_bytes`` would be exceeded
    """
    total = 0
    async with aiofiles.open(path, "xb", buffering=buffer_size) as sink:
        async for chunk in chunks:
            if not chunk:
                continue
            total += len(chunk)
            if total > max_bytes:
                raise_payload_too_large(
                    operation="stream_to_file",
                    limit=max_bytes,
                    path=str(path),
                )
            await sink.write(chunk)
        await sink.flush()
    return total
