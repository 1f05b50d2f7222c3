"""Shared helpers for building upload requests in tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable

BOUNDARY = "smolpaste-test-boundary"


def multipart_body(
    parts: Iterable[tuple[str, str | None, bytes]],
    boundary: str = BOUNDARY,
) -> bytes:
    """Encode ``(field name, filename or None, content)`` tuples as form-data."""
    chunks: list[bytes] = []
    for name, filename, content in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        chunks.append(
            f"--{boundary}\r\nContent-Disposition: {disposition}\r\n"
            "Content-Type: application/octet-stream\r\n\r\n".encode()
        )
        chunks.append(content)
        chunks.append(b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks)


def multipart_headers(boundary: str = BOUNDARY) -> dict[str, str]:
    return {"Content-Type": f"multipart/form-data; boundary={boundary}"}


async def chunked(data: bytes, size: int) -> AsyncIterator[bytes]:
    """Yield ``data`` in pieces of at most ``size`` bytes."""
    for start in range(0, len(data), size):
        yield data[start : start + size]
