"""
Incremental multipart/form-data reader over a streamed request body.

Wraps werkzeug's sans-IO ``MultipartDecoder`` so that parts are discovered and
their data consumed chunk by chunk as the body arrives.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

from werkzeug.datastructures import Headers
from werkzeug.http import parse_options_header
from werkzeug.sansio.multipart import (
    Data,
    Epilogue,
    Event,
    Field,
    File,
    MultipartDecoder,
    NeedData,
)


def multipart_boundary(content_type: str | None) -> bytes | None:
    """Return the boundary of a multipart/form-data Content-Type, if any."""
    if not content_type:
        return None
    mimetype, options = parse_options_header(content_type)
    if mimetype != "multipart/form-data":
        return None
    boundary = options.get("boundary")
    if not boundary:
        return None
    try:
        return boundary.encode("ascii")
    except UnicodeEncodeError:
        return None


@dataclass
class UploadPart:
    """One part of a multipart body whose data has not been read yet."""

    name: str | None
    filename: str | None
    headers: Headers
    _reader: MultipartReader

    def iter_data(self) -> AsyncIterator[bytes]:
        return self._reader.iter_data()


class MultipartReader:
    """
    Pull parts out of a streamed multipart body.

    Parsing errors surface as ``ValueError``. Data must be consumed in order:
    ``next_part`` then ``UploadPart.iter_data`` until exhausted.
    """

    def __init__(self, body: AsyncIterable[bytes], boundary: bytes) -> None:
        self._body = body.__aiter__()
        self._decoder = MultipartDecoder(boundary)
        self._body_exhausted = False

    async def _next_event(self) -> Event:
        while True:
            event = self._decoder.next_event()
            if not isinstance(event, NeedData):
                return event
            if self._body_exhausted:
                raise ValueError("Multipart body ended unexpectedly")
            try:
                chunk = await self._body.__anext__()
            except StopAsyncIteration:
                self._body_exhausted = True
                self._decoder.receive_data(None)
            else:
                self._decoder.receive_data(chunk)

    async def next_part(self) -> UploadPart | None:
        """Advance to the next part header, or return None after the last part."""
        while True:
            event = await self._next_event()
            if isinstance(event, File):
                return UploadPart(event.name, event.filename, event.headers, self)
            if isinstance(event, Field):
                return UploadPart(event.name, None, event.headers, self)
            if isinstance(event, Epilogue):
                return None
            if isinstance(event, Data):
                # Leftover data of a part the caller did not consume
                continue

    async def iter_data(self) -> AsyncIterator[bytes]:
        """Yield the data of the current part until its closing boundary."""
        while True:
            event = await self._next_event()
            if not isinstance(event, Data):
                raise ValueError(f"Expected part data, got {type(event).__name__}")
            if event.data:
                yield event.data
            if not event.more_data:
                return
