"""Request parsing helpers for paste routes."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import PurePosixPath
from uuid import UUID

from quart import request

from smolpaste.error_handling import raise_bad_request

_FORBIDDEN_EXTENSION_CHARS = frozenset("/\\\x00")


def extract_token() -> str | None:
    """
    Return the caller's token.

    The ``token`` query parameter wins; an ``Authorization: Bearer`` header is
    used only when the parameter is absent.
    """
    token = request.args.get("token")
    if token is not None:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def upload_extension(upload_name: str) -> str | None:
    """
    Return the trailing extension of a client-supplied file name.

    Only the final path component is considered. Names without a dot, with a
    leading dot only (``.bashrc``) or ending in a dot have no extension.
    """
    basename = PurePosixPath(upload_name).name
    stem, dot, extension = basename.rpartition(".")
    if not dot or not stem or not extension:
        return None
    return extension


def _is_text(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return value.isprintable()


def stored_filename(
    paste_id: str,
    upload_name: str,
    allowed_extensions: Collection[str] = (),
    correlation_id: UUID | None = None,
) -> str:
    """
    Build the on-disk name ``<id>`` or ``<id>.<ext>`` for an upload.

    The client's stem is discarded; only its extension survives.
    """
    extension = upload_extension(upload_name)
    if extension is None:
        return paste_id

    if not _is_text(extension) or _FORBIDDEN_EXTENSION_CHARS.intersection(extension):
        raise_bad_request(
            operation="stored_filename",
            message="Upload file extension is not valid text",
            correlation_id=correlation_id,
        )
    if allowed_extensions and extension.lower() not in allowed_extensions:
        raise_bad_request(
            operation="stored_filename",
            message=f"Extension '{extension}' is not allowed",
            correlation_id=correlation_id,
        )
    return f"{paste_id}.{extension}"
