"""
Structured error handling for smolpaste.

Domain failures are raised as ``SmolpasteError`` carrying an ``ErrorDetail``.
``ERROR_STATUS_CODES`` is the single table translating an error kind into the
HTTP status returned to the client.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, NoReturn
from uuid import UUID, uuid4

from pydantic import BaseModel, Field
from quart import Response


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"
    IO_ERROR = "IO_ERROR"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.STORAGE_ERROR: 500,
    ErrorCode.IO_ERROR: 500,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.INTERNAL_ERROR: 500,
}


class ErrorDetail(BaseModel):
    """Immutable description of a single failure."""

    model_config = {"frozen": True}

    error_code: ErrorCode
    message: str
    correlation_id: UUID
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    operation: str
    details: dict[str, Any] = Field(default_factory=dict)


class SmolpasteError(Exception):
    """Exception raised for every domain failure in the service."""

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(error_detail.message)
        self.error_detail = error_detail

    def __str__(self) -> str:
        return f"[{self.error_detail.error_code.value}] {self.error_detail.message}"

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def status_code(self) -> int:
        """HTTP status this error translates to."""
        return ERROR_STATUS_CODES[self.error_detail.error_code]

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500


def _raise(
    error_code: ErrorCode,
    operation: str,
    message: str,
    correlation_id: UUID | None,
    details: dict[str, Any],
) -> NoReturn:
    raise SmolpasteError(
        ErrorDetail(
            error_code=error_code,
            message=message,
            correlation_id=correlation_id or uuid4(),
            operation=operation,
            details=details,
        )
    )


def raise_bad_request(
    operation: str, message: str, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    """Malformed multipart body, missing upload filename or unusable extension."""
    _raise(ErrorCode.BAD_REQUEST, operation, message, correlation_id, details)


def raise_unauthorized(
    operation: str, message: str, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    _raise(ErrorCode.UNAUTHORIZED, operation, message, correlation_id, details)


def raise_not_found(
    operation: str,
    resource_type: str,
    resource_id: str,
    correlation_id: UUID | None = None,
    **details: Any,
) -> NoReturn:
    _raise(
        ErrorCode.NOT_FOUND,
        operation,
        f"{resource_type} '{resource_id}' not found",
        correlation_id,
        {"resource_type": resource_type, "resource_id": resource_id, **details},
    )


def raise_storage_error(
    operation: str, message: str, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    """Any metadata store failure other than a missing row."""
    _raise(ErrorCode.STORAGE_ERROR, operation, message, correlation_id, details)


def raise_io_error(
    operation: str, message: str, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    """Any filesystem failure while creating or removing a blob."""
    _raise(ErrorCode.IO_ERROR, operation, message, correlation_id, details)


def raise_payload_too_large(
    operation: str, limit: int, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    _raise(
        ErrorCode.PAYLOAD_TOO_LARGE,
        operation,
        f"Upload exceeds the {limit} byte limit",
        correlation_id,
        {"limit": limit, **details},
    )


def raise_internal_error(
    operation: str, message: str, correlation_id: UUID | None = None, **details: Any
) -> NoReturn:
    _raise(ErrorCode.INTERNAL_ERROR, operation, message, correlation_id, details)


def error_response(error: SmolpasteError) -> Response:
    """Translate a domain error into an empty-bodied HTTP response."""
    return Response("", status=error.status_code)
