"""Enumerations shared by metrics and logging."""

from __future__ import annotations

from enum import Enum


class PasteOperation(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    SERVE = "serve"


class OperationStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    ERROR = "error"
