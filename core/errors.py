from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, status

from core.storage.errors import (
    DocumentNotFoundError,
    StorageError,
    StorageTransportError,
    StorageUnauthorizedError,
)


class ErrorCode(str, Enum):
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    DOCUMENT_UPLOAD_INVALID = "DOCUMENT_UPLOAD_INVALID"
    STORAGE_UNAUTHORIZED = "STORAGE_UNAUTHORIZED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    STORAGE_ERROR = "STORAGE_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(HTTPException):
    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        detail = {
            "message": message,
            "code": code.value,
            "details": details,
        }
        super().__init__(status_code=status_code, detail=detail, headers=headers)


def document_upload_invalid(message: str, details: Any | None = None) -> AppException:
    return AppException(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorCode.DOCUMENT_UPLOAD_INVALID,
        message=message,
        details=details,
    )


def document_too_large(max_size_bytes: int) -> AppException:
    return AppException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        code=ErrorCode.DOCUMENT_UPLOAD_INVALID,
        message="File too large",
        details={"max_size_bytes": max_size_bytes},
    )


def storage_error_status(exc: StorageError) -> tuple[int, ErrorCode]:
    if isinstance(exc, DocumentNotFoundError):
        return status.HTTP_404_NOT_FOUND, ErrorCode.DOCUMENT_NOT_FOUND
    if isinstance(exc, StorageUnauthorizedError):
        return status.HTTP_502_BAD_GATEWAY, ErrorCode.STORAGE_UNAUTHORIZED
    if isinstance(exc, StorageTransportError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, ErrorCode.STORAGE_UNAVAILABLE
    return status.HTTP_502_BAD_GATEWAY, ErrorCode.STORAGE_ERROR


def storage_error_details(exc: StorageError, *, include_cause: bool = False) -> dict[str, Any]:
    details: dict[str, Any] = {"operation": exc.operation, "kind": exc.kind}
    if exc.doc_id:
        details["doc_id"] = exc.doc_id
    if include_cause and exc.cause is not None:
        details["cause"] = repr(exc.cause)
    return details
