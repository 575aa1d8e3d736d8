from __future__ import annotations

import requests
from botocore.exceptions import (
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject", "NotFound", "404"}
_UNAUTHORIZED_CODES = {
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "Forbidden",
    "401",
    "403",
}


class StorageError(Exception):
    """Base failure raised by every gateway operation.

    ``message`` is the per-operation summary shown to callers, ``cause`` is the
    original client or transport error (also available as ``__cause__``).
    """

    kind = "unknown"

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        doc_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.doc_id = doc_id
        self.cause = cause


class DocumentNotFoundError(StorageError):
    kind = "not_found"


class StorageUnauthorizedError(StorageError):
    kind = "unauthorized"


class StorageTransportError(StorageError):
    kind = "transport"


class StorageUnknownError(StorageError):
    kind = "unknown"


def _client_error_class(err: ClientError) -> type[StorageError]:
    error = err.response.get("Error", {}) if isinstance(err.response, dict) else {}
    code = str(error.get("Code", ""))
    status_code = (err.response.get("ResponseMetadata") or {}).get("HTTPStatusCode")

    if code in _NOT_FOUND_CODES or status_code == 404:
        return DocumentNotFoundError
    if code in _UNAUTHORIZED_CODES or status_code in (401, 403):
        return StorageUnauthorizedError
    return StorageUnknownError


def _http_status_class(status_code: int | None) -> type[StorageError]:
    if status_code == 404:
        return DocumentNotFoundError
    if status_code in (401, 403):
        return StorageUnauthorizedError
    return StorageUnknownError


def classify_error(err: BaseException) -> type[StorageError]:
    if isinstance(err, StorageError):
        return type(err)
    if isinstance(err, ClientError):
        return _client_error_class(err)
    if isinstance(err, (NoCredentialsError, PartialCredentialsError)):
        return StorageUnauthorizedError
    if isinstance(err, (BotoConnectionError, HTTPClientError)):
        return StorageTransportError
    if isinstance(err, requests.HTTPError):
        response = getattr(err, "response", None)
        return _http_status_class(getattr(response, "status_code", None))
    if isinstance(err, requests.RequestException):
        return StorageTransportError
    return StorageUnknownError


def wrap_error(
    err: BaseException,
    *,
    message: str,
    operation: str,
    doc_id: str | None = None,
) -> StorageError:
    error_class = classify_error(err)
    return error_class(message, operation=operation, doc_id=doc_id, cause=err)
