from __future__ import annotations

from fastapi import Request

from core.settings import DEFAULT_MAX_UPLOAD_SIZE_BYTES
from core.storage import DocumentStorageGateway


def get_document_gateway(request: Request) -> DocumentStorageGateway:
    gateway = getattr(request.app.state, "document_gateway", None)
    if gateway is None:
        raise RuntimeError("Document storage gateway is not configured")
    return gateway


def get_max_upload_size(request: Request) -> int:
    return getattr(request.app.state, "max_upload_size_bytes", DEFAULT_MAX_UPLOAD_SIZE_BYTES)
