from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class TransferMode(str, Enum):
    DIRECT = "direct"
    PRESIGNED = "presigned"


@dataclass(frozen=True)
class GatewayConfig:
    bucket: str
    endpoint_url: str
    transfer_mode: TransferMode = TransferMode.DIRECT
    public_urls: bool = False
    url_expiry_seconds: int = 3600
    read_url_expiry_seconds: int = 60
    key_prefix: str = ""
    http_timeout_seconds: float = 30
    region: str = "us-east-1"


@dataclass(frozen=True)
class UploadDescriptor:
    doc_id: str
    url: str
    expires_in: int | None
    method: str = "GET"
    headers: dict[str, str] | None = None


@dataclass(frozen=True)
class StoredDocument:
    data: bytes
    content_type: str


@dataclass(frozen=True)
class DocumentMetadata:
    content_type: str
    size: int
