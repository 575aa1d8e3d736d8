from core.storage.errors import (
    DocumentNotFoundError,
    StorageError,
    StorageTransportError,
    StorageUnauthorizedError,
    StorageUnknownError,
)
from core.storage.factory import build_document_gateway, build_s3_client
from core.storage.gateway import DocumentStorageGateway
from core.storage.types import DocumentMetadata, GatewayConfig, StoredDocument, TransferMode, UploadDescriptor

__all__ = [
    "DocumentMetadata",
    "DocumentNotFoundError",
    "DocumentStorageGateway",
    "GatewayConfig",
    "StorageError",
    "StorageTransportError",
    "StorageUnauthorizedError",
    "StorageUnknownError",
    "StoredDocument",
    "TransferMode",
    "UploadDescriptor",
    "build_document_gateway",
    "build_s3_client",
]
