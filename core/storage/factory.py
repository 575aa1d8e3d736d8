from __future__ import annotations

import boto3
from botocore.config import Config

from core.settings import Settings
from core.storage.gateway import DocumentStorageGateway
from core.storage.provider import HttpSession, ObjectStoreClient
from core.storage.types import GatewayConfig, TransferMode


def _normalize_prefix(prefix: str) -> str:
    prefix = (prefix or "").strip().lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix = prefix + "/"
    return prefix


def build_s3_client(settings: Settings) -> ObjectStoreClient:
    # MinIO and most S3-compatible stores need path-style addressing and SigV4.
    cfg = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path"},
        retries={"total_max_attempts": settings.storage_max_attempts, "mode": "standard"},
        region_name=settings.storage_region,
    )
    return boto3.client(
        "s3",
        endpoint_url=settings.minio_url,
        aws_access_key_id=settings.minio_access_key,
        aws_secret_access_key=settings.minio_secret_key,
        config=cfg,
    )


def build_gateway_config(settings: Settings) -> GatewayConfig:
    return GatewayConfig(
        bucket=settings.minio_bucket,
        endpoint_url=settings.minio_url,
        transfer_mode=TransferMode(settings.storage_transfer_mode),
        public_urls=settings.storage_public_urls,
        url_expiry_seconds=settings.storage_url_expiry_seconds,
        read_url_expiry_seconds=settings.storage_read_url_expiry_seconds,
        key_prefix=_normalize_prefix(settings.storage_key_prefix),
        http_timeout_seconds=settings.storage_http_timeout_seconds,
        region=settings.storage_region,
    )


def build_document_gateway(
    settings: Settings,
    *,
    client: ObjectStoreClient | None = None,
    http: HttpSession | None = None,
) -> DocumentStorageGateway:
    return DocumentStorageGateway(
        client=client if client is not None else build_s3_client(settings),
        config=build_gateway_config(settings),
        http=http,
    )
