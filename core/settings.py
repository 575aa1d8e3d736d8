from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_TRANSFER_MODES = {"direct", "presigned"}
DEFAULT_MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024

_POSITIVE_INT_VARS = (
    "STORAGE_URL_EXPIRY_SECONDS",
    "STORAGE_READ_URL_EXPIRY_SECONDS",
    "STORAGE_HTTP_TIMEOUT_SECONDS",
    "STORAGE_MAX_ATTEMPTS",
    "MAX_UPLOAD_SIZE_BYTES",
)


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return tuple()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env(name: str) -> str | None:
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    normalized = raw_value.strip()
    return normalized or None


def _env_flag(name: str, default: str = "false") -> bool:
    return (_env(name) or default).lower() in {"1", "true", "yes"}


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    return int(value) if value is not None else default


def collect_missing_required_env_vars() -> list[str]:
    missing: list[str] = []

    always_required = (
        "MINIO_URL",
        "MINIO_ACCESS_KEY",
        "MINIO_SECRET_KEY",
        "MINIO_BUCKET",
    )
    for var_name in always_required:
        if _env(var_name) is None:
            missing.append(var_name)

    return sorted(set(missing))


def collect_invalid_env_values() -> list[str]:
    invalid_values: list[str] = []

    minio_url = _env("MINIO_URL")
    if minio_url is not None:
        parsed = urlparse(minio_url)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            invalid_values.append("MINIO_URL must be an http(s) URL with a host, e.g. https://minio:9000")

    transfer_mode = (_env("STORAGE_TRANSFER_MODE") or "direct").lower()
    if transfer_mode not in SUPPORTED_TRANSFER_MODES:
        invalid_values.append("STORAGE_TRANSFER_MODE must be one of: direct, presigned")

    for var_name in _POSITIVE_INT_VARS:
        raw = _env(var_name)
        if raw is None:
            continue
        try:
            parsed_value = int(raw)
            if parsed_value <= 0:
                raise ValueError("must be positive")
        except ValueError:
            invalid_values.append(f"{var_name} must be a positive integer")

    return invalid_values


def validate_required_environment() -> None:
    missing_vars = collect_missing_required_env_vars()
    invalid_values = collect_invalid_env_values()
    if not missing_vars and not invalid_values:
        return

    message_lines = ["Application startup blocked by invalid environment configuration."]
    if missing_vars:
        message_lines.append("")
        message_lines.append("Missing required environment variables:")
        message_lines.extend(f"- {name}" for name in missing_vars)
    if invalid_values:
        message_lines.append("")
        message_lines.append("Invalid environment values:")
        message_lines.extend(f"- {message}" for message in invalid_values)
    raise RuntimeError("\n".join(message_lines))


@dataclass(frozen=True)
class Settings:
    env: str
    cors_origins: tuple[str, ...]
    debug_include_error_details: bool
    log_level: str
    minio_url: str
    minio_access_key: str
    minio_secret_key: str
    minio_bucket: str
    storage_region: str
    storage_transfer_mode: str
    storage_public_urls: bool
    storage_url_expiry_seconds: int
    storage_read_url_expiry_seconds: int
    storage_key_prefix: str
    storage_http_timeout_seconds: int
    storage_max_attempts: int
    storage_auto_create_bucket: bool
    max_upload_size_bytes: int

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    validate_required_environment()

    return Settings(
        env=os.getenv("ENV", "development"),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS")),
        debug_include_error_details=_env_flag("DEBUG_INCLUDE_ERROR_DETAILS"),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        minio_url=(_env("MINIO_URL") or "").rstrip("/"),
        minio_access_key=_env("MINIO_ACCESS_KEY") or "",
        minio_secret_key=_env("MINIO_SECRET_KEY") or "",
        minio_bucket=_env("MINIO_BUCKET") or "",
        storage_region=_env("STORAGE_REGION") or "us-east-1",
        storage_transfer_mode=(_env("STORAGE_TRANSFER_MODE") or "direct").lower(),
        storage_public_urls=_env_flag("STORAGE_PUBLIC_URLS"),
        storage_url_expiry_seconds=_env_int("STORAGE_URL_EXPIRY_SECONDS", 3600),
        storage_read_url_expiry_seconds=_env_int("STORAGE_READ_URL_EXPIRY_SECONDS", 60),
        storage_key_prefix=_env("STORAGE_KEY_PREFIX") or "",
        storage_http_timeout_seconds=_env_int("STORAGE_HTTP_TIMEOUT_SECONDS", 30),
        storage_max_attempts=_env_int("STORAGE_MAX_ATTEMPTS", 1),
        storage_auto_create_bucket=_env_flag("STORAGE_AUTO_CREATE_BUCKET"),
        max_upload_size_bytes=_env_int("MAX_UPLOAD_SIZE_BYTES", DEFAULT_MAX_UPLOAD_SIZE_BYTES),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
