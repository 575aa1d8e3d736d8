from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from api.v1.documents_route import router as v1_documents_route_router
from core.logging_config import configure_logging
from core.response_envelope import (
    apply_response_documentation,
    document_response,
    error_response,
    http_exception_response,
    request_id_from_request,
    storage_error_response,
)
from core.settings import get_settings
from core.storage import StorageError, build_document_gateway

settings = get_settings()
configure_logging(settings.log_level)


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        elapsed = time.time() - start_time
        response.headers["X-Process-Time"] = str(elapsed)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed * 1000:.1f}ms")
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    gateway = build_document_gateway(settings)
    if settings.storage_auto_create_bucket:
        await run_in_threadpool(gateway.ensure_bucket)

    app.state.document_gateway = gateway
    app.state.max_upload_size_bytes = settings.max_upload_size_bytes
    logger.info(
        f"Document storage ready: bucket={gateway.bucket} endpoint={settings.minio_url} "
        f"mode={gateway.config.transfer_mode.value}"
    )
    yield


app = FastAPI(lifespan=lifespan, title="LMS Document Storage API")
app.add_middleware(RequestIdMiddleware)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins) if settings.cors_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _include_error_details() -> bool:
    return settings.debug_include_error_details and not settings.is_production


@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
    return http_exception_response(exc=exc, request=request)


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    return storage_error_response(exc, request, include_cause=_include_error_details())


@app.exception_handler(RequestValidationError)
async def custom_validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        status_code=422,
        message="Validation error",
        data={"code": "VALIDATION_FAILED", "details": jsonable_encoder(exc.errors())},
        request_id=request_id_from_request(request),
    )


@app.exception_handler(Exception)
async def custom_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status_code=500,
        message="Internal Server Error",
        data={"code": "INTERNAL_ERROR", "details": str(exc) if _include_error_details() else None},
        request_id=request_id_from_request(request),
    )


@app.get("/health", tags=["Health"])
@document_response(
    message="Health check completed",
    success_example={"status": "healthy", "services": {"object_store": {"status": "healthy"}}},
)
async def health_check(request: Request):
    gateway = request.app.state.document_gateway
    overall_status = "healthy"

    start = time.perf_counter()
    try:
        await run_in_threadpool(gateway.check_health)
        object_store = {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "message": f"Bucket {gateway.bucket} reachable",
        }
    except StorageError as exc:
        overall_status = "degraded"
        object_store = {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "message": f"{exc.message} ({exc.kind})",
        }

    return {
        "status": overall_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {"object_store": object_store},
    }


app.include_router(v1_documents_route_router, prefix="/v1")

apply_response_documentation(app)
