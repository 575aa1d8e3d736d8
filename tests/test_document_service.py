from __future__ import annotations

import pytest

from core.errors import AppException
from services import document_service
from tests.fakes import BUCKET, FakeS3Client, make_gateway


@pytest.mark.asyncio
async def test_create_document_requires_content_type():
    gateway = make_gateway(FakeS3Client())

    with pytest.raises(AppException) as exc_info:
        await document_service.create_document(gateway, content=b"abc", content_type=None, max_size_bytes=10)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["code"] == "DOCUMENT_UPLOAD_INVALID"


@pytest.mark.asyncio
async def test_create_document_enforces_size_limit_before_touching_store():
    store = FakeS3Client()
    gateway = make_gateway(store)

    with pytest.raises(AppException) as exc_info:
        await document_service.create_document(gateway, content=b"x" * 11, content_type="text/plain", max_size_bytes=10)

    assert exc_info.value.status_code == 413
    assert exc_info.value.detail["details"] == {"max_size_bytes": 10}
    assert store.calls == []


@pytest.mark.asyncio
async def test_create_read_delete_through_service():
    store = FakeS3Client()
    gateway = make_gateway(store)

    descriptor = await document_service.create_document(
        gateway, content=b"assignment", content_type="text/plain", max_size_bytes=1024
    )
    stored = await document_service.read_document(gateway, descriptor.doc_id)
    metadata = await document_service.get_document_metadata(gateway, descriptor.doc_id)

    assert stored.data == b"assignment"
    assert metadata.size == len(b"assignment")
    assert await document_service.document_exists(gateway, descriptor.doc_id) is True

    assert await document_service.delete_document(gateway, descriptor.doc_id) is True
    assert (BUCKET, descriptor.doc_id) not in store.objects


@pytest.mark.asyncio
async def test_get_document_url_reports_effective_expiry():
    gateway = make_gateway(FakeS3Client())
    public_gateway = make_gateway(FakeS3Client(), public_urls=True)

    signed = await document_service.get_document_url(gateway, "doc-1")
    public = await document_service.get_document_url(public_gateway, "doc-1", expires_in=30)

    assert signed.expires_in == 3600
    assert public.expires_in is None
    assert public.url.endswith(f"/{BUCKET}/doc-1")


@pytest.mark.asyncio
async def test_get_document_url_expiry_comes_from_gateway(monkeypatch: pytest.MonkeyPatch):
    gateway = make_gateway(FakeS3Client())
    monkeypatch.setattr(gateway, "url_lifetime", lambda expiry_seconds=None: 42)

    result = await document_service.get_document_url(gateway, "doc-1", expires_in=10)

    assert result.expires_in == 42
