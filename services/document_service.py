from __future__ import annotations

from starlette.concurrency import run_in_threadpool

from core.errors import document_too_large, document_upload_invalid
from core.storage import DocumentMetadata, DocumentStorageGateway, StoredDocument, UploadDescriptor
from schemas.document_schema import DocumentUrlOut

# Gateway calls block on network I/O, so they run on the threadpool.


async def create_document(
    gateway: DocumentStorageGateway,
    *,
    content: bytes,
    content_type: str | None,
    max_size_bytes: int,
) -> UploadDescriptor:
    if not content_type:
        raise document_upload_invalid("A content type is required")
    if len(content) > max_size_bytes:
        raise document_too_large(max_size_bytes)

    return await run_in_threadpool(gateway.create_document, content, content_type)


async def create_upload_intent(
    gateway: DocumentStorageGateway,
    *,
    content_type: str,
    expires_in: int | None = None,
) -> UploadDescriptor:
    return await run_in_threadpool(gateway.create_upload_intent, content_type, expires_in)


async def get_document_url(
    gateway: DocumentStorageGateway,
    doc_id: str,
    *,
    expires_in: int | None = None,
) -> DocumentUrlOut:
    url = await run_in_threadpool(gateway.get_document_url, doc_id, expires_in)
    return DocumentUrlOut(doc_id=doc_id, url=url, expires_in=gateway.url_lifetime(expires_in))


async def read_document(gateway: DocumentStorageGateway, doc_id: str) -> StoredDocument:
    return await run_in_threadpool(gateway.read_document, doc_id)


async def delete_document(gateway: DocumentStorageGateway, doc_id: str) -> bool:
    await run_in_threadpool(gateway.delete_document, doc_id)
    return True


async def get_document_metadata(gateway: DocumentStorageGateway, doc_id: str) -> DocumentMetadata:
    return await run_in_threadpool(gateway.get_document_metadata, doc_id)


async def document_exists(gateway: DocumentStorageGateway, doc_id: str, *, strict: bool = False) -> bool:
    return await run_in_threadpool(gateway.document_exists, doc_id, strict=strict)
