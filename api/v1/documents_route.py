from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from api.deps import get_document_gateway, get_max_upload_size
from core.response_envelope import document_response
from core.storage import DocumentStorageGateway
from schemas.document_schema import (
    DocumentExistsOut,
    DocumentMetadataOut,
    UploadDescriptorOut,
    UploadIntentRequest,
)
from services.document_service import (
    create_document,
    create_upload_intent,
    delete_document,
    document_exists,
    get_document_metadata,
    get_document_url,
    read_document,
)

router = APIRouter(prefix="/documents", tags=["Documents"])

_STORAGE_ERRORS = {
    404: "Document not found",
    502: "Object store rejected the request",
    503: "Object store unreachable",
}
_DOWNLOAD_RESPONSES: dict[int | str, dict] = {
    200: {"content": {"application/octet-stream": {}}, "description": "Document bytes"},
    **{code: {"description": text} for code, text in _STORAGE_ERRORS.items()},
}


@router.post("")
@document_response(
    message="Document created",
    status_code=201,
    response_codes={400: "Missing content type", 413: "File too large", **_STORAGE_ERRORS},
)
async def upload_document(
    file: UploadFile = File(...),
    gateway: DocumentStorageGateway = Depends(get_document_gateway),
    max_size_bytes: int = Depends(get_max_upload_size),
):
    content = await file.read()
    descriptor = await create_document(
        gateway,
        content=content,
        content_type=file.content_type,
        max_size_bytes=max_size_bytes,
    )
    return UploadDescriptorOut.from_descriptor(descriptor)


@router.post("/upload-intents")
@document_response(message="Upload intent created", status_code=201, response_codes=_STORAGE_ERRORS)
async def create_document_upload_intent(
    payload: UploadIntentRequest,
    gateway: DocumentStorageGateway = Depends(get_document_gateway),
):
    descriptor = await create_upload_intent(
        gateway,
        content_type=payload.content_type,
        expires_in=payload.expires_in,
    )
    return UploadDescriptorOut.from_descriptor(descriptor)


@router.get("/{doc_id}/url")
@document_response(message="Document URL issued", response_codes=_STORAGE_ERRORS)
async def get_url(
    doc_id: str,
    expires_in: int | None = Query(default=None, gt=0),
    gateway: DocumentStorageGateway = Depends(get_document_gateway),
):
    return await get_document_url(gateway, doc_id, expires_in=expires_in)


@router.get("/{doc_id}/metadata")
@document_response(message="Document metadata fetched", response_codes=_STORAGE_ERRORS)
async def get_metadata(doc_id: str, gateway: DocumentStorageGateway = Depends(get_document_gateway)):
    metadata = await get_document_metadata(gateway, doc_id)
    return DocumentMetadataOut.from_metadata(doc_id, metadata)


@router.get("/{doc_id}/exists")
@document_response(message="Document existence checked", response_codes=_STORAGE_ERRORS)
async def check_exists(
    doc_id: str,
    strict: bool = Query(default=False),
    gateway: DocumentStorageGateway = Depends(get_document_gateway),
):
    exists = await document_exists(gateway, doc_id, strict=strict)
    return DocumentExistsOut(doc_id=doc_id, exists=exists)


@router.get("/{doc_id}", responses=_DOWNLOAD_RESPONSES)
async def download_document(doc_id: str, gateway: DocumentStorageGateway = Depends(get_document_gateway)):
    document = await read_document(gateway, doc_id)
    return Response(content=document.data, media_type=document.content_type)


@router.delete("/{doc_id}")
@document_response(message="Document deleted", response_codes=_STORAGE_ERRORS)
async def remove_document(doc_id: str, gateway: DocumentStorageGateway = Depends(get_document_gateway)):
    await delete_document(gateway, doc_id)
    return {"deleted": True}
