from __future__ import annotations

from pydantic import BaseModel, Field

from core.storage.types import DocumentMetadata, UploadDescriptor


class UploadIntentRequest(BaseModel):
    content_type: str = Field(min_length=1)
    expires_in: int | None = Field(default=None, gt=0)


class UploadDescriptorOut(BaseModel):
    doc_id: str
    url: str
    expires_in: int | None = None
    method: str
    headers: dict[str, str] | None = None

    @classmethod
    def from_descriptor(cls, descriptor: UploadDescriptor) -> "UploadDescriptorOut":
        return cls(
            doc_id=descriptor.doc_id,
            url=descriptor.url,
            expires_in=descriptor.expires_in,
            method=descriptor.method,
            headers=descriptor.headers,
        )


class DocumentUrlOut(BaseModel):
    doc_id: str
    url: str
    expires_in: int | None = None


class DocumentMetadataOut(BaseModel):
    doc_id: str
    content_type: str
    size: int

    @classmethod
    def from_metadata(cls, doc_id: str, metadata: DocumentMetadata) -> "DocumentMetadataOut":
        return cls(doc_id=doc_id, content_type=metadata.content_type, size=metadata.size)


class DocumentExistsOut(BaseModel):
    doc_id: str
    exists: bool
