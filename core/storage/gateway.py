from __future__ import annotations

from typing import Any
from urllib.parse import quote
from uuid import uuid4

import requests
from botocore.exceptions import ClientError
from loguru import logger

from core.storage.errors import DocumentNotFoundError, StorageError, classify_error, wrap_error
from core.storage.provider import HttpSession, ObjectStoreClient
from core.storage.types import (
    DEFAULT_CONTENT_TYPE,
    DocumentMetadata,
    GatewayConfig,
    StoredDocument,
    TransferMode,
    UploadDescriptor,
)


class DocumentStorageGateway:
    """Document create/read/delete/inspect against one S3-compatible bucket.

    ``TransferMode.DIRECT`` moves bytes through the S3 API from this process.
    ``TransferMode.PRESIGNED`` signs a short-lived URL and moves the bytes over
    plain HTTP. Every operation is a single independent round trip; failures are
    logged and re-raised as a typed ``StorageError`` chained to the original.
    """

    def __init__(
        self,
        *,
        client: ObjectStoreClient,
        config: GatewayConfig,
        http: HttpSession | None = None,
    ) -> None:
        if not config.bucket:
            raise RuntimeError("A bucket name is required for the document storage gateway")

        self._client = client
        self._config = config
        self._http = http if http is not None else requests.Session()

    @property
    def config(self) -> GatewayConfig:
        return self._config

    @property
    def bucket(self) -> str:
        return self._config.bucket

    def _key(self, doc_id: str) -> str:
        doc_id = (doc_id or "").lstrip("/")
        return f"{self._config.key_prefix}{doc_id}"

    def _fail(self, err: Exception, *, message: str, operation: str, doc_id: str | None) -> StorageError:
        logger.error(f"{message} (operation={operation}, bucket={self.bucket}, doc_id={doc_id}): {err!r}")
        return wrap_error(err, message=message, operation=operation, doc_id=doc_id)

    def _presign(self, method: str, doc_id: str, expiry_seconds: int, **params: Any) -> str:
        return self._client.generate_presigned_url(
            ClientMethod=method,
            Params={"Bucket": self.bucket, "Key": self._key(doc_id), **params},
            ExpiresIn=expiry_seconds,
        )

    def _public_url(self, doc_id: str) -> str:
        endpoint = self._config.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.bucket}/{quote(self._key(doc_id))}"

    def url_lifetime(self, expiry_seconds: int | None = None) -> int | None:
        """Seconds a document URL stays valid, or None for unsigned public URLs."""
        if self._config.public_urls:
            return None
        return expiry_seconds if expiry_seconds is not None else self._config.url_expiry_seconds

    def _document_url(self, doc_id: str, expiry_seconds: int) -> str:
        if self._config.public_urls:
            return self._public_url(doc_id)
        return self._presign("get_object", doc_id, expiry_seconds)

    @staticmethod
    def _raise_for_status(response: Any) -> None:
        if response.status_code >= 400:
            raise requests.HTTPError(
                f"Object store responded with HTTP {response.status_code}",
                response=response,
            )

    def create_document(
        self,
        content: bytes,
        content_type: str,
        expiry_seconds: int | None = None,
    ) -> UploadDescriptor:
        expiry = expiry_seconds if expiry_seconds is not None else self._config.url_expiry_seconds
        doc_id = str(uuid4())
        try:
            if self._config.transfer_mode is TransferMode.PRESIGNED:
                upload_url = self._presign("put_object", doc_id, expiry, ContentType=content_type)
                response = self._http.put(
                    upload_url,
                    data=content,
                    headers={"Content-Type": content_type},
                    timeout=self._config.http_timeout_seconds,
                )
                self._raise_for_status(response)
            else:
                self._client.put_object(
                    Bucket=self.bucket,
                    Key=self._key(doc_id),
                    Body=content,
                    ContentLength=len(content),
                    ContentType=content_type,
                )
            url = self._document_url(doc_id, expiry)
        except Exception as err:
            raise self._fail(err, message="Failed to create document", operation="create_document", doc_id=doc_id) from err

        logger.info(f"Stored document {doc_id} ({len(content)} bytes, {content_type}) in bucket {self.bucket}")
        return UploadDescriptor(
            doc_id=doc_id,
            url=url,
            expires_in=self.url_lifetime(expiry),
            method="GET",
        )

    def create_upload_intent(self, content_type: str, expiry_seconds: int | None = None) -> UploadDescriptor:
        """Sign a PUT URL so the client can send the bytes itself."""
        expiry = expiry_seconds if expiry_seconds is not None else self._config.url_expiry_seconds
        doc_id = str(uuid4())
        try:
            url = self._presign("put_object", doc_id, expiry, ContentType=content_type)
        except Exception as err:
            raise self._fail(err, message="Failed to create upload URL", operation="create_upload_intent", doc_id=doc_id) from err

        return UploadDescriptor(
            doc_id=doc_id,
            url=url,
            expires_in=expiry,
            method="PUT",
            headers={"Content-Type": content_type},
        )

    def get_document_url(self, doc_id: str, expiry_seconds: int | None = None) -> str:
        # No existence check: a bad doc_id only fails when the URL is fetched.
        expiry = expiry_seconds if expiry_seconds is not None else self._config.url_expiry_seconds
        try:
            return self._document_url(doc_id, expiry)
        except Exception as err:
            raise self._fail(err, message="Failed to get document URL", operation="get_document_url", doc_id=doc_id) from err

    def read_document(self, doc_id: str) -> StoredDocument:
        try:
            if self._config.transfer_mode is TransferMode.PRESIGNED:
                head = self._client.head_object(Bucket=self.bucket, Key=self._key(doc_id))
                url = self._presign("get_object", doc_id, self._config.read_url_expiry_seconds)
                response = self._http.get(url, timeout=self._config.http_timeout_seconds)
                self._raise_for_status(response)
                data = response.content
                content_type = head.get("ContentType")
            else:
                resp = self._client.get_object(Bucket=self.bucket, Key=self._key(doc_id))
                body = resp["Body"]
                try:
                    data = body.read()
                finally:
                    body.close()
                content_type = resp.get("ContentType")
        except Exception as err:
            raise self._fail(err, message="Failed to read document", operation="read_document", doc_id=doc_id) from err

        return StoredDocument(data=data, content_type=content_type or DEFAULT_CONTENT_TYPE)

    def delete_document(self, doc_id: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=self._key(doc_id))
        except Exception as err:
            raise self._fail(err, message="Failed to delete document", operation="delete_document", doc_id=doc_id) from err
        logger.info(f"Deleted document {doc_id} from bucket {self.bucket}")

    def get_document_metadata(self, doc_id: str) -> DocumentMetadata:
        try:
            head = self._client.head_object(Bucket=self.bucket, Key=self._key(doc_id))
        except Exception as err:
            raise self._fail(
                err,
                message="Failed to get document metadata",
                operation="get_document_metadata",
                doc_id=doc_id,
            ) from err

        return DocumentMetadata(
            content_type=head.get("ContentType") or DEFAULT_CONTENT_TYPE,
            size=int(head.get("ContentLength") or 0),
        )

    def document_exists(self, doc_id: str, *, strict: bool = False) -> bool:
        """Report whether ``doc_id`` is stored.

        Non-strict: every failure reads as "absent", so an outage looks the same
        as a missing object. Strict: only not-found reads as absent and every
        other failure is raised.
        """
        try:
            self._client.head_object(Bucket=self.bucket, Key=self._key(doc_id))
            return True
        except Exception as err:
            failure = wrap_error(
                err,
                message="Failed to check document existence",
                operation="document_exists",
                doc_id=doc_id,
            )
            if isinstance(failure, DocumentNotFoundError):
                return False
            if strict:
                logger.error(f"{failure.message} (bucket={self.bucket}, doc_id={doc_id}): {err!r}")
                raise failure from err
            logger.warning(f"Treating {doc_id} as absent after {failure.kind} failure: {err!r}")
            return False

    def _bucket_exists(self) -> bool:
        try:
            self._client.head_bucket(Bucket=self.bucket)
        except ClientError as err:
            if classify_error(err) is DocumentNotFoundError:
                return False
            raise
        return True

    def ensure_bucket(self) -> None:
        try:
            if self._bucket_exists():
                return
            params: dict[str, Any] = {"Bucket": self.bucket}
            # us-east-1 is the implicit default and rejects an explicit constraint.
            if self._config.region and self._config.region != "us-east-1":
                params["CreateBucketConfiguration"] = {"LocationConstraint": self._config.region}
            self._client.create_bucket(**params)
        except Exception as err:
            raise self._fail(err, message="Failed to prepare bucket", operation="ensure_bucket", doc_id=None) from err
        logger.info(f"Created bucket {self.bucket}")

    def check_health(self) -> None:
        try:
            self._client.head_bucket(Bucket=self.bucket)
        except Exception as err:
            raise self._fail(err, message="Storage health check failed", operation="check_health", doc_id=None) from err
