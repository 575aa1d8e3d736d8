from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from api.v1 import documents_route
from core.response_envelope import storage_error_response
from core.storage import StorageError, TransferMode
from tests.fakes import BUCKET, FakeHttpSession, FakeS3Client, client_error, make_gateway


def _build_app(*, client: FakeS3Client, transfer_mode: TransferMode = TransferMode.DIRECT, max_size: int = 1024) -> FastAPI:
    app = FastAPI()
    app.include_router(documents_route.router, prefix="/v1")
    app.state.document_gateway = make_gateway(client, transfer_mode=transfer_mode, http=FakeHttpSession(client))
    app.state.max_upload_size_bytes = max_size

    @app.exception_handler(StorageError)
    async def _storage_error_handler(request: Request, exc: StorageError):
        return storage_error_response(exc, request)

    return app


def _upload(client: TestClient, content: bytes = b"week 1 notes", content_type: str = "text/plain"):
    return client.post("/v1/documents", files={"file": ("notes.txt", content, content_type)})


def test_upload_then_download_round_trips_bytes():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))

    created = _upload(client)

    assert created.status_code == 201
    payload = created.json()
    assert payload["success"] is True
    doc_id = payload["data"]["doc_id"]
    assert payload["data"]["expires_in"] == 3600

    downloaded = client.get(f"/v1/documents/{doc_id}")
    assert downloaded.status_code == 200
    assert downloaded.content == b"week 1 notes"
    assert downloaded.headers["content-type"].startswith("text/plain")


def test_upload_in_presigned_mode_stores_through_signed_url():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store, transfer_mode=TransferMode.PRESIGNED))

    created = _upload(client, b"%PDF-1.4", "application/pdf")

    doc_id = created.json()["data"]["doc_id"]
    assert store.objects[(BUCKET, doc_id)] == (b"%PDF-1.4", "application/pdf")


def test_upload_over_size_limit_is_rejected():
    client = TestClient(_build_app(client=FakeS3Client(), max_size=4))

    response = _upload(client, b"too many bytes")

    assert response.status_code == 413
    assert response.json()["detail"]["code"] == "DOCUMENT_UPLOAD_INVALID"


def test_metadata_and_exists_routes():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))
    doc_id = _upload(client, b"12345").json()["data"]["doc_id"]

    metadata = client.get(f"/v1/documents/{doc_id}/metadata").json()["data"]
    assert metadata == {"doc_id": doc_id, "content_type": "text/plain", "size": 5}

    exists = client.get(f"/v1/documents/{doc_id}/exists").json()["data"]
    assert exists == {"doc_id": doc_id, "exists": True}


def test_delete_then_exists_is_false_and_download_is_404():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))
    doc_id = _upload(client).json()["data"]["doc_id"]

    deleted = client.delete(f"/v1/documents/{doc_id}")
    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"deleted": True}

    assert client.get(f"/v1/documents/{doc_id}/exists").json()["data"]["exists"] is False

    missing = client.get(f"/v1/documents/{doc_id}")
    assert missing.status_code == 404
    body = missing.json()
    assert body["success"] is False
    assert body["message"] == "Failed to read document"
    assert body["data"]["code"] == "DOCUMENT_NOT_FOUND"


def test_url_route_passes_expiry_to_signer():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))

    response = client.get("/v1/documents/some-doc/url", params={"expires_in": 120})

    assert response.status_code == 200
    assert response.json()["data"]["expires_in"] == 120
    assert store.presign_calls[-1]["ExpiresIn"] == 120
    assert store.presign_calls[-1]["Params"]["Key"] == "some-doc"


def test_upload_intent_returns_signed_put():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))

    response = client.post("/v1/documents/upload-intents", json={"content_type": "video/mp4", "expires_in": 900})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["method"] == "PUT"
    assert data["headers"] == {"Content-Type": "video/mp4"}
    assert data["expires_in"] == 900
    assert store.objects == {}


def test_exists_strict_surfaces_store_outage():
    store = FakeS3Client()
    client = TestClient(_build_app(client=store))
    store.fail_with = client_error("AccessDenied", 403, "HeadObject")

    lenient = client.get("/v1/documents/doc-1/exists")
    strict = client.get("/v1/documents/doc-1/exists", params={"strict": "true"})

    assert lenient.json()["data"]["exists"] is False
    assert strict.status_code == 502
    assert strict.json()["data"]["code"] == "STORAGE_UNAUTHORIZED"
