from __future__ import annotations

import pytest

from core.storage import DocumentStorageGateway, TransferMode
from tests.fakes import FakeHttpSession, FakeS3Client, make_gateway


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def http_session(s3_client: FakeS3Client) -> FakeHttpSession:
    return FakeHttpSession(s3_client)


@pytest.fixture(params=[TransferMode.DIRECT, TransferMode.PRESIGNED], ids=["direct", "presigned"])
def gateway(request, s3_client: FakeS3Client, http_session: FakeHttpSession) -> DocumentStorageGateway:
    return make_gateway(s3_client, transfer_mode=request.param, http=http_session)
