from __future__ import annotations

from typing import Any, Protocol


class ObjectStoreClient(Protocol):
    """The subset of the boto3 S3 client the gateway talks to."""

    def put_object(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def get_object(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def head_object(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def delete_object(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def head_bucket(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def create_bucket(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: dict[str, Any] | None = None,
        ExpiresIn: int = 3600,
        HttpMethod: str | None = None,
    ) -> str:
        ...


class HttpSession(Protocol):
    def put(self, url: str, data: Any = None, **kwargs: Any) -> Any:
        ...

    def get(self, url: str, **kwargs: Any) -> Any:
        ...
