"""
Async client for the history API.

Used by callers that execute requests locally and persist the results on
a REST Tester server. Every failure is raised as HistoryClientError.
"""

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..schemas.history import (
    HistoryCreate,
    HistoryCreatedResponse,
    HistoryListResponse,
    HistoryResponse,
)


DEFAULT_TIMEOUT = 10.0


class HistoryClientError(Exception):
    """Raised when the history server cannot be reached or rejects a call."""

    def __init__(self, detail: str, status_code: int | None = None, error_code: str | None = None):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(detail)


class HistoryClient:
    """
    Thin wrapper over the ``/history`` endpoints.

    Usage:
        async with HistoryClient("http://localhost:8000") as history:
            await history.save(record)
            page = await history.list(page=1)
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> "HistoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise HistoryClientError(f"History server unreachable: {e}") from e

        if response.is_error:
            detail = response.text
            error_code = None
            try:
                payload = response.json()
            except ValueError:
                payload = None
            # Error bodies from this API are {detail, error_code}
            if isinstance(payload, dict):
                detail = payload.get("detail", detail)
                error_code = payload.get("error_code")
            raise HistoryClientError(str(detail), response.status_code, error_code)

        try:
            return response.json()
        except ValueError as e:
            raise HistoryClientError(
                "History server returned a non-JSON response", response.status_code
            ) from e

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise HistoryClientError(f"Unexpected history server response: {e}") from e

    async def save(self, record: HistoryCreate) -> str:
        """Store a record and return its id."""
        payload = await self._call(
            "POST", "/history", json=record.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        return self._parse(HistoryCreatedResponse, payload).id

    async def list(
        self,
        page: int = 1,
        search: str | None = None,
        method: str | None = None
    ) -> HistoryListResponse:
        params: dict[str, Any] = {"page": page}
        if search:
            params["search"] = search
        if method:
            params["method"] = method
        payload = await self._call("GET", "/history", params=params)
        return self._parse(HistoryListResponse, payload)

    async def get(self, record_id: str) -> HistoryResponse:
        payload = await self._call("GET", f"/history/{quote(record_id, safe='')}")
        return self._parse(HistoryResponse, payload)

    async def delete(self, record_id: str) -> None:
        await self._call("DELETE", f"/history/{quote(record_id, safe='')}")

    async def clear(self) -> None:
        await self._call("DELETE", "/history")
