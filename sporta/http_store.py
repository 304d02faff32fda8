"""HTTP client for the persistence API served by `sporta.server`.

Implements the same async contract as `JsonFileStore`, so a synchronizer can
run against a remote store. Uses an HTTPX async client created lazily; pass
`transport=` to route requests elsewhere (tests use `httpx.MockTransport`).

A body that cannot be encoded as JSON, a transport error, a non-2xx response
and an acknowledgement without `success: true` all raise `StoreError`.
Requests are never retried.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from sporta.errors import StoreError
from sporta.models import ORDERS, REPLACEABLE, USERS, check_collection

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class HttpStore:
    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, collection: str, json: Any = None) -> Any:
        client = self._client_instance()
        try:
            resp = await client.request(method, path, json=json)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StoreError(
                f"{method} {path} failed with status {exc.response.status_code}", collection
            ) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} failed: {exc!s}", collection) from exc
        except (TypeError, ValueError) as exc:
            raise StoreError(f"{method} {path}: cannot encode request body: {exc}", collection) from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"{method} {path} returned invalid JSON", collection) from exc

    async def _post(self, path: str, collection: str, payload: Any) -> None:
        body = await self._request("POST", path, collection, json=payload)
        if not isinstance(body, dict) or body.get("success") is not True:
            raise StoreError(f"POST {path} was not acknowledged: {body!r}", collection)

    async def get(self, collection: str) -> List[Record]:
        check_collection(collection)
        body = await self._request("GET", f"/api/{collection}", collection)
        if not isinstance(body, list):
            raise StoreError(f"GET /api/{collection} did not return an array", collection)
        return body

    async def replace(self, collection: str, records: List[Record]) -> None:
        check_collection(collection)
        if collection not in REPLACEABLE:
            raise ValueError(f"{collection} cannot be replaced in bulk")
        await self._post(f"/api/{collection}", collection, list(records))

    async def append_order(self, order: Record) -> None:
        await self._post("/api/orders", ORDERS, order)

    async def block_user(self, user_id: str, is_blocked: bool) -> None:
        await self._post("/api/users/block", USERS, {"userId": user_id, "isBlocked": is_blocked})

    async def register_user(self, user: Record) -> None:
        await self._post("/api/users/register", USERS, user)
