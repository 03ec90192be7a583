"""Shoots REST API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from shoot_workflow.domain.errors import TransportFailure


@dataclass(frozen=True)
class ApiResponse:
    """Status code and decoded JSON body.

    Top-level JSON arrays are wrapped as ``{"data": [...]}``; non-JSON bodies
    decode to None.
    """

    status_code: int
    body: dict[str, object] | None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ShootsApiClient(Protocol):
    """Interface for the remote shoots API."""

    async def get(self, path: str, token: str) -> ApiResponse:
        """Send an authenticated GET request."""

    async def post(
        self, path: str, token: str, payload: dict[str, object] | None = None
    ) -> ApiResponse:
        """Send an authenticated POST request with an optional JSON body."""


@dataclass
class HttpxShootsApiClient(ShootsApiClient):
    """HTTPX-backed shoots API client.

    Non-2xx responses are returned, not raised; only a missing response
    (connection, DNS, timeout) raises ``TransportFailure``.
    """

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxShootsApiClient":
        """Create an API client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def get(self, path: str, token: str) -> ApiResponse:
        """Send an authenticated GET request."""
        return await self._send("GET", path, token)

    async def post(
        self, path: str, token: str, payload: dict[str, object] | None = None
    ) -> ApiResponse:
        """Send an authenticated POST request."""
        return await self._send("POST", path, token, payload)

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        payload: dict[str, object] | None = None,
    ) -> ApiResponse:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        try:
            response = await self.http_client.request(
                method, url, headers=headers, json=payload
            )
        except httpx.TransportError as exc:
            raise TransportFailure() from exc
        return ApiResponse(status_code=response.status_code, body=_decode(response))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _decode(response: httpx.Response) -> dict[str, object] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, list):
        return {"data": body}
    return body if isinstance(body, dict) else None
