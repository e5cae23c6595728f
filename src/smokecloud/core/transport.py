# smokecloud/core/transport.py
"""
Authenticated HTTP access to the control and storage planes.

Every call path shares the same failure semantics:

- transport failures are logged with verb and URL, then re-raised
- non-2xx responses become an ``ApiError`` whose message is
  ``"{status}: {reason}: {detail}"``, detail being the ``errors`` array of
  the error envelope, the parsed body, or the raw text, in that order
- JSON resources are unwrapped from ``{"data": ...}``; a success body that
  does not match is a ``MalformedResponse``
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Mapping

import httpx

from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.exceptions import STATUS_ERRORS, ApiError, MalformedResponse

logger = logging.getLogger(__name__)


class Plane(str, Enum):
    API = "api"
    STORAGE = "storage"


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def build_error(response: httpx.Response) -> ApiError:
    """Map a non-2xx response to the matching ``ApiError`` subclass."""
    text = response.text
    parsed: Any = None
    try:
        parsed = json.loads(text)
    except ValueError:
        pass

    errors: list[dict[str, Any]] = []
    if isinstance(parsed, dict) and isinstance(parsed.get("errors"), list):
        errors = parsed["errors"]
        detail = _compact(errors)
    elif parsed is not None:
        detail = _compact(parsed)
    else:
        detail = text

    cls = STATUS_ERRORS.get(response.status_code, ApiError)
    return cls(
        f"{response.status_code}: {response.reason_phrase}: {detail}",
        status=response.status_code,
        status_text=response.reason_phrase,
        errors=errors,
        body=text,
    )


def ensure_success(response: httpx.Response, allow: tuple[int, ...] = ()) -> httpx.Response:
    if response.is_success or response.status_code in allow:
        return response
    raise build_error(response)


def unwrap(response: httpx.Response) -> Any:
    """Return ``data`` from a ``{"data": ...}`` success envelope."""
    ensure_success(response)
    payload = json_body(response)
    if not isinstance(payload, dict) or "data" not in payload:
        raise MalformedResponse(
            f"{response.status_code}: {response.reason_phrase}: response has no data envelope",
            status=response.status_code,
            status_text=response.reason_phrase,
            body=response.text,
        )
    return payload["data"]


def json_body(response: httpx.Response) -> Any:
    """Parse a bare JSON success body."""
    ensure_success(response)
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponse(
            f"{response.status_code}: {response.reason_phrase}: invalid JSON body",
            status=response.status_code,
            status_text=response.reason_phrase,
            body=response.text,
        ) from exc


class Transport:
    """Issues authenticated requests against the two endpoint roots."""

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        api_endpoint: str,
        storage_endpoint: str,
        timeout: float | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._roots = {
            Plane.API: api_endpoint.rstrip("/"),
            Plane.STORAGE: storage_endpoint.rstrip("/"),
        }
        self._timeout = timeout

    def url(self, path: str, plane: Plane = Plane.API) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if path and not path.startswith("/"):
            path = f"/{path}"
        return f"{self._roots[plane]}{path}"

    async def _headers(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        token = await self._token_provider.acquire_token()
        headers = {"Content-Type": "application/json"}
        if extra:
            headers.update(extra)
        headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        plane: Plane = Plane.API,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content: Any = None,
    ) -> httpx.Response:
        """Send one request and return the response, whatever its status."""
        url = self.url(path, plane)
        all_headers = await self._headers(headers)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                return await client.request(
                    method, url, params=params, headers=all_headers, content=content
                )
            except httpx.TransportError:
                logger.warning("Failed: request[%s]: %s", method, url)
                raise

    async def get_data(self, path: str, *, plane: Plane = Plane.API, **kw: Any) -> Any:
        return unwrap(await self.request("GET", path, plane=plane, **kw))

    async def get_json(self, path: str, *, plane: Plane = Plane.API, **kw: Any) -> Any:
        return json_body(await self.request("GET", path, plane=plane, **kw))

    async def text(self, method: str, path: str, *, plane: Plane = Plane.API, **kw: Any) -> str:
        return ensure_success(await self.request(method, path, plane=plane, **kw)).text

    async def stream(
        self,
        path: str,
        *,
        plane: Plane = Plane.API,
        headers: Mapping[str, str] | None = None,
    ) -> AsyncIterator[bytes]:
        """Yield the raw body of a GET in chunks, without buffering it."""
        url = self.url(path, plane)
        all_headers = await self._headers(headers)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                async with client.stream("GET", url, headers=all_headers) as r:
                    if not r.is_success:
                        await r.aread()
                        raise build_error(r)
                    async for chunk in r.aiter_bytes():
                        yield chunk
            except httpx.TransportError:
                logger.warning("Failed: request[GET]: %s", url)
                raise
