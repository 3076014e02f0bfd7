from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import aiohttp
from loguru import logger

# ─── Errors ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HttpError(Exception):
    """Non-2xx response, or a transport failure when ``status`` is 0."""

    status: int
    body: str

    def __str__(self) -> str:
        if self.status == 0:
            return f"Network error: {self.body}"
        return f"HTTP {self.status}: {self.body}"


# ─── Signing ─────────────────────────────────────────────────────────


@runtime_checkable
class Signer(Protocol):
    """Adds authentication to an outgoing request.

    Implementations mutate ``headers`` and/or ``params`` in place, so a
    vendor can sign in the query string for some methods and in headers
    for others.
    """

    async def sign(
        self, method: str, path: str, headers: dict[str, str], params: dict[str, Any]
    ) -> None: ...


# ─── Client ──────────────────────────────────────────────────────────


class HttpClient:
    def __init__(
        self,
        base_url: str,
        signer: Signer | None = None,
        *,
        timeout: float = 30,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._signer = signer
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._default_headers = default_headers or {}
        self._session: aiohttp.ClientSession | None = None
        self._log = logger.bind(component="http")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            HttpError: On status >= 400, or with status 0 on transport failure.
        """
        session = await self._ensure_session()
        headers = dict(self._default_headers)
        query = dict(params or {})
        if self._signer is not None:
            await self._signer.sign(method, path, headers, query)
        self._log.debug("{method} {path}", method=method, path=path)

        try:
            async with session.request(
                method,
                self._url(path),
                headers=headers,
                json=json,
                params={k: str(v) for k, v in query.items()} or None,
            ) as resp:
                return await self._parse(resp)
        except aiohttp.ClientResponseError as e:
            raise HttpError(status=e.status, body=e.message) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            raise HttpError(status=0, body=str(e) or type(e).__name__) from e

    async def _parse(self, resp: aiohttp.ClientResponse) -> Any:
        if resp.status >= 400:
            body = await resp.text()
            self._log.warning(
                "HTTP {status} from {url}: {body}",
                status=resp.status, url=str(resp.url), body=body[:500],
            )
            raise HttpError(status=resp.status, body=body)
        body = await resp.read()
        return await resp.json(content_type=None) if body else None

    # ─── Lifecycle ───────────────────────────────────────────────────

    async def close(self) -> None:
        if self._session and not self._session.closed:
            self._log.debug("Closing HTTP session")
            await self._session.close()

    async def __aenter__(self) -> HttpClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
