"""
HTTP fetch abstraction handed to every provider.

Layers, bottom up:
  - transport: raw HTTP call `(url, *, method, headers, body) -> RawResponse`.
    `AiohttpTransport` is the real one; tests pass plain async functions.
  - StandardFetcher: URL building, body serialization, JSON/text decoding and
    response header filtering on top of a transport.
  - Fetcher: what providers see. `await fetcher(url, ...)` gives the body,
    `await fetcher.full(url, ...)` gives the whole FetcherResponse.

The proxied variant (see proxy.py) produces the same FetcherResponse contract,
so providers can't tell which one they were given.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import aiohttp
from multidict import CIMultiDict

log = logging.getLogger("tidewater.fetcher")

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FetcherOptions:
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    base_url: str = ""
    body: Any = None
    read_headers: list[str] = field(default_factory=list)


@dataclass
class FetcherResponse:
    body: Any
    status_code: int
    final_url: str
    headers: dict[str, str] = field(default_factory=dict)   # only read_headers, lowercased


@dataclass
class RawResponse:
    status: int
    url: str
    headers: CIMultiDict
    text: str
    # set by wrapping transports (the relay proxy) to override what the relay reports
    extra_headers: CIMultiDict = field(default_factory=CIMultiDict)
    extra_url: Optional[str] = None


Transport = Callable[..., Awaitable[RawResponse]]
FullFetcher = Callable[[str, FetcherOptions], Awaitable[FetcherResponse]]


# ──────────────────────────────
#  URL / body helpers
# ──────────────────────────────
def make_full_url(url: str, base_url: str = "", query: Optional[dict] = None) -> str:
    left = base_url or ""
    right = url
    if left and not left.endswith("/"):
        left += "/"
    if right.startswith("/"):
        right = right[1:]
    full = left + right
    if not full.startswith(("http://", "https://")):
        raise ValueError(f"Invalid URL -- URL doesn't start with a http scheme: '{full}'")
    if not query:
        return full

    parts = urlsplit(full)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    for key, value in query.items():
        # same-named parameter is replaced in place of its first occurrence
        first = next((i for i, (k, _) in enumerate(pairs) if k == key), None)
        pairs = [p for p in pairs if p[0] != key]
        if first is None:
            pairs.append((key, str(value)))
        else:
            pairs.insert(first, (key, str(value)))
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def serialize_body(body: Any) -> tuple[dict[str, str], Any]:
    """Returns (extra request headers, body to send)."""
    if body is None or isinstance(body, (str, bytes, aiohttp.FormData)):
        return {}, body
    return {"Content-Type": "application/json"}, json.dumps(body)


def get_headers(names: list[str], res: RawResponse) -> dict[str, str]:
    out = {}
    for name in names:
        real = name.lower()
        # repeated headers (set-cookie) come back comma-joined
        value = ", ".join(res.extra_headers.getall(real, [])) or ", ".join(res.headers.getall(real, []))
        if not value:
            continue
        out[real] = value
    return out


# ──────────────────────────────
#  Transport
# ──────────────────────────────
class AiohttpTransport:
    """Raw HTTP over a lazily created aiohttp session."""

    def __init__(self, *, timeout: float = 10, proxy: str | None = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout, connect=4)
        self.proxy = proxy
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": DEFAULT_UA},
            )
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    async def __call__(self, url: str, *, method: str = "GET",
                       headers: dict | None = None, body: Any = None) -> RawResponse:
        session = await self._get_session()
        async with session.request(
            method,
            url,
            headers=headers or {},
            data=body,
            allow_redirects=True,
            proxy=self.proxy,
        ) as resp:
            text = await resp.text(errors="replace")
            return RawResponse(
                status=resp.status,
                url=str(resp.url),
                headers=CIMultiDict(resp.headers),
                text=text,
            )


# ──────────────────────────────
#  Standard fetcher
# ──────────────────────────────
class StandardFetcher:
    def __init__(self, transport: Transport):
        self.transport = transport

    async def __call__(self, url: str, ops: FetcherOptions) -> FetcherResponse:
        full_url = make_full_url(url, ops.base_url, ops.query)
        log.debug(f"{ops.method} {full_url}")
        body_headers, body = serialize_body(ops.body)
        res = await self.transport(
            full_url,
            method=ops.method,
            headers={**body_headers, **ops.headers},
            body=body,
        )
        content_type = res.headers.get("content-type", "")
        if ops.method.upper() != "HEAD" and res.text and "application/json" in content_type:
            parsed = json.loads(res.text)
        else:
            parsed = res.text
        return FetcherResponse(
            body=parsed,
            status_code=res.status,
            final_url=res.extra_url or res.url,
            headers=get_headers(ops.read_headers, res),
        )

    async def close(self):
        closer = getattr(self.transport, "close", None)
        if closer is not None:
            await closer()


def make_standard_fetcher(transport: Transport) -> StandardFetcher:
    return StandardFetcher(transport)


# ──────────────────────────────
#  Provider-facing fetcher
# ──────────────────────────────
class Fetcher:
    def __init__(self, full_fetcher: FullFetcher):
        self._full = full_fetcher

    async def full(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict | None = None,
        query: dict | None = None,
        base_url: str = "",
        body: Any = None,
        read_headers: list[str] | None = None,
    ) -> FetcherResponse:
        ops = FetcherOptions(
            method=method,
            headers=dict(headers or {}),
            query=dict(query or {}),
            base_url=base_url or "",
            body=body,
            read_headers=list(read_headers or []),
        )
        return await self._full(url, ops)

    async def __call__(self, url: str, **ops) -> Any:
        return (await self.full(url, **ops)).body

    # ── convenience methods ──────────────────

    async def get(self, url: str, **ops) -> Any:
        return await self(url, method="GET", **ops)

    async def post(self, url: str, **ops) -> Any:
        return await self(url, method="POST", **ops)

    async def head(self, url: str, **ops) -> int:
        """Returns status code."""
        return (await self.full(url, method="HEAD", **ops)).status_code

    async def get_final_url(self, url: str, **ops) -> str:
        """Follow redirects and return the final URL."""
        return (await self.full(url, method="GET", **ops)).final_url

    async def close(self):
        closer = getattr(self._full, "close", None)
        if closer is not None:
            await closer()


def make_fetcher(full_fetcher: FullFetcher) -> Fetcher:
    return Fetcher(full_fetcher)
