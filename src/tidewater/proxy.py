"""
Proxied fetcher: tunnels requests through a simple relay.

The relay receives `?destination=<target url>`. Headers a browser or the
relay's own HTTP stack would refuse to forward are sent under X- names, and
the relay hands back the real Set-Cookie and final URL in reserved headers.
"""
from __future__ import annotations
import logging
from typing import Any

from multidict import CIMultiDict

from .fetcher import (
    FetcherOptions, FetcherResponse, RawResponse, StandardFetcher, Transport, make_full_url,
)

log = logging.getLogger("tidewater.fetcher.proxy")

HEADER_MAP = {
    "cookie": "X-Cookie",
    "referer": "X-Referer",
    "origin": "X-Origin",
    "user-agent": "X-User-Agent",
    "x-real-ip": "X-X-Real-Ip",
}

RESPONSE_HEADER_MAP = {
    "x-set-cookie": "set-cookie",
}

FINAL_DESTINATION_HEADER = "x-final-destination"


def map_request_headers(headers: dict[str, str]) -> dict[str, str]:
    out = {}
    for key, value in headers.items():
        out[HEADER_MAP.get(key.lower(), key)] = value
    return out


class _RelayTransport:
    """Wraps a transport so relay-reported headers/URL are unwrapped."""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def __call__(self, url: str, **kwargs: Any) -> RawResponse:
        res = await self.transport(url, **kwargs)
        extra = CIMultiDict()
        for relay_name, real_name in RESPONSE_HEADER_MAP.items():
            for value in res.headers.getall(relay_name, []):
                extra.add(real_name, value)
        res.extra_headers = extra
        res.extra_url = res.headers.get(FINAL_DESTINATION_HEADER) or res.url
        return res

    async def close(self):
        closer = getattr(self.transport, "close", None)
        if closer is not None:
            await closer()


class SimpleProxyFetcher:
    def __init__(self, proxy_url: str, transport: Transport):
        self.proxy_url = proxy_url
        self._fetcher = StandardFetcher(_RelayTransport(transport))

    async def __call__(self, url: str, ops: FetcherOptions) -> FetcherResponse:
        destination = make_full_url(url, ops.base_url, ops.query)
        log.debug(f"relay → {destination}")
        relay_ops = FetcherOptions(
            method=ops.method,
            headers=map_request_headers(ops.headers),
            query={"destination": destination},
            base_url="",
            body=ops.body,
            read_headers=ops.read_headers,
        )
        return await self._fetcher(self.proxy_url, relay_ops)

    async def close(self):
        await self._fetcher.close()


def make_simple_proxy_fetcher(proxy_url: str, transport: Transport) -> SimpleProxyFetcher:
    return SimpleProxyFetcher(proxy_url, transport)
