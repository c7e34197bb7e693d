"""
AutoEmbed embed scraper.
Fetches the player page and pulls the HLS playlist out of the player JS.
"""
from __future__ import annotations
import re
from ..base import EmbedContext, EmbedResult, HlsStream
from ..errors import NotFoundError
from ..providers import Embed

FILE_RE = re.compile(r'file:\s*["\']([^"\']+\.m3u8[^"\']*)["\']')
SRC_RE = re.compile(r'source:\s*["\']([^"\']+\.m3u8[^"\']*)["\']')
M3U8_RE = re.compile(r'(https?://[^\s"\']+\.m3u8[^\s"\']*)')


async def _scrape(ctx: EmbedContext) -> EmbedResult:
    html = await ctx.proxied_fetcher(ctx.url, headers={"Referer": "https://autoembed.cc/"})
    ctx.progress(50)

    for pattern in (FILE_RE, SRC_RE, M3U8_RE):
        match = pattern.search(html)
        if match:
            return EmbedResult(streams=[HlsStream(playlist=match.group(1))])

    raise NotFoundError("AutoEmbed: no HLS URL found")


autoembed = Embed(id="autoembed", name="AutoEmbed", rank=10, scrape=_scrape)
