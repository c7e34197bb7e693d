"""Voe.sx — regex HLS extraction."""
from __future__ import annotations
import re
from ..base import EmbedContext, EmbedResult, HlsStream
from ..providers import Embed

LINK_RE = re.compile(r"'hls':\s*'(http[^']+)'")


async def _scrape(ctx: EmbedContext) -> EmbedResult:
    html = await ctx.proxied_fetcher(ctx.url, headers={"Referer": "https://voe.sx/"})
    m = LINK_RE.search(html)
    if not m:
        raise ValueError("Voe HLS not found")
    return EmbedResult(streams=[
        HlsStream(playlist=m.group(1), headers={"Referer": "https://voe.sx"})
    ])


voe = Embed(id="voe", name="Voe", rank=180, scrape=_scrape)
