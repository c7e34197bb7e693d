"""
AutoEmbed source — builds player URLs and delegates to the embed scrapers.
"""
from __future__ import annotations
from ..base import EmbedRef, SourceContext, SourceResult
from ..providers import Sourcerer

BASE = "https://autoembed.cc"


async def _scrape_movie(ctx: SourceContext) -> SourceResult:
    url = f"{BASE}/embed/oplayer.php?id={ctx.media.tmdb_id}"
    return SourceResult(embeds=[EmbedRef(embed_id="autoembed", url=url)])


async def _scrape_show(ctx: SourceContext) -> SourceResult:
    media = ctx.media
    url = (f"{BASE}/embed/oplayer.php?id={media.tmdb_id}"
           f"&s={media.season.number}&e={media.episode.number}")
    return SourceResult(embeds=[EmbedRef(embed_id="autoembed", url=url)])


autoembed_source = Sourcerer(
    id="autoembed-src",
    name="AutoEmbed",
    rank=90,
    scrape_movie=_scrape_movie,
    scrape_show=_scrape_show,
)
