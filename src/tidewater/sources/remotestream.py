"""
RemoteStream — direct-URL HLS provider.
Playlists live at predictable URLs keyed by TMDB id.
"""
from __future__ import annotations
from ..base import HlsStream, Movie, SourceContext, SourceResult
from ..errors import NotFoundError
from ..flags import Flag
from ..providers import Sourcerer

BASE = "https://fsa.remotestre.am"
REFERER = "https://remotestre.am/"
ORIGIN = "https://remotestre.am"


def _playlist_url(media) -> str:
    if isinstance(media, Movie):
        return f"{BASE}/Movies/{media.tmdb_id}/{media.tmdb_id}.m3u8"
    episode = media.episode.number
    return f"{BASE}/Shows/{media.tmdb_id}/{media.season.number}/{episode}/{episode}.m3u8"


async def _scrape(ctx: SourceContext) -> SourceResult:
    playlist = _playlist_url(ctx.media)
    ctx.progress(30)
    res = await ctx.proxied_fetcher.full(
        playlist,
        headers={"Referer": REFERER},
        read_headers=["content-type"],
    )
    if "application/x-mpegurl" not in res.headers.get("content-type", "").lower():
        raise NotFoundError("No watchable item found")
    ctx.progress(90)

    return SourceResult(streams=[
        HlsStream(
            playlist=playlist,
            flags=frozenset({Flag.CORS_ALLOWED}),
            preferred_headers={"Referer": REFERER, "Origin": ORIGIN},
        )
    ])


remotestream = Sourcerer(
    id="remotestream",
    name="Remote Stream",
    rank=55,
    flags=frozenset({Flag.CORS_ALLOWED}),
    scrape_movie=_scrape,
    scrape_show=_scrape,
)
