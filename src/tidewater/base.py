"""
Core types for the Tidewater provider system.

Two stream types:
  - HLS: m3u8 playlist URL → feed to HLS.js
  - File: direct mp4 URL(s) keyed by quality label
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, ClassVar, Optional, Union

if TYPE_CHECKING:
    from .fetcher import Fetcher

QUALITIES = ("unknown", "360", "480", "720", "1080", "4k")

# ──────────────────────────────
#  Media query (passed to source scrapers)
# ──────────────────────────────
@dataclass(frozen=True)
class Movie:
    title: str
    release_year: int
    tmdb_id: str
    imdb_id: Optional[str] = None
    type: ClassVar[str] = "movie"


@dataclass(frozen=True)
class SeasonRef:
    number: int
    tmdb_id: Optional[str] = None


@dataclass(frozen=True)
class EpisodeRef:
    number: int
    tmdb_id: Optional[str] = None


@dataclass(frozen=True)
class ShowEpisode:
    title: str
    release_year: int
    tmdb_id: str
    season: SeasonRef
    episode: EpisodeRef
    imdb_id: Optional[str] = None
    type: ClassVar[str] = "show"


MediaQuery = Union[Movie, ShowEpisode]

# ──────────────────────────────
#  Caption / Subtitle
# ──────────────────────────────
@dataclass
class Caption:
    id: str
    url: str
    language: str                     # ISO 639-1 code e.g. "en"
    type: str = "srt"                 # "srt" | "vtt"
    has_cors_restrictions: bool = False

    def to_dict(self):
        return {
            "id": self.id,
            "url": self.url,
            "language": self.language,
            "type": self.type,
            "hasCorsRestrictions": self.has_cors_restrictions,
        }

# ──────────────────────────────
#  Stream definitions
# ──────────────────────────────
@dataclass
class StreamFile:
    url: str
    type: str = "mp4"

    def to_dict(self):
        return {"type": self.type, "url": self.url}


@dataclass
class Stream:
    id: str = "primary"
    flags: frozenset = field(default_factory=frozenset)
    captions: list[Caption] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    preferred_headers: dict[str, str] = field(default_factory=dict)
    type: ClassVar[str] = ""

    def to_dict(self):
        d = {
            "id": self.id,
            "type": self.type,
            "flags": sorted(getattr(f, "value", f) for f in self.flags),
            "captions": [c.to_dict() for c in self.captions],
        }
        if self.headers:
            d["headers"] = self.headers
        if self.preferred_headers:
            d["preferredHeaders"] = self.preferred_headers
        return d


@dataclass
class HlsStream(Stream):
    playlist: str = ""
    type: ClassVar[str] = "hls"

    def to_dict(self):
        d = super().to_dict()
        d["playlist"] = self.playlist
        return d


@dataclass
class FileStream(Stream):
    qualities: dict[str, StreamFile] = field(default_factory=dict)
    type: ClassVar[str] = "file"

    def to_dict(self):
        d = super().to_dict()
        d["qualities"] = {label: q.to_dict() for label, q in self.qualities.items()}
        return d

# ──────────────────────────────
#  Embed reference (returned by source scrapers)
# ──────────────────────────────
@dataclass
class EmbedRef:
    embed_id: str                     # must match an embed scraper id
    url: str

# ──────────────────────────────
#  Source scraper output
# ──────────────────────────────
@dataclass
class SourceResult:
    embeds: list[EmbedRef] = field(default_factory=list)
    streams: list[Stream] = field(default_factory=list)  # direct streams (skip embed step)

# ──────────────────────────────
#  Embed scraper output
# ──────────────────────────────
@dataclass
class EmbedResult:
    streams: list[Stream] = field(default_factory=list)

# ──────────────────────────────
#  Final run output
# ──────────────────────────────
@dataclass
class RunOutput:
    source_id: str
    stream: Stream
    embed_id: Optional[str] = None

    def to_dict(self):
        return {
            "source": self.source_id,
            "embed": self.embed_id,
            "stream": self.stream.to_dict(),
        }

# ──────────────────────────────
#  Scrape contexts (passed to scrapers)
# ──────────────────────────────
@dataclass
class ScrapeContext:
    fetcher: Fetcher
    proxied_fetcher: Fetcher
    progress: Callable[[float], None]


@dataclass
class SourceContext(ScrapeContext):
    media: MediaQuery = None


@dataclass
class EmbedContext(ScrapeContext):
    url: str = ""
