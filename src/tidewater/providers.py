"""Provider definitions: sources resolve media, embeds resolve embed URLs."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from .base import EmbedContext, EmbedResult, MediaQuery, SourceContext, SourceResult
from .errors import ConfigurationError

SourceScrape = Callable[[SourceContext], Awaitable[SourceResult]]
EmbedScrape = Callable[[EmbedContext], Awaitable[EmbedResult]]


@dataclass(frozen=True)
class Sourcerer:
    id: str
    name: str
    rank: int
    scrape_movie: Optional[SourceScrape] = None
    scrape_show: Optional[SourceScrape] = None
    disabled: bool = False
    flags: frozenset = field(default_factory=frozenset)
    kind: str = field(default="source", init=False)

    def __post_init__(self):
        if self.scrape_movie is None and self.scrape_show is None:
            raise ConfigurationError(f"Source {self.id!r} has no scrape operation")
        object.__setattr__(self, "flags", frozenset(self.flags))

    @property
    def media_types(self) -> frozenset:
        types = set()
        if self.scrape_movie is not None:
            types.add("movie")
        if self.scrape_show is not None:
            types.add("show")
        return frozenset(types)

    def scraper_for(self, media: MediaQuery) -> Optional[SourceScrape]:
        """The scrape operation matching the media kind, or None."""
        if media.type == "movie":
            return self.scrape_movie
        if media.type == "show":
            return self.scrape_show
        return None


@dataclass(frozen=True)
class Embed:
    id: str
    name: str
    rank: int
    scrape: EmbedScrape
    disabled: bool = False
    flags: frozenset = field(default_factory=frozenset)
    kind: str = field(default="embed", init=False)

    def __post_init__(self):
        object.__setattr__(self, "flags", frozenset(self.flags))
