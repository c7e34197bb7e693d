"""
Provider registry.

A ProviderList is built once and then only read. Ids are unique across
sources and embeds together. Ranks are unique within each kind and decide
the default try order (higher first).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .errors import ConfigurationError
from .flags import FeatureSet, flags_allowed_in_features
from .providers import Embed, Sourcerer

log = logging.getLogger("tidewater.registry")


@dataclass(frozen=True)
class ProviderMeta:
    type: str                          # "source" | "embed"
    id: str
    name: str
    rank: int
    media_types: Optional[tuple[str, ...]] = None   # sources only

    def to_dict(self):
        d = {"type": self.type, "id": self.id, "name": self.name, "rank": self.rank}
        if self.media_types is not None:
            d["mediaTypes"] = list(self.media_types)
        return d


def format_source_meta(source: Sourcerer) -> ProviderMeta:
    types = tuple(t for t in ("movie", "show") if t in source.media_types)
    return ProviderMeta(type="source", id=source.id, name=source.name,
                        rank=source.rank, media_types=types)


def format_embed_meta(embed: Embed) -> ProviderMeta:
    return ProviderMeta(type="embed", id=embed.id, name=embed.name, rank=embed.rank)


@dataclass(frozen=True)
class ProviderList:
    sources: tuple[Sourcerer, ...] = ()
    embeds: tuple[Embed, ...] = ()

    def find_source(self, source_id: str) -> Optional[Sourcerer]:
        return next((s for s in self.sources if s.id == source_id), None)

    def find_embed(self, embed_id: str) -> Optional[Embed]:
        return next((e for e in self.embeds if e.id == embed_id), None)

    def list_sources(self) -> list[ProviderMeta]:
        return [format_source_meta(s) for s in sorted(self.sources, key=lambda s: s.rank, reverse=True)]

    def list_embeds(self) -> list[ProviderMeta]:
        return [format_embed_meta(e) for e in sorted(self.embeds, key=lambda e: e.rank, reverse=True)]

    def get_metadata(self, provider_id: str) -> Optional[ProviderMeta]:
        """Sources are checked before embeds."""
        source = self.find_source(provider_id)
        if source:
            return format_source_meta(source)
        embed = self.find_embed(provider_id)
        if embed:
            return format_embed_meta(embed)
        return None


def _has_duplicates(values: list) -> bool:
    return len(set(values)) != len(values)


def get_providers(
    features: FeatureSet,
    sources: Iterable[Union[Sourcerer, None]],
    embeds: Iterable[Union[Embed, None]],
) -> ProviderList:
    sources = [s for s in sources if s is not None and not s.disabled]
    embeds = [e for e in embeds if e is not None and not e.disabled]

    if _has_duplicates([p.id for p in [*sources, *embeds]]):
        raise ConfigurationError("Duplicate id found in sources/embeds")
    if _has_duplicates([s.rank for s in sources]):
        raise ConfigurationError("Duplicate rank found in sources")
    if _has_duplicates([e.rank for e in embeds]):
        raise ConfigurationError("Duplicate rank found in embeds")

    allowed = [s for s in sources if flags_allowed_in_features(features, s.flags)]
    if len(allowed) != len(sources):
        allowed_ids = {s.id for s in allowed}
        dropped = sorted(s.id for s in sources if s.id not in allowed_ids)
        log.debug(f"Sources not allowed for target: {dropped}")
    return ProviderList(sources=tuple(allowed), embeds=tuple(embeds))
