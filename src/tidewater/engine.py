"""
Provider engine — the controls object handed back by the builder.

Usage:
    engine = make_providers(Target.NATIVE, make_standard_fetcher(AiohttpTransport()))
    result = await engine.run_all(Movie(title="Hamilton", release_year=2020, tmdb_id="556574"))
    if result:
        print(result.to_dict())
    await engine.close()
"""
from __future__ import annotations
from typing import Optional, Sequence

from .base import EmbedResult, MediaQuery, RunOutput, SourceResult
from .fetcher import Fetcher
from .flags import FeatureSet
from .registry import ProviderList, ProviderMeta
from .runner import (
    RunnerEvents, RunnerOptions, run_all_providers, run_individual_embed, run_individual_source,
)


class ProviderEngine:
    def __init__(
        self,
        providers: ProviderList,
        features: FeatureSet,
        fetcher: Fetcher,
        proxied_fetcher: Optional[Fetcher] = None,
        *,
        source_timeout: Optional[float] = None,
        embed_timeout: Optional[float] = None,
    ):
        self.providers = providers
        self.features = features
        self.fetcher = fetcher
        self.proxied_fetcher = proxied_fetcher or fetcher
        self.source_timeout = source_timeout
        self.embed_timeout = embed_timeout

    def _options(self, events: Optional[RunnerEvents]) -> RunnerOptions:
        # fresh per call; the engine itself holds nothing mutable
        return RunnerOptions(
            features=self.features,
            fetcher=self.fetcher,
            proxied_fetcher=self.proxied_fetcher,
            events=events,
            source_timeout=self.source_timeout,
            embed_timeout=self.embed_timeout,
        )

    async def run_all(
        self,
        media: MediaQuery,
        *,
        source_order: Optional[Sequence[str]] = None,
        embed_order: Optional[Sequence[str]] = None,
        events: Optional[RunnerEvents] = None,
    ) -> Optional[RunOutput]:
        """Waterfall over every compatible source; None if nothing plays."""
        return await run_all_providers(
            self.providers, media, self._options(events),
            source_order=source_order, embed_order=embed_order,
        )

    async def run_source(
        self, source_id: str, media: MediaQuery, *, events: Optional[RunnerEvents] = None,
    ) -> SourceResult:
        """Run a single named source."""
        return await run_individual_source(self.providers, source_id, media, self._options(events))

    async def run_embed(
        self, embed_id: str, url: str, *, events: Optional[RunnerEvents] = None,
    ) -> EmbedResult:
        """Run a single named embed."""
        return await run_individual_embed(self.providers, embed_id, url, self._options(events))

    def get_metadata(self, provider_id: str) -> Optional[ProviderMeta]:
        return self.providers.get_metadata(provider_id)

    def list_sources(self) -> list[ProviderMeta]:
        return self.providers.list_sources()

    def list_embeds(self) -> list[ProviderMeta]:
        return self.providers.list_embeds()

    async def close(self):
        await self.fetcher.close()
        if self.proxied_fetcher is not self.fetcher:
            await self.proxied_fetcher.close()
