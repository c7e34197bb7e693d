"""
Assembling a ProviderEngine.

`BuilderOptions` + `build_providers` is the real construction path;
`ProviderBuilder` only offers chained calls that fill in the options.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .catalogue import get_builtin_embeds, get_builtin_sources
from .config import Settings
from .engine import ProviderEngine
from .errors import ConfigurationError
from .fetcher import AiohttpTransport, FullFetcher, make_fetcher, make_standard_fetcher
from .flags import Target, get_target_features
from .providers import Embed, Sourcerer
from .proxy import make_simple_proxy_fetcher
from .registry import get_providers

log = logging.getLogger("tidewater.builder")


@dataclass
class BuilderOptions:
    target: Optional[Union[Target, str]] = None
    fetcher: Optional[FullFetcher] = None
    proxied_fetcher: Optional[FullFetcher] = None
    consistent_ip_for_requests: bool = False
    sources: list[Union[str, Sourcerer]] = field(default_factory=list)
    embeds: list[Union[str, Embed]] = field(default_factory=list)
    source_timeout: Optional[float] = None
    embed_timeout: Optional[float] = None


def _resolve(entries, builtins, kind: str):
    by_id = {p.id: p for p in builtins}
    out = []
    for entry in entries:
        if not isinstance(entry, str):
            out.append(entry)
            continue
        if entry not in by_id:
            raise ConfigurationError(f"{kind} not found: {entry!r}")
        out.append(by_id[entry])
    return out


def build_providers(options: BuilderOptions) -> ProviderEngine:
    if not options.target:
        raise ConfigurationError("Target not set")
    if not options.fetcher:
        raise ConfigurationError("Fetcher not set")

    sources = _resolve(options.sources, get_builtin_sources(), "Source")
    embeds = _resolve(options.embeds, get_builtin_embeds(), "Embed")
    features = get_target_features(options.target, options.consistent_ip_for_requests)
    plist = get_providers(features, sources, embeds)
    log.info(f"Built engine: {len(plist.sources)} sources, {len(plist.embeds)} embeds "
             f"(target={Target(options.target).value})")

    fetcher = make_fetcher(options.fetcher)
    proxied = make_fetcher(options.proxied_fetcher) if options.proxied_fetcher else fetcher
    return ProviderEngine(
        plist, features, fetcher, proxied,
        source_timeout=options.source_timeout,
        embed_timeout=options.embed_timeout,
    )


class ProviderBuilder:
    def __init__(self):
        self.options = BuilderOptions()

    def set_target(self, target: Union[Target, str]) -> "ProviderBuilder":
        self.options.target = target
        return self

    def set_fetcher(self, fetcher: FullFetcher) -> "ProviderBuilder":
        self.options.fetcher = fetcher
        return self

    def set_proxied_fetcher(self, fetcher: FullFetcher) -> "ProviderBuilder":
        self.options.proxied_fetcher = fetcher
        return self

    def enable_consistent_ip_for_requests(self) -> "ProviderBuilder":
        self.options.consistent_ip_for_requests = True
        return self

    def set_timeouts(self, source: Optional[float], embed: Optional[float]) -> "ProviderBuilder":
        self.options.source_timeout = source
        self.options.embed_timeout = embed
        return self

    def add_source(self, source: Union[str, Sourcerer]) -> "ProviderBuilder":
        if isinstance(source, str):
            # fail at the call site rather than at build()
            _resolve([source], get_builtin_sources(), "Source")
        self.options.sources.append(source)
        return self

    def add_embed(self, embed: Union[str, Embed]) -> "ProviderBuilder":
        if isinstance(embed, str):
            _resolve([embed], get_builtin_embeds(), "Embed")
        self.options.embeds.append(embed)
        return self

    def add_builtin_providers(self) -> "ProviderBuilder":
        self.options.sources.extend(get_builtin_sources())
        self.options.embeds.extend(get_builtin_embeds())
        return self

    def build(self) -> ProviderEngine:
        return build_providers(self.options)


def make_providers(
    target: Union[Target, str],
    fetcher: FullFetcher,
    proxied_fetcher: Optional[FullFetcher] = None,
    consistent_ip_for_requests: bool = False,
) -> ProviderEngine:
    """Engine with every built-in provider."""
    return build_providers(BuilderOptions(
        target=target,
        fetcher=fetcher,
        proxied_fetcher=proxied_fetcher,
        consistent_ip_for_requests=consistent_ip_for_requests,
        sources=list(get_builtin_sources()),
        embeds=list(get_builtin_embeds()),
    ))


def make_providers_from_settings(settings: Settings) -> ProviderEngine:
    """Built-in providers over aiohttp, relayed through TIDEWATER_PROXY_URL when set."""
    transport = AiohttpTransport(timeout=settings.request_timeout)
    proxied = None
    if settings.proxy_url:
        proxied = make_simple_proxy_fetcher(settings.proxy_url, transport)
    return build_providers(BuilderOptions(
        target=settings.target,
        fetcher=make_standard_fetcher(transport),
        proxied_fetcher=proxied,
        consistent_ip_for_requests=settings.consistent_ip_for_requests,
        sources=list(get_builtin_sources()),
        embeds=list(get_builtin_embeds()),
        source_timeout=settings.source_timeout,
        embed_timeout=settings.embed_timeout,
    ))
