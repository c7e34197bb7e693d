"""
Provider runner — tries sources and their embeds in order, returns the first
playable stream.

Providers run one at a time. A provider that raises NotFoundError or any other
exception is reported through the events sink and skipped; only configuration
faults (unknown ids, unsupported media kind in a single run) escape.
"""
from __future__ import annotations
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

from .base import (
    EmbedContext, EmbedRef, EmbedResult, MediaQuery, RunOutput, SourceContext, SourceResult,
)
from .errors import ConfigurationError, NotFoundError
from .fetcher import Fetcher
from .flags import FeatureSet
from .registry import ProviderList
from .validation import filter_streams

log = logging.getLogger("tidewater.providers")

T = TypeVar("T")

# strong refs to scheduled async sink callbacks until they finish
_pending_sinks: set = set()


# ──────────────────────────────
#  Events
# ──────────────────────────────
class UpdateStatus(str, Enum):
    PENDING = "pending"
    NOTFOUND = "notfound"
    FAILURE = "failure"


@dataclass
class InitEvent:
    source_ids: list[str]


@dataclass
class UpdateEvent:
    id: str
    percentage: float
    status: UpdateStatus
    reason: Optional[str] = None
    error: Optional[BaseException] = None


@dataclass
class DiscoveredEmbed:
    id: str
    embed_scraper_id: str


@dataclass
class DiscoverEmbedsEvent:
    source_id: str
    embeds: list[DiscoveredEmbed] = field(default_factory=list)


@dataclass
class RunnerEvents:
    """Optional observer. Every callback is fire-and-forget.

    Callbacks may be plain functions or coroutine functions; coroutines are
    scheduled on the running loop and never awaited by the run.
    """
    init: Optional[Callable[[InitEvent], Any]] = None
    start: Optional[Callable[[str], Any]] = None
    update: Optional[Callable[[UpdateEvent], Any]] = None
    discover_embeds: Optional[Callable[[DiscoverEmbedsEvent], Any]] = None


def _emit(events: Optional[RunnerEvents], name: str, payload: Any) -> None:
    if events is None:
        return
    callback = getattr(events, name, None)
    if callback is None:
        return
    try:
        result = callback(payload)
    except Exception as e:
        log.warning(f"Event sink '{name}' raised: {e!r}")
        return
    if inspect.isawaitable(result):
        task = asyncio.ensure_future(result)
        _pending_sinks.add(task)
        task.add_done_callback(lambda t: _sink_done(name, t))


def _sink_done(name: str, task: asyncio.Future) -> None:
    _pending_sinks.discard(task)
    if task.cancelled():
        return
    err = task.exception()
    if err is not None:
        log.warning(f"Event sink '{name}' raised: {err!r}")


def _progress(events: Optional[RunnerEvents], provider_id: str) -> Callable[[float], None]:
    def progress(val: float) -> None:
        _emit(events, "update", UpdateEvent(id=provider_id, percentage=val, status=UpdateStatus.PENDING))
    return progress


# ──────────────────────────────
#  Run options
# ──────────────────────────────
@dataclass
class RunnerOptions:
    features: FeatureSet
    fetcher: Fetcher
    proxied_fetcher: Fetcher
    events: Optional[RunnerEvents] = None
    source_timeout: Optional[float] = None
    embed_timeout: Optional[float] = None


async def _call(coro: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None:
        return await coro
    return await asyncio.wait_for(coro, timeout=timeout)


def _check_source_output(output: Any) -> SourceResult:
    if output is None:
        raise ValueError("No output")
    if not isinstance(output, SourceResult):
        raise TypeError(f"Source returned {type(output).__name__}, expected SourceResult")
    for ref in output.embeds:
        if not isinstance(ref, EmbedRef):
            raise TypeError(f"Source returned embed entry {type(ref).__name__}, expected EmbedRef")
    return output


def _check_embed_output(output: Any) -> EmbedResult:
    if output is None:
        raise ValueError("No output")
    if not isinstance(output, EmbedResult):
        raise TypeError(f"Embed returned {type(output).__name__}, expected EmbedResult")
    return output


def reorder_on_id_list(order: Sequence[str], providers: Sequence[T]) -> list[T]:
    """Ids in `order` first, in that sequence; the rest by descending rank."""
    positions = {pid: i for i, pid in reversed(list(enumerate(order)))}

    def key(p):
        if p.id in positions:
            return (0, positions[p.id], 0)
        return (1, 0, -p.rank)

    return sorted(providers, key=key)


# ──────────────────────────────
#  Single provider runs
# ──────────────────────────────
async def run_individual_source(
    plist: ProviderList, source_id: str, media: MediaQuery, ops: RunnerOptions,
) -> SourceResult:
    source = plist.find_source(source_id)
    if not source:
        raise ConfigurationError("Source with ID not found")
    scrape = source.scraper_for(media)
    if scrape is None:
        raise ConfigurationError(f"Source is not compatible with {media.type}s")

    ctx = SourceContext(
        fetcher=ops.fetcher,
        proxied_fetcher=ops.proxied_fetcher,
        progress=_progress(ops.events, source.id),
        media=media,
    )
    output = _check_source_output(await _call(scrape(ctx), ops.source_timeout))
    streams = filter_streams(output.streams, ops.features)
    embeds = [ref for ref in output.embeds if plist.find_embed(ref.embed_id)]
    if not streams and not embeds:
        raise NotFoundError("No streams found")
    return SourceResult(embeds=embeds, streams=streams)


async def run_individual_embed(
    plist: ProviderList, embed_id: str, url: str, ops: RunnerOptions,
) -> EmbedResult:
    embed = plist.find_embed(embed_id)
    if not embed:
        raise ConfigurationError("Embed with ID not found")

    ctx = EmbedContext(
        fetcher=ops.fetcher,
        proxied_fetcher=ops.proxied_fetcher,
        progress=_progress(ops.events, embed.id),
        url=url,
    )
    output = _check_embed_output(await _call(embed.scrape(ctx), ops.embed_timeout))
    streams = filter_streams(output.streams, ops.features)
    if not streams:
        raise NotFoundError("No streams found")
    return EmbedResult(streams=streams)


# ──────────────────────────────
#  Waterfall
# ──────────────────────────────
def _report_failure(events: Optional[RunnerEvents], provider_id: str, err: Exception) -> None:
    if isinstance(err, NotFoundError):
        log.info(f"[{provider_id}] Not found: {err}")
        _emit(events, "update", UpdateEvent(
            id=provider_id, percentage=100, status=UpdateStatus.NOTFOUND, reason=str(err)))
    else:
        log.warning(f"[{provider_id}] Failed: {err!r}")
        _emit(events, "update", UpdateEvent(
            id=provider_id, percentage=100, status=UpdateStatus.FAILURE, error=err))


async def run_all_providers(
    plist: ProviderList,
    media: MediaQuery,
    ops: RunnerOptions,
    source_order: Optional[Sequence[str]] = None,
    embed_order: Optional[Sequence[str]] = None,
) -> Optional[RunOutput]:
    """Try every compatible source (and the embeds it points at) in order.

    Returns the first valid stream found, or None once every candidate is
    exhausted. Provider errors never escape; they are reported as events.
    """
    events = ops.events
    sources = [s for s in reorder_on_id_list(source_order or [], plist.sources)
               if s.scraper_for(media) is not None]
    embeds = reorder_on_id_list(embed_order or [], plist.embeds)
    embed_positions = {e.id: i for i, e in enumerate(embeds)}

    _emit(events, "init", InitEvent(source_ids=[s.id for s in sources]))

    for source in sources:
        _emit(events, "start", source.id)
        log.info(f"[{source.id}] Trying source scraper...")
        ctx = SourceContext(
            fetcher=ops.fetcher,
            proxied_fetcher=ops.proxied_fetcher,
            progress=_progress(events, source.id),
            media=media,
        )
        try:
            output = _check_source_output(
                await _call(source.scraper_for(media)(ctx), ops.source_timeout))
            streams = filter_streams(output.streams, ops.features)
            if not streams and not output.embeds:
                raise NotFoundError("No streams found")
        except Exception as e:
            _report_failure(events, source.id, e)
            continue

        if streams:
            log.info(f"[{source.id}] Direct stream found")
            return RunOutput(source_id=source.id, stream=streams[0])

        refs = sorted(
            (ref for ref in output.embeds if ref.embed_id in embed_positions),
            key=lambda ref: embed_positions[ref.embed_id],
        )
        if refs:
            _emit(events, "discover_embeds", DiscoverEmbedsEvent(
                source_id=source.id,
                embeds=[DiscoveredEmbed(id=f"{source.id}-{i}", embed_scraper_id=ref.embed_id)
                        for i, ref in enumerate(refs)],
            ))
        else:
            _emit(events, "update", UpdateEvent(
                id=source.id, percentage=100, status=UpdateStatus.NOTFOUND,
                reason="No usable embeds found"))

        for i, ref in enumerate(refs):
            scraper = embeds[embed_positions[ref.embed_id]]
            run_id = f"{source.id}-{i}"
            _emit(events, "start", run_id)
            log.info(f"  [{source.id} → {scraper.id}] Resolving embed...")
            embed_ctx = EmbedContext(
                fetcher=ops.fetcher,
                proxied_fetcher=ops.proxied_fetcher,
                progress=_progress(events, run_id),
                url=ref.url,
            )
            try:
                embed_output = _check_embed_output(
                    await _call(scraper.scrape(embed_ctx), ops.embed_timeout))
                embed_streams = filter_streams(embed_output.streams, ops.features)
                if not embed_streams:
                    raise NotFoundError("No streams found")
            except Exception as e:
                _report_failure(events, run_id, e)
                continue

            log.info(f"  [{scraper.id}] Stream resolved")
            return RunOutput(source_id=source.id, embed_id=scraper.id, stream=embed_streams[0])

    log.warning("All providers exhausted, no stream found")
    return None
