"""
HTTP surface over a ProviderEngine.

    uvicorn tidewater.api:app
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request

from .base import EpisodeRef, MediaQuery, Movie, SeasonRef, ShowEpisode
from .config import Settings, configure_logging
from .engine import ProviderEngine
from .runner import DiscoverEmbedsEvent, InitEvent, RunnerEvents, UpdateEvent

log = logging.getLogger("tidewater.api")


class EventLog:
    """Collects runner events into JSON-able dicts, in order."""

    def __init__(self):
        self.entries: list[dict] = []

    def sink(self) -> RunnerEvents:
        return RunnerEvents(
            init=self._init,
            start=self._start,
            update=self._update,
            discover_embeds=self._discover,
        )

    def _init(self, evt: InitEvent):
        self.entries.append({"event": "init", "sourceIds": evt.source_ids})

    def _start(self, provider_id: str):
        self.entries.append({"event": "start", "id": provider_id})

    def _update(self, evt: UpdateEvent):
        entry = {"event": "update", "id": evt.id, "percentage": evt.percentage,
                 "status": evt.status.value}
        if evt.reason:
            entry["reason"] = evt.reason
        if evt.error is not None:
            entry["error"] = repr(evt.error)
        self.entries.append(entry)

    def _discover(self, evt: DiscoverEmbedsEvent):
        self.entries.append({
            "event": "discoverEmbeds",
            "sourceId": evt.source_id,
            "embeds": [{"id": e.id, "embedScraperId": e.embed_scraper_id} for e in evt.embeds],
        })


def _split_ids(raw: Optional[str]) -> Optional[list[str]]:
    if not raw:
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


def create_app(engine: Optional[ProviderEngine] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "engine", None) is None:
            from .builder import make_providers_from_settings
            settings = Settings.from_env()
            configure_logging(settings.log_level)
            owned = app.state.engine = make_providers_from_settings(settings)
        yield
        if owned is not None:
            await owned.close()

    app = FastAPI(title="Tidewater", lifespan=lifespan)
    app.state.engine = engine

    def _engine(request: Request) -> ProviderEngine:
        return request.app.state.engine

    async def _run(request: Request, media: MediaQuery,
                   source_order: Optional[str], embed_order: Optional[str]):
        log.info(f"Waterfall for {media.type} {media.tmdb_id}")
        events = EventLog()
        result = await _engine(request).run_all(
            media,
            source_order=_split_ids(source_order),
            embed_order=_split_ids(embed_order),
            events=events.sink(),
        )
        if result is None:
            raise HTTPException(status_code=404, detail={"message": "No stream found",
                                                         "events": events.entries})
        return {**result.to_dict(), "events": events.entries}

    @app.get("/sources")
    def list_sources(request: Request):
        return [m.to_dict() for m in _engine(request).list_sources()]

    @app.get("/embeds")
    def list_embeds(request: Request):
        return [m.to_dict() for m in _engine(request).list_embeds()]

    @app.get("/meta/{provider_id}")
    def get_metadata(provider_id: str, request: Request):
        meta = _engine(request).get_metadata(provider_id)
        if meta is None:
            raise HTTPException(status_code=404, detail=f"Unknown provider: {provider_id}")
        return meta.to_dict()

    @app.get("/stream/movie/{tmdb_id}")
    async def stream_movie(
        tmdb_id: str,
        request: Request,
        title: str = "",
        year: int = 0,
        imdb_id: Optional[str] = None,
        source_order: Optional[str] = None,
        embed_order: Optional[str] = None,
    ):
        media = Movie(title=title, release_year=year, tmdb_id=tmdb_id, imdb_id=imdb_id)
        return await _run(request, media, source_order, embed_order)

    @app.get("/stream/show/{tmdb_id}")
    async def stream_show(
        tmdb_id: str,
        request: Request,
        season: int = Query(1, ge=0),
        episode: int = Query(1, ge=0),
        title: str = "",
        year: int = 0,
        imdb_id: Optional[str] = None,
        source_order: Optional[str] = None,
        embed_order: Optional[str] = None,
    ):
        media = ShowEpisode(
            title=title, release_year=year, tmdb_id=tmdb_id, imdb_id=imdb_id,
            season=SeasonRef(number=season), episode=EpisodeRef(number=episode),
        )
        return await _run(request, media, source_order, embed_order)

    return app


app = create_app()
