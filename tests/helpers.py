from multidict import CIMultiDict

from tidewater.base import FileStream, HlsStream, StreamFile
from tidewater.builder import BuilderOptions, build_providers
from tidewater.fetcher import RawResponse, make_standard_fetcher
from tidewater.flags import Target
from tidewater.providers import Embed, Sourcerer


class FakeTransport:
    """Records every call and answers with queued RawResponses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, url, *, method="GET", headers=None, body=None):
        self.calls.append({"url": url, "method": method, "headers": headers or {}, "body": body})
        if self.responses:
            return self.responses.pop(0)
        return raw_response()


def raw_response(text="", status=200, url="https://example.com/", headers=None):
    return RawResponse(status=status, url=url, headers=CIMultiDict(headers or {}), text=text)


def hls(url="https://cdn.example.com/master.m3u8", **kw):
    return HlsStream(playlist=url, **kw)


def mp4(url="https://cdn.example.com/video.mp4", **kw):
    return FileStream(qualities={"1080": StreamFile(url=url)}, **kw)


def source(id, rank, result=None, error=None, movie=True, show=True, **kw):
    async def scrape(ctx):
        if error is not None:
            raise error
        return result

    return Sourcerer(
        id=id, name=id.title(), rank=rank,
        scrape_movie=scrape if movie else None,
        scrape_show=scrape if show else None,
        **kw,
    )


def embed(id, rank, result=None, error=None, **kw):
    async def scrape(ctx):
        if error is not None:
            raise error
        return result

    return Embed(id=id, name=id.title(), rank=rank, scrape=scrape, **kw)


def engine_for(sources=(), embeds=(), target=Target.ANY, **kw):
    return build_providers(BuilderOptions(
        target=target,
        fetcher=make_standard_fetcher(FakeTransport()),
        sources=list(sources),
        embeds=list(embeds),
        **kw,
    ))


class Recorder:
    """Event sink that keeps (name, payload) tuples in emission order."""

    def __init__(self):
        self.events = []

    def sink(self):
        from tidewater.runner import RunnerEvents
        return RunnerEvents(
            init=lambda e: self.events.append(("init", e)),
            start=lambda i: self.events.append(("start", i)),
            update=lambda e: self.events.append(("update", e)),
            discover_embeds=lambda e: self.events.append(("discover_embeds", e)),
        )

    def named(self, name):
        return [payload for n, payload in self.events if n == name]


