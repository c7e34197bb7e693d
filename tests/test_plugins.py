import pytest

from tidewater.base import EmbedContext, FileStream, HlsStream, SourceContext
from tidewater.embeds.autoembed import autoembed
from tidewater.embeds.mixdrop import mixdrop
from tidewater.embeds.voe import voe
from tidewater.errors import NotFoundError
from tidewater.fetcher import make_fetcher, make_standard_fetcher
from tidewater.sources.autoembed import autoembed_source
from tidewater.sources.remotestream import remotestream
from tidewater import unpacker

from helpers import FakeTransport, raw_response

PACKED = (
    "eval(function(p,a,c,k,e,d){e=function(c){return c};if(!''.replace(/^/,String)){}"
    "return p}('0.1=\"//2.3/4.5\";',6,6,'MDCore|wurl|cdn|mixdrop|video|mp4'.split('|'),0,{}))"
)


def _ctx(cls, transport, **kw):
    fetcher = make_fetcher(make_standard_fetcher(transport))
    return cls(fetcher=fetcher, proxied_fetcher=fetcher, progress=lambda _: None, **kw)


def test_unpacker_round_trip():
    assert unpacker.detect(PACKED)
    assert unpacker.unpack(PACKED) == 'MDCore.wurl="//cdn.mixdrop/video.mp4";'


def test_unpacker_rejects_plain_text():
    assert not unpacker.detect("var x = 1;")
    with pytest.raises(ValueError):
        unpacker.unpack("var x = 1;")


@pytest.mark.asyncio
async def test_mixdrop_extracts_file_stream():
    ctx = _ctx(EmbedContext, FakeTransport(raw_response(text=f"<script>{PACKED}</script>")),
               url="https://mixdrop.co/e/abc")
    result = await mixdrop.scrape(ctx)
    [stream] = result.streams
    assert isinstance(stream, FileStream)
    assert stream.qualities["unknown"].url == "https://cdn.mixdrop/video.mp4"


@pytest.mark.asyncio
async def test_voe_extracts_hls():
    html = "sources = {'hls': 'https://delivery.voe/master.m3u8'}"
    ctx = _ctx(EmbedContext, FakeTransport(raw_response(text=html)), url="https://voe.sx/e/1")
    [stream] = (await voe.scrape(ctx)).streams
    assert isinstance(stream, HlsStream)
    assert stream.playlist == "https://delivery.voe/master.m3u8"


@pytest.mark.asyncio
async def test_autoembed_embed_not_found():
    ctx = _ctx(EmbedContext, FakeTransport(raw_response(text="<html></html>")),
               url="https://autoembed.cc/embed/oplayer.php?id=1")
    with pytest.raises(NotFoundError):
        await autoembed.scrape(ctx)


@pytest.mark.asyncio
async def test_autoembed_source_points_at_embed(movie, episode):
    transport = FakeTransport()
    movie_out = await autoembed_source.scrape_movie(_ctx(SourceContext, transport, media=movie))
    show_out = await autoembed_source.scrape_show(_ctx(SourceContext, transport, media=episode))
    assert movie_out.embeds[0].embed_id == "autoembed"
    assert movie_out.embeds[0].url.endswith("id=556574")
    assert show_out.embeds[0].url.endswith("id=94605&s=1&e=3")
    assert transport.calls == []


@pytest.mark.asyncio
async def test_remotestream_checks_playlist_content_type(movie):
    ok = FakeTransport(raw_response(headers={"Content-Type": "application/x-mpegURL"}))
    [stream] = (await remotestream.scrape_movie(_ctx(SourceContext, ok, media=movie))).streams
    assert stream.playlist.endswith("/Movies/556574/556574.m3u8")

    missing = FakeTransport(raw_response(status=404, headers={"Content-Type": "text/html"}))
    with pytest.raises(NotFoundError):
        await remotestream.scrape_movie(_ctx(SourceContext, missing, media=movie))
