from urllib.parse import parse_qs, urlsplit

import pytest
from multidict import CIMultiDict

from tidewater.fetcher import make_fetcher
from tidewater.proxy import make_simple_proxy_fetcher, map_request_headers

from helpers import FakeTransport, raw_response

RELAY = "https://relay.example.com/"


def test_sensitive_headers_are_renamed():
    mapped = map_request_headers({
        "Cookie": "a=1", "Referer": "https://r/", "origin": "https://o",
        "User-Agent": "ua", "X-Real-Ip": "1.2.3.4", "Accept": "*/*",
    })
    assert mapped == {
        "X-Cookie": "a=1", "X-Referer": "https://r/", "X-Origin": "https://o",
        "X-User-Agent": "ua", "X-X-Real-Ip": "1.2.3.4", "Accept": "*/*",
    }


@pytest.mark.asyncio
async def test_request_is_tunnelled_through_destination_param():
    transport = FakeTransport()
    fetcher = make_fetcher(make_simple_proxy_fetcher(RELAY, transport))
    await fetcher("/e/abc", base_url="https://host.example.com", query={"t": "1"},
                  headers={"Referer": "https://host.example.com/"})

    call = transport.calls[0]
    parts = urlsplit(call["url"])
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == RELAY
    assert parse_qs(parts.query)["destination"] == ["https://host.example.com/e/abc?t=1"]
    assert call["headers"] == {"X-Referer": "https://host.example.com/"}


@pytest.mark.asyncio
async def test_set_cookie_and_final_destination_unwrapped():
    transport = FakeTransport(raw_response(
        url="https://relay.example.com/?destination=x",
        headers={
            "X-Set-Cookie": "session=abc",
            "X-Final-Destination": "https://host.example.com/final",
            "Content-Type": "text/plain",
        },
    ))
    fetcher = make_fetcher(make_simple_proxy_fetcher(RELAY, transport))
    res = await fetcher.full("https://host.example.com/start", read_headers=["Set-Cookie"])
    assert res.headers == {"set-cookie": "session=abc"}
    assert res.final_url == "https://host.example.com/final"


@pytest.mark.asyncio
async def test_relay_url_used_when_no_final_destination():
    transport = FakeTransport(raw_response(url="https://relay.example.com/?destination=y"))
    fetcher = make_fetcher(make_simple_proxy_fetcher(RELAY, transport))
    res = await fetcher.full("https://host.example.com/start")
    assert res.final_url == "https://relay.example.com/?destination=y"


@pytest.mark.asyncio
async def test_every_relayed_set_cookie_is_kept():
    transport = FakeTransport(raw_response(headers=CIMultiDict([
        ("X-Set-Cookie", "a=1"), ("X-Set-Cookie", "b=2")])))
    fetcher = make_fetcher(make_simple_proxy_fetcher(RELAY, transport))
    res = await fetcher.full("https://host.example.com/start", read_headers=["set-cookie"])
    assert res.headers == {"set-cookie": "a=1, b=2"}
