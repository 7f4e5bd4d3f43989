import httpx
import pytest

from conftest import png_bytes
from utils.errors import SourceUnavailable
from utils.qr_source import (
    EXPORT_PROFILE,
    PREVIEW_PROFILE,
    LocalQrSource,
    QrServerSource,
    build_qr_source,
    encode_payload,
)
from utils.settings import Settings

BASE = "https://api.qrserver.com/v1/create-qr-code/"


def make_source(handler, retries=1):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QrServerSource(BASE, timeout=1.0, retries=retries, client=client)


def test_encode_payload_matches_encode_uri_component():
    assert encode_payload("instagram://user?username=a b") == "instagram%3A%2F%2Fuser%3Fusername%3Da%20b"
    assert encode_payload("https://tiktok.com/@x") == "https%3A%2F%2Ftiktok.com%2F%40x"
    assert encode_payload("-_.!~*'()") == "-_.!~*'()"


def test_export_and_preview_profiles():
    assert (EXPORT_PROFILE.size_px, EXPORT_PROFILE.quiet_zone, EXPORT_PROFILE.margin) == (1024, 2, 0)
    assert (PREVIEW_PROFILE.size_px, PREVIEW_PROFILE.quiet_zone, PREVIEW_PROFILE.margin) == (200, 4, 2)
    for profile in (EXPORT_PROFILE, PREVIEW_PROFILE):
        assert profile.ecc == "H"
        assert profile.background == "FFFFFF"


@pytest.mark.asyncio
async def test_request_carries_profile_and_encoded_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=png_bytes((64, 64)))

    source = make_source(handler)
    image = await source.fetch_qr("instagram://user?username=johndoe", 1024, EXPORT_PROFILE)

    assert image.size == (64, 64)
    assert len(seen) == 1
    query = seen[0].url.query
    assert b"size=1024x1024" in query
    assert b"data=instagram%3A%2F%2Fuser%3Fusername%3Djohndoe" in query
    assert b"bgcolor=FFFFFF" in query
    assert b"qzone=2" in query
    assert b"margin=0" in query
    assert b"ecc=H" in query
    assert b"format=png" in query


@pytest.mark.asyncio
async def test_retries_once_after_server_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, content=png_bytes())

    image = await make_source(handler).fetch_qr("https://x.com/jack", 200, PREVIEW_PROFILE)
    assert image.size == (40, 40)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_non_2xx_after_retry_raises():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    with pytest.raises(SourceUnavailable) as excinfo:
        await make_source(handler).fetch_qr("https://x.com/jack", 200)
    assert excinfo.value.status_code == 500
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_transport_error_without_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(SourceUnavailable):
        await make_source(handler, retries=0).fetch_qr("https://x.com/jack", 200)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_undecodable_body_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>nope</html>")

    with pytest.raises(SourceUnavailable):
        await make_source(handler).fetch_qr("https://x.com/jack", 200)


@pytest.mark.asyncio
async def test_local_source_renders_requested_size():
    source = LocalQrSource()
    export = await source.fetch_qr("https://instagram.com/johndoe", 300, EXPORT_PROFILE)
    preview = await source.fetch_qr("https://instagram.com/johndoe", 200, PREVIEW_PROFILE)

    assert export.size == (300, 300)
    assert preview.size == (200, 200)
    # Rand ist weiß (Ruhezone)
    assert export.getpixel((0, 0)) == (255, 255, 255)
    assert preview.getpixel((1, 1)) == (255, 255, 255)


@pytest.mark.asyncio
async def test_local_source_overflow_raises():
    with pytest.raises(SourceUnavailable):
        await LocalQrSource().fetch_qr("x" * 5000, 200)


def test_build_qr_source_from_settings():
    assert isinstance(build_qr_source(Settings(qr_source="local")), LocalQrSource)
    remote = build_qr_source(Settings(qr_source="remote", fetch_timeout=3.0, fetch_retries=0))
    assert isinstance(remote, QrServerSource)
    assert remote.timeout == 3.0
    assert remote.retries == 0
