"""Unit tests for leakscan/pipeline/sources.py.

HTTP behaviour is exercised through ``httpx.MockTransport``; no network.
"""

from __future__ import annotations

import httpx
import pytest

from leakscan.constants import DEFAULT_USER_AGENT
from leakscan.pipeline.sources import (
    FetchError,
    FileContentSource,
    HttpContentSource,
    create_http_client,
)


def _source(handler) -> HttpContentSource:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers={"User-Agent": DEFAULT_USER_AGENT},
        follow_redirects=False,
    )
    return HttpContentSource(client)


# ─── create_http_client() ────────────────────────────────────────────────────


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_user_agent_and_timeout(self):
        client = create_http_client("leakscan-test/1.0", timeout=3.5, max_connections=5)
        try:
            assert client.headers["User-Agent"] == "leakscan-test/1.0"
            assert client.timeout.connect == 3.5
            assert client.timeout.read == 3.5
            assert client.follow_redirects is False
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_from_settings_builds_source(self):
        source = HttpContentSource.from_settings(
            user_agent=DEFAULT_USER_AGENT, timeout=1.0, max_connections=2
        )
        await source.aclose()


# ─── HttpContentSource ───────────────────────────────────────────────────────


class TestHttpContentSource:
    @pytest.mark.asyncio
    async def test_body_and_user_agent(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["User-Agent"]
            seen["method"] = request.method
            return httpx.Response(200, content=b"var key = 'abc';")

        source = _source(handler)
        blob = await source.fetch("https://example.com/app.js")
        await source.aclose()

        assert blob.location == "https://example.com/app.js"
        assert blob.content == b"var key = 'abc';"
        assert seen == {"ua": DEFAULT_USER_AGENT, "method": "GET"}

    @pytest.mark.asyncio
    async def test_error_status_body_still_returned(self):
        source = _source(lambda request: httpx.Response(404, content=b"not found: secret"))
        blob = await source.fetch("https://example.com/missing")
        await source.aclose()
        assert blob.content == b"not found: secret"

    @pytest.mark.asyncio
    async def test_redirect_not_followed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/start":
                return httpx.Response(302, headers={"Location": "/end"}, content=b"moved")
            return httpx.Response(200, content=b"final")

        source = _source(handler)
        blob = await source.fetch("https://example.com/start")
        await source.aclose()
        assert blob.content == b"moved"

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = _source(handler)
        with pytest.raises(FetchError) as exc_info:
            await source.fetch("https://down.example.com/")
        await source.aclose()
        assert exc_info.value.location == "https://down.example.com/"
        assert "ConnectError" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        source = _source(handler)
        with pytest.raises(FetchError):
            await source.fetch("https://slow.example.com/")
        await source.aclose()


# ─── FileContentSource ───────────────────────────────────────────────────────


class TestFileContentSource:
    @pytest.mark.asyncio
    async def test_reads_bytes(self, tmp_path):
        target = tmp_path / "app.js"
        target.write_bytes(b"\x00binary and text")
        blob = await FileContentSource().fetch(str(target))
        assert blob.content == b"\x00binary and text"
        assert blob.location == str(target)

    @pytest.mark.asyncio
    async def test_relative_to_base_dir(self, tmp_path):
        (tmp_path / "x.txt").write_text("hello")
        blob = await FileContentSource(base_dir=tmp_path).fetch("x.txt")
        assert blob.content == b"hello"
        assert blob.location == "x.txt"

    @pytest.mark.asyncio
    async def test_missing_file_raises_fetch_error(self, tmp_path):
        with pytest.raises(FetchError):
            await FileContentSource().fetch(str(tmp_path / "gone.js"))

    @pytest.mark.asyncio
    async def test_aclose_is_noop(self):
        await FileContentSource().aclose()
