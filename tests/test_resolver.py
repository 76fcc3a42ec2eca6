"""Tests for playlist source resolution and bounded fetching."""

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from kptv_catalog.exceptions import FetchError, FetchFailed, NoSource
from kptv_catalog.models import AccountRecord, StoredPlaylistDocument
from kptv_catalog.services import AccountDirectory
from kptv_catalog.sources import PlaylistFetcher, SourceResolver


class RecordingFetcher:
    """Fetcher stand-in that records requested urls."""

    def __init__(self, body: str = "#EXTM3U\n", error: Exception = None):
        self.body = body
        self.error = error
        self.urls = []

    async def fetch(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.body


def make_resolver(fetcher, playlists=()):
    return SourceResolver(fetcher, AccountDirectory(playlists=playlists))


class TestSourceResolver:
    """Tests for SourceResolver.resolve."""

    def test_inline_content_wins_without_network(self):
        fetcher = RecordingFetcher()
        playlists = [StoredPlaylistDocument(id="p1", content="#EXTM3U\ninline", url="http://stored/list.m3u")]
        account = AccountRecord(id="a", playlist_id="p1", playlist_url="http://account/list.m3u")

        text = asyncio.run(make_resolver(fetcher, playlists).resolve(account))

        assert text == "#EXTM3U\ninline"
        assert fetcher.urls == []

    def test_stored_playlist_url_is_fetched(self):
        fetcher = RecordingFetcher(body="remote")
        playlists = [StoredPlaylistDocument(id="p1", url="http://stored/list.m3u")]
        account = AccountRecord(id="a", playlist_id="p1", playlist_url="http://account/list.m3u")

        text = asyncio.run(make_resolver(fetcher, playlists).resolve(account))

        assert text == "remote"
        assert fetcher.urls == ["http://stored/list.m3u"]

    def test_empty_stored_playlist_falls_back_to_account_url(self):
        fetcher = RecordingFetcher()
        playlists = [StoredPlaylistDocument(id="p1", content="", url=None)]
        account = AccountRecord(id="a", playlist_id="p1", playlist_url="http://account/list.m3u")

        asyncio.run(make_resolver(fetcher, playlists).resolve(account))

        assert fetcher.urls == ["http://account/list.m3u"]

    def test_unknown_playlist_reference_falls_back_to_account_url(self):
        fetcher = RecordingFetcher()
        account = AccountRecord(id="a", playlist_id="missing", playlist_url="http://account/list.m3u")

        asyncio.run(make_resolver(fetcher).resolve(account))

        assert fetcher.urls == ["http://account/list.m3u"]

    def test_account_url_only(self):
        fetcher = RecordingFetcher(body="direct")
        account = AccountRecord(id="a", playlist_url="http://account/list.m3u")

        assert asyncio.run(make_resolver(fetcher).resolve(account)) == "direct"

    def test_no_source(self):
        account = AccountRecord(id="a")

        with pytest.raises(NoSource) as exc:
            asyncio.run(make_resolver(RecordingFetcher()).resolve(account))

        assert exc.value.account_id == "a"
        assert isinstance(exc.value, FetchError)

    def test_failed_fetch_does_not_fall_through(self):
        fetcher = RecordingFetcher(error=FetchFailed("http://stored/list.m3u", "HTTP 500"))
        playlists = [StoredPlaylistDocument(id="p1", url="http://stored/list.m3u")]
        account = AccountRecord(id="a", playlist_id="p1", playlist_url="http://account/list.m3u")

        with pytest.raises(FetchFailed):
            asyncio.run(make_resolver(fetcher, playlists).resolve(account))

        assert fetcher.urls == ["http://stored/list.m3u"]


async def _playlist(request):
    return web.Response(text="#EXTM3U\n#EXTINF:-1,Ok\nhttp://x/ok.ts\n")


async def _latin1(request):
    return web.Response(body="#EXTINF:-1,Caf\xe9\n".encode("latin-1"), content_type="audio/x-mpegurl", charset="latin-1")


async def _large(request):
    return web.Response(body=b"x" * 4096)


async def _chunked(request):
    resp = web.StreamResponse()
    resp.enable_chunked_encoding()
    await resp.prepare(request)
    for _ in range(8):
        await resp.write(b"y" * 1024)
    await resp.write_eof()
    return resp


async def _missing(request):
    return web.Response(status=404, text="nope")


async def _slow(request):
    await asyncio.sleep(1)
    return web.Response(text="late")


def _fetch(path: str, timeout: float = 5, max_bytes: int = 2048):
    """Run one fetch against a throwaway local server."""

    async def scenario():
        app = web.Application()
        app.router.add_get("/playlist.m3u", _playlist)
        app.router.add_get("/latin1.m3u", _latin1)
        app.router.add_get("/large.m3u", _large)
        app.router.add_get("/chunked.m3u", _chunked)
        app.router.add_get("/missing.m3u", _missing)
        app.router.add_get("/slow.m3u", _slow)

        async with TestServer(app) as server:
            async with aiohttp.ClientSession() as session:
                fetcher = PlaylistFetcher(session, timeout=timeout, max_bytes=max_bytes)
                return await fetcher.fetch(str(server.make_url(path)))

    return asyncio.run(scenario())


class TestPlaylistFetcher:
    """Tests for PlaylistFetcher against a local aiohttp server."""

    def test_fetches_text(self):
        assert "#EXTINF:-1,Ok" in _fetch("/playlist.m3u")

    def test_uses_declared_charset(self):
        assert "Caf\xe9" in _fetch("/latin1.m3u")

    def test_rejects_announced_oversized_body(self):
        with pytest.raises(FetchFailed) as exc:
            _fetch("/large.m3u", max_bytes=1024)
        assert "exceeds" in str(exc.value)

    def test_rejects_oversized_chunked_body(self):
        with pytest.raises(FetchFailed) as exc:
            _fetch("/chunked.m3u", max_bytes=3000)
        assert "exceeds" in str(exc.value)

    def test_accepts_body_within_limit(self):
        assert _fetch("/chunked.m3u", max_bytes=10000) == "y" * 8192

    def test_bad_status(self):
        with pytest.raises(FetchFailed) as exc:
            _fetch("/missing.m3u")
        assert "HTTP 404" in str(exc.value)

    def test_timeout(self):
        with pytest.raises(FetchFailed) as exc:
            _fetch("/slow.m3u", timeout=0.1)
        assert "timed out" in str(exc.value)
        assert exc.value.url.endswith("/slow.m3u")

    def test_connection_error_keeps_cause(self):

        async def scenario():
            async with aiohttp.ClientSession() as session:
                fetcher = PlaylistFetcher(session, timeout=2)
                return await fetcher.fetch("http://127.0.0.1:1/unreachable.m3u")

        with pytest.raises(FetchFailed) as exc:
            asyncio.run(scenario())
        assert isinstance(exc.value.cause, aiohttp.ClientError)
