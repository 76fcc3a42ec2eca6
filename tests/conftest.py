"""
Pytest configuration and shared fixtures for KPTV Catalog tests.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from kptv_catalog.models import AccountRecord, AppConfig, CatalogConfig, StoredPlaylistDocument


SAMPLE_PLAYLIST = """#EXTM3U
#EXTINF:-1 tvg-id="cnn.us" tvg-logo="http://logo/cnn.png" group-title="News",CNN
http://x/cnn.ts
#EXTINF:-1 tvg-id="bbc.uk" group-title="News",BBC World
http://x/bbc.ts
#EXTINF:-1 group-title="Sports",ESPN
http://x/espn.m3u8
#EXTINF:-1 tvg-logo="http://logo/a.jpg" group-title="Movies",Film A
http://x/a.mp4
#EXTINF:-1 group-title="VOD Drama",Film B
http://x/b.mkv
#EXTINF:-1 group-title="Series Comedy",Show S01E01
http://x/show1.mp4
"""


class FakeResolver:
    """Resolver stand-in that counts calls and can block or fail on demand."""

    def __init__(self, content: str = SAMPLE_PLAYLIST):
        self.content = content
        self.error = None
        self.gate = None
        self.calls = 0

    async def resolve(self, account):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.content


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


async def settle(rounds: int = 5):
    """Let pending tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def account():
    return AccountRecord(id="u1", username="alice", password="secret", playlist_id="main")


@pytest.fixture
def app_config():
    """Configuration with one stored playlist and a few accounts in different states."""
    return AppConfig(
        catalog=CatalogConfig(ttl=60),
        playlists=[StoredPlaylistDocument(id="main", name="Main", url="http://provider/list.m3u")],
        accounts=[
            AccountRecord(id="u1", username="alice", password="secret", playlist_id="main", max_connections=2),
            AccountRecord(id="u2", username="bob", password="pw", playlist_id="main", is_active=False),
            AccountRecord(
                id="u3", username="carol", password="pw", playlist_id="main",
                expiry=datetime(2000, 1, 1, tzinfo=timezone.utc),
            ),
        ],
        public_url="http://catalog.local:8080",
    )
