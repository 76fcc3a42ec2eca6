"""Integration tests that hit the FastAPI routes through Starlette TestClient."""

import pytest
from starlette.testclient import TestClient

from kptv_catalog.exceptions import FetchFailed
from kptv_catalog.main import create_app


AUTH = {"username": "alice", "password": "secret"}


@pytest.fixture()
def client(app_config, resolver):
    app, _ = create_app(app_config, resolver=resolver)
    with TestClient(app) as c:
        yield c


def api(client, **params):
    return client.get("/player_api.php", params={**AUTH, **params})


class TestAuthentication:
    """Credential and account status checks."""

    def test_invalid_credentials(self, client):
        resp = client.get("/player_api.php", params={"username": "alice", "password": "bad"})

        assert resp.status_code == 401
        assert resp.json() == {"user_info": {"auth": 0, "message": "Invalid credentials"}}

    def test_missing_credentials(self, client):
        assert client.get("/player_api.php").status_code == 401

    def test_disabled_account(self, client):
        resp = client.get("/player_api.php", params={"username": "bob", "password": "pw"})

        assert resp.status_code == 403
        assert resp.json()["user_info"]["message"] == "Account disabled"

    def test_expired_account(self, client):
        resp = client.get("/player_api.php", params={"username": "carol", "password": "pw"})

        assert resp.status_code == 403
        assert resp.json()["user_info"]["message"] == "Subscription expired"


class TestPlayerApi:
    """Tests for the player_api.php actions."""

    def test_user_info_is_default(self, client):
        data = api(client).json()

        assert data["user_info"]["auth"] == 1
        assert data["user_info"]["username"] == "alice"
        assert data["user_info"]["max_connections"] == "2"
        assert data["user_info"]["exp_date"] == "9999999999"
        assert data["server_info"]["url"] == "catalog.local"
        assert data["server_info"]["port"] == "8080"

    def test_live_categories(self, client):
        data = api(client, action="get_live_categories").json()

        assert data == [
            {"category_id": "News", "category_name": "News", "parent_id": 0},
            {"category_id": "Sports", "category_name": "Sports", "parent_id": 0},
        ]

    def test_live_streams(self, client):
        data = api(client, action="get_live_streams").json()

        assert [s["name"] for s in data] == ["CNN", "BBC World", "ESPN"]
        cnn = data[0]
        assert cnn["stream_type"] == "live"
        assert cnn["stream_id"] == 1
        assert cnn["epg_channel_id"] == "cnn.us"
        assert cnn["stream_icon"] == "http://logo/cnn.png"
        assert cnn["direct_source"] == "http://x/cnn.ts"

    def test_live_streams_by_category(self, client):
        data = api(client, action="get_live_streams", category_id="Sports").json()
        assert [s["name"] for s in data] == ["ESPN"]

    def test_vod_categories_and_streams(self, client):
        categories = api(client, action="get_vod_categories").json()
        streams = api(client, action="get_vod_streams").json()

        assert [c["category_id"] for c in categories] == ["Movies", "VOD Drama"]
        assert [s["name"] for s in streams] == ["Film A", "Film B"]
        assert streams[0]["stream_type"] == "movie"
        assert streams[0]["container_extension"] == "mp4"
        assert streams[1]["container_extension"] == "mkv"

    def test_series(self, client):
        categories = api(client, action="get_series_categories").json()
        series = api(client, action="get_series").json()

        assert [c["category_id"] for c in categories] == ["Series Comedy"]
        assert series[0]["name"] == "Show S01E01"
        assert series[0]["series_id"] == 6
        assert series[0]["num"] == 1

    def test_vod_info(self, client):
        data = api(client, action="get_vod_info", vod_id="5").json()

        assert data["info"]["name"] == "Film B"
        assert data["movie_data"]["stream_id"] == 5
        assert data["movie_data"]["container_extension"] == "mkv"
        assert data["movie_data"]["direct_source"] == "http://x/b.mkv"

    def test_vod_info_unknown(self, client):
        data = api(client, action="get_vod_info", vod_id="999").json()

        assert data["info"]["name"] == ""
        assert data["movie_data"]["direct_source"] == ""

    def test_series_info(self, client):
        data = api(client, action="get_series_info", series_id="6").json()

        assert data["info"]["name"] == "Show S01E01"
        episode = data["episodes"]["1"][0]
        assert episode["id"] == "6"
        assert episode["direct_source"] == "http://x/show1.mp4"

    def test_series_info_unknown(self, client):
        data = api(client, action="get_series_info", series_id="abc").json()
        assert data == {"seasons": [], "info": {}, "episodes": {}}

    def test_epg_actions(self, client):
        assert api(client, action="get_short_epg").json() == {"epg_listings": []}
        assert api(client, action="get_simple_data_table").json() == {"epg_listings": []}

    def test_unknown_action(self, client):
        assert api(client, action="make_coffee").json() == {"error": "Unknown action"}

    def test_placeholder_on_fetch_failure(self, client, resolver):
        resolver.error = FetchFailed("http://provider/list.m3u", "HTTP 500")

        resp = api(client, action="get_live_streams")

        assert resp.status_code == 200
        assert [s["name"] for s in resp.json()] == ["Channel 1", "Channel 2", "News Live", "Sports Channel"]

    def test_many_requests_parse_once(self, client, resolver):
        for action in ("get_live_categories", "get_live_streams", "get_vod_streams", "get_series"):
            api(client, action=action)

        assert resolver.calls == 1


class TestStreamRedirects:
    """Tests for the live/movie/series stream urls."""

    def test_live_redirect(self, client):
        resp = client.get("/live/alice/secret/1.ts", follow_redirects=False)

        assert resp.status_code == 302
        assert resp.headers["location"] == "http://x/cnn.ts"

    def test_movie_redirect(self, client):
        resp = client.get("/movie/alice/secret/4.mp4", follow_redirects=False)

        assert resp.status_code == 302
        assert resp.headers["location"] == "http://x/a.mp4"

    def test_series_redirect(self, client):
        resp = client.get("/series/alice/secret/6.mp4", follow_redirects=False)

        assert resp.status_code == 302
        assert resp.headers["location"] == "http://x/show1.mp4"

    def test_wrong_kind_is_not_found(self, client):
        assert client.get("/live/alice/secret/4.ts", follow_redirects=False).status_code == 404

    def test_non_numeric_id_is_not_found(self, client):
        assert client.get("/live/alice/secret/abc.ts", follow_redirects=False).status_code == 404

    def test_bad_credentials(self, client):
        assert client.get("/live/alice/nope/1.ts", follow_redirects=False).status_code == 401

    def test_no_redirect_to_placeholder(self, client, resolver):
        resolver.error = FetchFailed("http://provider/list.m3u", "HTTP 500")
        assert client.get("/live/alice/secret/1.ts", follow_redirects=False).status_code == 404


class TestServiceRoutes:
    """Tests for the root, status and refresh endpoints."""

    def test_root_info(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["xtream_api"] == "/player_api.php"

    def test_root_redirects_xtream_queries(self, client):
        resp = client.get("/", params={**AUTH, "action": "get_live_streams"}, follow_redirects=False)

        assert resp.status_code == 307
        assert resp.headers["location"].startswith("/player_api.php?")
        assert "action=get_live_streams" in resp.headers["location"]

    def test_status(self, client):
        api(client, action="get_live_streams")
        data = client.get("/status").json()

        assert data["status"] == "running"
        assert data["accounts"] == 3
        assert data["cache"]["entries"] == 1
        assert data["cache"]["loads"] == 1
        assert data["limits"]["max_live"] == 5000

    def test_refresh(self, client, resolver):
        api(client, action="get_live_streams")
        resolver.content = '#EXTINF:-1 group-title="News",Only\nhttp://x/only.ts\n'

        resp = client.post("/catalog/refresh", params=AUTH)

        assert resp.status_code == 200
        assert resp.json() == {"key": "playlist:main", "categories": 1, "live": 1, "movie": 0, "series": 0}
        assert [s["name"] for s in api(client, action="get_live_streams").json()] == ["Only"]

    def test_failed_refresh_keeps_catalog(self, client, resolver):
        api(client, action="get_live_streams")
        resolver.error = FetchFailed("http://provider/list.m3u", "HTTP 500")

        resp = client.post("/catalog/refresh", params=AUTH)

        assert resp.status_code == 502
        assert [s["name"] for s in api(client, action="get_live_streams").json()] == ["CNN", "BBC World", "ESPN"]

    def test_refresh_requires_credentials(self, client):
        assert client.post("/catalog/refresh", params={"username": "alice", "password": "x"}).status_code == 401
