#!/usr/bin/env python3
"""
Xtream Codes API Routes Module

This module provides the Xtream Codes API facade over the catalog query service.
It implements the standard player_api.php interface and the stream URLs that
redirect players to the playable source of an entry.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse
from fastapi import APIRouter, HTTPException, Request, Query
from fastapi.responses import JSONResponse, RedirectResponse
from typing import Optional
from kptv_catalog.exceptions import AccessDenied
from kptv_catalog.models import AccountRecord, CatalogEntry, EntryKind

# setup the logger
logger = logging.getLogger(__name__)

# setup the router
router = APIRouter()

# container extensions recognized in entry urls
KNOWN_EXTENSIONS = ("ts", "m3u8", "mp4", "mkv", "avi", "mov", "webm")

"""
Get catalog server instance from application state

@param request: Request FastAPI request object
@return CatalogServer: Catalog server instance from app state
@throws HTTPException: 503 if the service is not initialized
"""
def get_server(request: Request):
    """Get catalog server instance from app state"""
    server = getattr(request.app.state, "catalog", None)
    if not server or not server.query:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return server

"""
Convert a datetime into an epoch string

@param value: datetime Moment to convert
@param default: str Value used when no moment is set
@return str: Seconds since the epoch
"""
def _epoch(value: Optional[datetime], default: str = "0") -> str:
    return str(int(value.timestamp())) if value else default

"""
Guess the container extension of an entry from its url

@param url: str Playable source url
@param default: str Extension used when none is recognized
@return str: Container extension
"""
def container_extension(url: str, default: str) -> str:

    # look at the last path segment only
    path = urlparse(url).path.lower()
    if "." in path.rsplit("/", 1)[-1]:
        ext = path.rsplit(".", 1)[-1]
        if ext in KNOWN_EXTENSIONS:
            return ext
    return default

def format_category(category_id: str) -> dict:
    return {"category_id": category_id, "category_name": category_id, "parent_id": 0}

"""
Format a live entry in Xtream format

@param entry: CatalogEntry Live entry
@return dict: Xtream live stream record
"""
def format_live(entry: CatalogEntry) -> dict:
    return {
        "num": entry.num,
        "name": entry.name,
        "stream_type": "live",
        "stream_id": entry.stream_id,
        "stream_icon": entry.stream_icon,
        "epg_channel_id": entry.epg_channel_id,
        "added": "",
        "category_id": entry.category_id,
        "custom_sid": "",
        "tv_archive": 0,
        "direct_source": entry.direct_source,
        "tv_archive_duration": 0
    }

"""
Format a movie entry in Xtream format

@param entry: CatalogEntry Movie entry
@return dict: Xtream VOD stream record
"""
def format_vod(entry: CatalogEntry) -> dict:
    return {
        "num": entry.num,
        "name": entry.name,
        "stream_type": "movie",
        "stream_id": entry.stream_id,
        "stream_icon": entry.stream_icon,
        "rating": "0",
        "rating_5based": 0,
        "added": "",
        "category_id": entry.category_id,
        "container_extension": container_extension(entry.direct_source, "mp4"),
        "custom_sid": "",
        "direct_source": entry.direct_source
    }

"""
Format a series entry in Xtream format

@param entry: CatalogEntry Series entry
@param num: int Position in the returned list
@return dict: Xtream series record
"""
def format_series(entry: CatalogEntry, num: int) -> dict:
    return {
        "num": num,
        "name": entry.name,
        "series_id": entry.stream_id,
        "cover": entry.stream_icon,
        "plot": "",
        "cast": "",
        "director": "",
        "genre": entry.category_id,
        "release_date": "",
        "rating": "0",
        "rating_5based": 0,
        "youtube_trailer": "",
        "category_id": entry.category_id,
        "backdrop_path": []
    }

"""
Parse a numeric id query value

@param value: str Raw query value
@return int: Parsed id or None
"""
def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None

"""
Xtream Codes API endpoint

Main API endpoint that handles all Xtream Codes API actions including
stream listings, categories, and user information.

@param request: Request FastAPI request object
@param username: str Xtream API username
@param password: str Xtream API password
@param action: str API action to perform
@param category_id: str Optional category filter for listings
@param vod_id: str Movie id for get_vod_info
@param series_id: str Series id for get_series_info
@return dict: Response data based on requested action
@throws HTTPException: 503 if service not initialized
"""
@router.get("/player_api.php")
async def player_api(
    request: Request,
    username: Optional[str] = Query(None),
    password: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    vod_id: Optional[str] = Query(None),
    series_id: Optional[str] = Query(None)
):
    """Xtream Codes API endpoint"""
    server = get_server(request)
    
    # Authentication check
    try:
        account = server.directory.authenticate(username, password)
    except AccessDenied as e:
        return JSONResponse(status_code=e.status_code, content={"user_info": {"auth": 0, "message": e.message}})

    query = server.query
    try:
        if not action or action == "get_user_info":
            return get_user_info(server, account)
        elif action == "get_live_categories":
            return [format_category(c) for c in await query.categories(account, EntryKind.LIVE)]
        elif action == "get_live_streams":
            return [format_live(e) for e in await query.entries(account, EntryKind.LIVE, category_id)]
        elif action == "get_vod_categories":
            return [format_category(c) for c in await query.categories(account, EntryKind.MOVIE)]
        elif action == "get_vod_streams":
            return [format_vod(e) for e in await query.entries(account, EntryKind.MOVIE, category_id)]
        elif action == "get_vod_info":
            return await get_vod_info(server, account, vod_id)
        elif action == "get_series_categories":
            return [format_category(c) for c in await query.categories(account, EntryKind.SERIES)]
        elif action == "get_series":
            entries = await query.entries(account, EntryKind.SERIES, category_id)
            return [format_series(e, i) for i, e in enumerate(entries, start=1)]
        elif action == "get_series_info":
            return await get_series_info(server, account, series_id)
        elif action in ("get_short_epg", "get_simple_data_table"):
            return {"epg_listings": []}
        else:
            return {"error": "Unknown action"}

    # whoops... never leak internals to the player
    except Exception as e:
        logger.error(f"Xtream API error for action {action}: {e}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

"""
Get Xtream API user information

Returns user and server information for Xtream Codes API.

@param server: CatalogServer Catalog server instance
@param account: AccountRecord Authenticated account
@return dict: User and server information
"""
def get_user_info(server, account: AccountRecord) -> dict:

    now = datetime.now(timezone.utc)
    public_url = urlparse(server.config.public_url)

    return {
        "user_info": {
            "username": account.username,
            "password": account.password,
            "message": "Welcome to KPTV Catalog",
            "auth": 1,
            "status": "Active",
            "exp_date": _epoch(account.expiry, "9999999999"),
            "is_trial": "0",
            "active_cons": "0",
            "created_at": _epoch(account.created_at),
            "max_connections": str(account.max_connections),
            "allowed_output_formats": ["m3u8", "ts", "rtmp"]
        },
        "server_info": {
            "url": public_url.hostname or server.config.public_url,
            "port": str(public_url.port or server.config.bind_port),
            "https_port": "",
            "server_protocol": public_url.scheme or "http",
            "rtmp_port": "",
            "timezone": "UTC",
            "timestamp_now": int(now.timestamp()),
            "time_now": now.strftime("%Y-%m-%d %H:%M:%S")
        }
    }

"""
Get movie details in Xtream format

The playlist carries no movie metadata, so only the name, icon and playable
source are filled in.

@param server: CatalogServer Catalog server instance
@param account: AccountRecord Authenticated account
@param vod_id: str Requested movie stream id
@return dict: Movie info and movie data blocks
"""
async def get_vod_info(server, account: AccountRecord, vod_id: Optional[str]) -> dict:

    # find the movie
    stream_id = _int_or_none(vod_id)
    entry = None
    if stream_id is not None:
        entry = await server.query.find_entry(account, EntryKind.MOVIE, stream_id)

    name = entry.name if entry else ""
    direct_source = entry.direct_source if entry else ""

    return {
        "info": {
            "movie_image": entry.stream_icon if entry else "",
            "tmdb_id": "",
            "name": name,
            "o_name": name,
            "plot": "",
            "cast": "",
            "director": "",
            "genre": entry.category_id if entry else "",
            "release_date": "",
            "duration": "",
            "rating": "0"
        },
        "movie_data": {
            "stream_id": stream_id if stream_id is not None else vod_id,
            "name": name,
            "category_id": entry.category_id if entry else "",
            "container_extension": container_extension(direct_source, "mp4"),
            "direct_source": direct_source
        }
    }

"""
Get series details in Xtream format

A playlist series entry is a single playable item, so it is exposed as
season 1 holding one episode.

@param server: CatalogServer Catalog server instance
@param account: AccountRecord Authenticated account
@param series_id: str Requested series id
@return dict: Seasons, info and episodes blocks
"""
async def get_series_info(server, account: AccountRecord, series_id: Optional[str]) -> dict:

    # find the series
    stream_id = _int_or_none(series_id)
    entry = None
    if stream_id is not None:
        entry = await server.query.find_entry(account, EntryKind.SERIES, stream_id)

    # nothing to show
    if entry is None:
        return {"seasons": [], "info": {}, "episodes": {}}

    return {
        "seasons": [{"season_number": 1, "name": "Season 1"}],
        "info": {
            "name": entry.name,
            "cover": entry.stream_icon,
            "plot": "",
            "cast": "",
            "director": "",
            "genre": entry.category_id,
            "release_date": "",
            "rating": "0",
            "category_id": entry.category_id
        },
        "episodes": {
            "1": [{
                "id": str(entry.stream_id),
                "episode_num": 1,
                "title": entry.name,
                "container_extension": container_extension(entry.direct_source, "mp4"),
                "info": {},
                "custom_sid": "",
                "added": "",
                "season": 1,
                "direct_source": entry.direct_source
            }]
        }
    }

"""
Redirect a player to the playable source of an entry

@param request: Request FastAPI request object
@param kind: EntryKind Collection to search
@param username: str Xtream API username
@param password: str Xtream API password
@param stream_id: str Stream identifier from the url
@return RedirectResponse: 302 to the entry's source url
@throws HTTPException: 401 if auth failed, 404 if the entry does not exist
"""
async def redirect_to_source(request: Request, kind: EntryKind, username: str, password: str, stream_id: str):

    server = get_server(request)

    # Authentication check
    try:
        account = server.directory.authenticate(username, password)
    except AccessDenied:
        raise HTTPException(status_code=401, detail="Unauthorized")

    # find the entry
    numeric_id = _int_or_none(stream_id)
    entry = None
    if numeric_id is not None:
        entry = await server.query.find_entry(account, kind, numeric_id)

    # not there or nothing to play
    if entry is None or not entry.direct_source:
        raise HTTPException(status_code=404, detail="Stream not found")

    logger.debug(f"Redirecting {account.username} to {kind.value} stream {numeric_id}")
    return RedirectResponse(url=entry.direct_source, status_code=302)

"""
Stream live content via Xtream format URL

@return RedirectResponse: Redirect to the live source
"""
@router.get("/live/{username}/{password}/{stream_id}.{ext}")
async def stream_live(username: str, password: str, stream_id: str, ext: str, request: Request):
    """Stream live content via Xtream format URL"""
    return await redirect_to_source(request, EntryKind.LIVE, username, password, stream_id)

"""
Stream VOD content via Xtream format URL

@return RedirectResponse: Redirect to the movie source
"""
@router.get("/movie/{username}/{password}/{stream_id}.{ext}")
async def stream_movie(username: str, password: str, stream_id: str, ext: str, request: Request):
    """Stream VOD content via Xtream format URL"""
    return await redirect_to_source(request, EntryKind.MOVIE, username, password, stream_id)

"""
Stream series content via Xtream format URL

@return RedirectResponse: Redirect to the episode source
"""
@router.get("/series/{username}/{password}/{stream_id}.{ext}")
async def stream_series(username: str, password: str, stream_id: str, ext: str, request: Request):
    """Stream series content via Xtream format URL"""
    return await redirect_to_source(request, EntryKind.SERIES, username, password, stream_id)
