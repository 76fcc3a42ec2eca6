#!/usr/bin/env python3
"""
Base Playlist Fetcher Module

This module performs the bounded HTTP retrieval of remote playlists. Every fetch
is limited by a total timeout and a maximum body size.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from kptv_catalog.exceptions import FetchFailed
from kptv_catalog.models import CatalogConfig

# setup the logger
logger = logging.getLogger(__name__)

# size of each body chunk read from the socket
CHUNK_SIZE = 64 * 1024

"""
Bounded fetcher for remote playlists

Reads the response body in chunks and aborts as soon as the size limit is passed.
"""
class PlaylistFetcher:

    """
    Initialize the PlaylistFetcher
    Sets up the HTTP session and the fetch bounds.

    @param session: aiohttp.ClientSession HTTP session for requests
    @param timeout: float Total request timeout in seconds
    @param max_bytes: int Maximum accepted body size in bytes
    """
    def __init__(self, session: aiohttp.ClientSession, timeout: float = 120, max_bytes: int = 500 * 1024 * 1024):

        # setup the internals
        self.session = session
        self.timeout = timeout
        self.max_bytes = max_bytes

    """
    Build a fetcher from the catalog configuration

    @param session: aiohttp.ClientSession HTTP session for requests
    @param config: CatalogConfig Catalog tunables
    @return PlaylistFetcher: Fetcher using the configured bounds
    """
    @classmethod
    def from_config(cls, session: aiohttp.ClientSession, config: CatalogConfig) -> "PlaylistFetcher":
        return cls(session, config.fetch_timeout, config.max_fetch_bytes)

    """
    Fetch a playlist body
    Downloads the URL within the configured bounds and decodes it to text.

    @param url: str Playlist URL
    @return str: Playlist text
    @throws FetchFailed: On network errors, timeouts, bad status, or size limit
    """
    async def fetch(self, url: str) -> str:

        # hold the body
        body = bytearray()

        # try the request
        try:

            # fire up the session to request the endpoint
            async with self.session.get(url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:

                # only a full or partial content response carries a playlist
                if resp.status not in (200, 206):
                    raise FetchFailed(url, f"HTTP {resp.status}")

                # refuse early when the server announces an oversized body
                if resp.content_length is not None and resp.content_length > self.max_bytes:
                    raise FetchFailed(url, f"Content-Length {resp.content_length} exceeds {self.max_bytes} bytes")

                # read it in chunks so the limit holds without a Content-Length
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > self.max_bytes:
                        raise FetchFailed(url, f"body exceeds {self.max_bytes} bytes")

                # hold the declared charset
                charset = resp.charset or "utf-8"

        # whoops... timed out
        except asyncio.TimeoutError as e:
            logger.warning(f"Timed out fetching playlist {url} after {self.timeout}s")
            raise FetchFailed(url, f"timed out after {self.timeout}s") from e

        # whoops... network or url error
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning(f"Failed to fetch playlist {url}: {e}")
            raise FetchFailed(url, e) from e

        # decode it, falling back to utf-8 for unknown charsets
        logger.info(f"Fetched {len(body)} bytes from {url}")
        try:
            return body.decode(charset, errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")
