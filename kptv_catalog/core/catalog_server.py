#!/usr/bin/env python3
"""
Catalog Server Core Module

This module contains the main CatalogServer class that wires the catalog
application together. It owns the HTTP session and builds the resolver,
parser, cache, and query service once per process.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import time, logging, aiohttp
from typing import Callable, Optional
from kptv_catalog.models import AppConfig
from kptv_catalog.services import AccountDirectory, CatalogCache, QueryService
from kptv_catalog.sources import M3UParser, PlaylistFetcher, SourceResolver

# setup the logger
logger = logging.getLogger(__name__)

"""
Main application orchestrator class

Coordinates the account directory, playlist resolution, parsing, caching and
querying. Tests pass their own resolver so no network session is created.
"""
class CatalogServer:
    """Main application class"""
    
    """
    Initialize the CatalogServer
    Sets up the components that need no event loop.

    @param config: AppConfig Application configuration object
    @param resolver: SourceResolver Resolver to use instead of the HTTP one (default None)
    @param clock: Callable Cache clock (default time.monotonic)
    """
    def __init__(self, config: AppConfig, resolver: Optional[SourceResolver] = None,
                 clock: Callable[[], float] = time.monotonic):

        # hold our class options
        self.config = config
        self.session = None
        self.directory = AccountDirectory.from_config(config)
        self.parser = M3UParser.from_config(config.catalog)
        self.resolver = resolver
        self.clock = clock
        self.cache = None
        self.query = None
    
    """
    Initialize the application
    Creates the HTTP session when needed, then the cache and query service.

    @return None
    """
    async def initialize(self):

        # only build the http side when no resolver was handed in
        if self.resolver is None:

            # setup the client timeout, the fetcher applies its own total per request
            timeout = aiohttp.ClientTimeout(
                total=None,
                connect=30,
                sock_read=300
            )

            # setup out TCP connector and its option
            connector = aiohttp.TCPConnector(
                limit=100, 
                limit_per_host=20,
                keepalive_timeout=300,
                enable_cleanup_closed=True
            )

            # setup the session, fetcher and resolver
            self.session = aiohttp.ClientSession(timeout=timeout, connector=connector)
            fetcher = PlaylistFetcher.from_config(self.session, self.config.catalog)
            self.resolver = SourceResolver(fetcher, self.directory)
        
        # setup the cache and the query service
        self.cache = CatalogCache(self.resolver, self.parser, self.config.catalog.ttl, clock=self.clock)
        self.query = QueryService(self.cache)

        # log it
        logger.info(
            f"Catalog ready: {self.directory.account_count} accounts, "
            f"{self.directory.playlist_count} stored playlists, TTL {self.config.catalog.ttl:.0f}s"
        )
 
    """
    Cleanup resources
    Closes the HTTP session.

    @return None
    """
    async def cleanup(self):
        
        # if we have a session... close it
        if self.session:
            await self.session.close()
            self.session = None
