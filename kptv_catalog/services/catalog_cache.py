#!/usr/bin/env python3
"""
Catalog Cache Module

This module keeps parsed catalogs in memory, keyed by playlist source, and makes
sure that at most one fetch and parse per key is in progress at a time. Requests
arriving while a load runs wait for that same load instead of starting their own.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, time, logging
from typing import Callable, Dict, Optional
from kptv_catalog.models import AccountRecord, CacheEntry, ParsedCatalog
from kptv_catalog.sources import M3UParser, SourceResolver

# setup the logger
logger = logging.getLogger(__name__)

"""
Derive the cache key for an account

Accounts assigned to the same stored playlist share one key, and with it one parse.

@param account: AccountRecord Account to key
@return str: Cache key
"""
def cache_key(account: AccountRecord) -> str:

    # stored playlist, then direct url, then the account itself
    if account.playlist_id:
        return f"playlist:{account.playlist_id}"
    if account.playlist_url:
        return f"url:{account.playlist_url}"
    return f"account:{account.id}"

"""
Single-flight TTL cache of parsed catalogs

Cache hits are served without any lock. Misses join the in-flight load for the
key or start a new one. A failed load writes nothing, so an existing entry stays
in place.
"""
class CatalogCache:

    """
    Initialize the CatalogCache

    @param resolver: SourceResolver Resolves playlist text for an account
    @param parser: M3UParser Parses playlist text into a catalog
    @param ttl: float Freshness window in seconds
    @param clock: Callable Returns the current time in seconds (default time.monotonic)
    """
    def __init__(self, resolver: SourceResolver, parser: M3UParser, ttl: float,
                 clock: Callable[[], float] = time.monotonic):

        # setup the internals
        self.resolver = resolver
        self.parser = parser
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, asyncio.Task] = {}

        # counters for the status endpoint
        self.hits = 0
        self.misses = 0
        self.loads = 0
        self.failures = 0

    """
    Check if a cache entry is still fresh

    @param entry: CacheEntry Entry to check
    @return bool: True while the entry is younger than the TTL
    """
    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at < self.ttl

    """
    Get the stored entry for a key, fresh or not

    @param key: str Cache key
    @return CacheEntry: Stored entry or None
    """
    def get_entry(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    """
    Get the catalog for an account, loading it on a miss

    @param account: AccountRecord Account whose catalog is requested
    @return ParsedCatalog: Cached or freshly parsed catalog
    @throws FetchError: When the playlist cannot be obtained
    """
    async def get_or_load(self, account: AccountRecord) -> ParsedCatalog:

        # hold the key and the current entry
        key = cache_key(account)
        entry = self._entries.get(key)

        # fresh hit, no I/O
        if entry is not None and self.is_fresh(entry):
            self.hits += 1
            logger.debug(f"Catalog cache HIT for {key}")
            return entry.catalog

        # miss or expired
        self.misses += 1
        logger.info(f"Catalog cache MISS for {key}")
        return await self._join_or_start(key, account)

    """
    Force a reload of the catalog for an account
    Joins the running load for the key when there is one. The current entry is
    only replaced when the reload succeeds.

    @param account: AccountRecord Account whose catalog is reloaded
    @return ParsedCatalog: Freshly parsed catalog
    @throws FetchError: When the playlist cannot be obtained
    """
    async def refresh(self, account: AccountRecord) -> ParsedCatalog:
        return await self._join_or_start(cache_key(account), account)

    """
    Get the cache statistics

    @return dict: Entry, in-flight and counter information
    """
    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "in_flight": len(self._in_flight),
            "hits": self.hits,
            "misses": self.misses,
            "loads": self.loads,
            "failures": self.failures,
            "ttl": self.ttl,
        }

    """
    Attach to the in-flight load for a key or start one
    There is no await between the lookup and the registration, so two callers
    on the event loop can never both start a load for the same key.

    @param key: str Cache key
    @param account: AccountRecord Account that triggered the load
    @return ParsedCatalog: Result of the shared load
    """
    async def _join_or_start(self, key: str, account: AccountRecord) -> ParsedCatalog:

        # see if someone is already loading this key
        task = self._in_flight.get(key)

        # nope, register ourselves as the load
        if task is None:
            task = asyncio.create_task(self._load(key, account))
            task.add_done_callback(self._load_done)
            self._in_flight[key] = task

        # yep, wait for it
        else:
            logger.info(f"Waiting for in-flight catalog load of {key}")

        # shielded so a caller giving up does not cancel the load for everyone else
        return await asyncio.shield(task)

    """
    Resolve, parse and store the catalog for a key

    @param key: str Cache key
    @param account: AccountRecord Account to resolve
    @return ParsedCatalog: Freshly parsed catalog
    """
    async def _load(self, key: str, account: AccountRecord) -> ParsedCatalog:

        # count it
        self.loads += 1

        # try to load it
        try:

            # fetch the text, then parse it off the event loop
            content = await self.resolver.resolve(account)
            logger.info(f"Parsing {len(content)} chars for {key}")
            catalog = await asyncio.to_thread(self.parser.parse, content)

            # store the new entry, replacing any stale one
            self._entries[key] = CacheEntry(key=key, catalog=catalog, created_at=self._clock())
            return catalog

        # whoops... count it and let every waiter see it
        except Exception as e:
            self.failures += 1
            logger.error(f"Catalog load failed for {key}: {e}")
            raise

        # release the in-flight marker either way
        finally:
            self._in_flight.pop(key, None)

    """
    Consume the outcome of a finished load
    Marks the exception as retrieved when every waiter has already given up.

    @param task: asyncio.Task Finished load task
    @return None
    """
    @staticmethod
    def _load_done(task: asyncio.Task):
        if not task.cancelled():
            task.exception()
