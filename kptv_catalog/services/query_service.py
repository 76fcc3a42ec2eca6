#!/usr/bin/env python3
"""
Catalog Query Service Module

This module answers the category and entry queries of the Xtream facade on top
of the catalog cache. When a catalog cannot be loaded it serves a small fixed
placeholder catalog instead, because legacy IPTV players cannot tell an empty
catalog from a broken session.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
from typing import List, Optional, Tuple
from kptv_catalog.exceptions import FetchError
from kptv_catalog.models import AccountRecord, CatalogEntry, EntryKind, ParsedCatalog
from kptv_catalog.services.catalog_cache import CatalogCache

# setup the logger
logger = logging.getLogger(__name__)

# fixed catalog served when no real one is available
PLACEHOLDER_CATALOG = ParsedCatalog(
    categories=("General", "News", "Sports", "Action", "Comedy", "Drama Series", "Comedy Series"),
    live=(
        CatalogEntry(1, "Channel 1", EntryKind.LIVE, 1, "General", "http://sample-stream.com/live/1.m3u8"),
        CatalogEntry(2, "Channel 2", EntryKind.LIVE, 2, "General", "http://sample-stream.com/live/2.m3u8"),
        CatalogEntry(3, "News Live", EntryKind.LIVE, 3, "News", "http://sample-stream.com/live/news.m3u8"),
        CatalogEntry(4, "Sports Channel", EntryKind.LIVE, 4, "Sports", "http://sample-stream.com/live/sports.m3u8"),
    ),
    movie=(
        CatalogEntry(1, "Sample Movie 1", EntryKind.MOVIE, 101, "Action", "http://sample-stream.com/movie/1.mp4"),
        CatalogEntry(2, "Sample Movie 2", EntryKind.MOVIE, 102, "Comedy", "http://sample-stream.com/movie/2.mp4"),
    ),
    series=(
        CatalogEntry(1, "Sample Series 1", EntryKind.SERIES, 201, "Drama Series", "http://sample-stream.com/series/201.mp4"),
        CatalogEntry(2, "Sample Series 2", EntryKind.SERIES, 202, "Comedy Series", "http://sample-stream.com/series/202.mp4"),
    ),
)

"""
Query layer over the catalog cache

Never raises FetchError to its callers.
"""
class QueryService:

    """
    Initialize the QueryService

    @param cache: CatalogCache Catalog cache
    @param placeholder: ParsedCatalog Catalog served when loading fails
    """
    def __init__(self, cache: CatalogCache, placeholder: ParsedCatalog = PLACEHOLDER_CATALOG):

        # setup the internals
        self.cache = cache
        self.placeholder = placeholder

    """
    Get the categories present among entries of a kind

    @param account: AccountRecord Requesting account
    @param kind: EntryKind Kind of entries
    @return list: Distinct category ids in first-seen order
    """
    async def categories(self, account: AccountRecord, kind: EntryKind) -> List[str]:

        # collect the distinct categories in order
        seen = {}
        for entry in await self._collection(account, kind):
            seen.setdefault(entry.category_id, None)
        return list(seen)

    """
    Get the entries of a kind, optionally limited to one category

    @param account: AccountRecord Requesting account
    @param kind: EntryKind Kind of entries
    @param category_id: str Exact category id to filter on (default: no filter)
    @return list: Matching entries in playlist order
    """
    async def entries(self, account: AccountRecord, kind: EntryKind,
                      category_id: Optional[str] = None) -> List[CatalogEntry]:

        # grab the collection
        entries = await self._collection(account, kind)

        # filter on exact category match when asked
        if category_id:
            return [e for e in entries if e.category_id == category_id]
        return list(entries)

    """
    Find a single entry of the real catalog by stream id
    The placeholder catalog is never searched.

    @param account: AccountRecord Requesting account
    @param kind: EntryKind Collection to search
    @param stream_id: int Stream identifier
    @return CatalogEntry: Matching entry or None
    """
    async def find_entry(self, account: AccountRecord, kind: EntryKind, stream_id: int) -> Optional[CatalogEntry]:

        # try the real catalog
        try:
            catalog = await self.cache.get_or_load(account)

        # whoops... nothing to redirect to
        except FetchError as e:
            logger.warning(f"Cannot look up {kind.value} stream {stream_id} for {account.username}: {e}")
            return None

        return catalog.find(kind, stream_id)

    """
    Get the collection of a kind, falling back to the placeholder

    @param account: AccountRecord Requesting account
    @param kind: EntryKind Kind of entries
    @return tuple: Real entries, or placeholder entries when unavailable or empty
    """
    async def _collection(self, account: AccountRecord, kind: EntryKind) -> Tuple[CatalogEntry, ...]:

        # try the real catalog
        try:
            catalog = await self.cache.get_or_load(account)

        # whoops... serve the placeholder
        except FetchError as e:
            logger.warning(f"Serving placeholder {kind.value} catalog to {account.username}: {e}")
            return self.placeholder.entries_for(kind)

        # an empty collection gets the placeholder too
        entries = catalog.entries_for(kind)
        if not entries:
            return self.placeholder.entries_for(kind)
        return entries
