#!/usr/bin/env python3
"""
Catalog Data Models Module

This module defines the immutable catalog models produced by the playlist parser
and held by the catalog cache. Instances are shared between concurrent requests
without copying, so every model here is frozen.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

"""
Kind of a catalog entry

Mirrors the three stream types of the Xtream Codes protocol.
"""
class EntryKind(str, Enum):
    LIVE = "live"
    MOVIE = "movie"
    SERIES = "series"

"""
A single playable entry parsed from a playlist

The stream id is unique within one parsed catalog only. It is not stable
across re-parses of the same source.
"""
@dataclass(frozen=True)
class CatalogEntry:
    """A single playable entry parsed from a playlist"""
    num: int
    name: str
    kind: EntryKind
    stream_id: int
    category_id: str
    direct_source: str = ""
    stream_icon: str = ""
    epg_channel_id: str = ""

"""
Categorized result of one playlist parse

Holds the distinct categories observed and the live, movie and series
collections. Every entry lives in exactly one collection.
"""
@dataclass(frozen=True)
class ParsedCatalog:
    """Categorized result of one playlist parse"""
    categories: Tuple[str, ...] = ()
    live: Tuple[CatalogEntry, ...] = ()
    movie: Tuple[CatalogEntry, ...] = ()
    series: Tuple[CatalogEntry, ...] = ()

    """
    Get the collection holding entries of a kind

    @param kind: EntryKind Kind of entries to return
    @return tuple: Entries of the requested kind
    """
    def entries_for(self, kind: EntryKind) -> Tuple[CatalogEntry, ...]:

        # map the kind to its collection
        if kind == EntryKind.MOVIE:
            return self.movie
        if kind == EntryKind.SERIES:
            return self.series
        return self.live

    """
    Find an entry by its stream id

    @param kind: EntryKind Collection to search
    @param stream_id: int Stream identifier to look for
    @return CatalogEntry: Matching entry or None
    """
    def find(self, kind: EntryKind, stream_id: int) -> Optional[CatalogEntry]:

        # linear scan, collections are bounded by the configured ceilings
        for entry in self.entries_for(kind):
            if entry.stream_id == stream_id:
                return entry
        return None

    @property
    def total(self) -> int:
        return len(self.live) + len(self.movie) + len(self.series)

"""
A cached catalog with the moment it was stored

created_at is taken from the cache clock (monotonic seconds by default).
"""
@dataclass(frozen=True)
class CacheEntry:
    """A cached catalog with its creation timestamp"""
    key: str
    catalog: ParsedCatalog
    created_at: float = field(default=0.0)
