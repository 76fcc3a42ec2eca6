#!/usr/bin/env python3
"""
Sources Package Initialization

This package contains the playlist ingestion components for the KPTV Catalog.
It exports the bounded fetcher, the source resolver, and the M3U parser.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the necessary imports
from .base import PlaylistFetcher
from .resolver import SourceResolver
from .m3u import M3UParser, classify_category, iter_lines

# now hold the modules
__all__ = ["PlaylistFetcher", "SourceResolver", "M3UParser", "classify_category", "iter_lines"]
