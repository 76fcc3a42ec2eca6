#!/usr/bin/env python3
"""
Models Package Initialization

This package contains all data model definitions for the KPTV Catalog application.
It exports catalog, account, and configuration models.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .catalog import EntryKind, CatalogEntry, ParsedCatalog, CacheEntry
from .account import AccountRecord, StoredPlaylistDocument
from .config import CatalogConfig, AppConfig

# hold the necessary modules
__all__ = [
    "EntryKind",
    "CatalogEntry",
    "ParsedCatalog",
    "CacheEntry",
    "AccountRecord",
    "StoredPlaylistDocument",
    "CatalogConfig",
    "AppConfig",
]
