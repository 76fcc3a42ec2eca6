#!/usr/bin/env python3
"""
Services Package Initialization

This package contains all service layer components for the KPTV Catalog application.
It exports the catalog cache, the query service, and the account directory.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .catalog_cache import CatalogCache, cache_key
from .query_service import QueryService, PLACEHOLDER_CATALOG
from .account_directory import AccountDirectory

# hold the necessary modules
__all__ = [
    "CatalogCache",
    "cache_key",
    "QueryService",
    "PLACEHOLDER_CATALOG",
    "AccountDirectory",
]
