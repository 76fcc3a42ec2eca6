#!/usr/bin/env python3
"""
Configuration Data Models Module

This module defines the configuration classes for the KPTV Catalog service.
All values are process-wide and set once at startup.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, field
from typing import List
from kptv_catalog.models.account import AccountRecord, StoredPlaylistDocument

"""
Catalog ingestion and cache tunables

Entry ceilings per kind, cache freshness window, and the bounds applied
to remote playlist fetches.
"""
@dataclass(frozen=True)
class CatalogConfig:
    """Catalog ingestion and cache tunables"""
    max_live: int = 5000
    max_movie: int = 2000
    max_series: int = 1000
    ttl: float = 24 * 60 * 60  # seconds
    fetch_timeout: float = 120  # seconds
    max_fetch_bytes: int = 500 * 1024 * 1024

"""
Main application configuration

Top-level configuration containing the catalog tunables, the account
directory contents, and global server settings.
"""
@dataclass
class AppConfig:
    """Main application configuration"""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    accounts: List[AccountRecord] = field(default_factory=list)
    playlists: List[StoredPlaylistDocument] = field(default_factory=list)
    bind_host: str = "0.0.0.0"
    bind_port: int = 8080
    public_url: str = "http://localhost:8080"
    log_level: str = "INFO"
