#!/usr/bin/env python3
"""
Configuration Loader Module

This module handles loading and parsing of YAML configuration files
for the KPTV Catalog application. It converts raw YAML data into
structured configuration objects.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import yaml
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional
from kptv_catalog.models import AppConfig, CatalogConfig, AccountRecord, StoredPlaylistDocument

"""
Convert a YAML value into an aware datetime

PyYAML already turns ISO timestamps into datetime objects. Strings and plain
dates are accepted too, naive values are taken as UTC.

@param value: Any Raw YAML value
@return datetime: Aware datetime or None
"""
def _parse_datetime(value) -> Optional[datetime]:

    # nothing set
    if value is None or value == "":
        return None

    # normalize the possible types
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    # make sure it is aware
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

"""
Load and parse configuration from YAML file

Reads the specified YAML configuration file, validates its existence,
and converts the data into structured configuration objects for use
throughout the application.

@param config_path: str Path to the YAML configuration file
@return AppConfig: Fully populated application configuration object
@throws FileNotFoundError: When the specified config file or a playlist content_file does not exist
"""
def load_config(config_path: str) -> AppConfig:

    # load the config file
    config_file = Path(config_path)
    
    # make sure it actually exists
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    # now open it grab the data as yaml
    with open(config_file, 'r') as f:
        config_data = yaml.safe_load(f) or {}
    
    # setup the catalog tunables
    defaults = CatalogConfig()
    catalog_data = config_data.get('catalog', {}) or {}
    catalog = CatalogConfig(
        max_live=int(catalog_data.get('max_live', defaults.max_live)),
        max_movie=int(catalog_data.get('max_movie', defaults.max_movie)),
        max_series=int(catalog_data.get('max_series', defaults.max_series)),
        ttl=float(catalog_data.get('ttl', defaults.ttl)),
        fetch_timeout=float(catalog_data.get('fetch_timeout', defaults.fetch_timeout)),
        max_fetch_bytes=int(catalog_data.get('max_fetch_bytes', defaults.max_fetch_bytes))
    )

    # setup and hold the stored playlists
    playlists = []
    for playlist_data in config_data.get('playlists', []) or []:

        # inline content, or content read from a file next to the config
        content = playlist_data.get('content')
        content_file = playlist_data.get('content_file')
        if content is None and content_file:
            content_path = config_file.parent / content_file
            if not content_path.exists():
                raise FileNotFoundError(f"Playlist file not found: {content_path}")
            content = content_path.read_text(encoding='utf-8', errors='replace')

        playlists.append(StoredPlaylistDocument(
            id=str(playlist_data['id']),
            name=playlist_data.get('name', str(playlist_data['id'])),
            content=content,
            url=playlist_data.get('url')
        ))

    # setup and hold the accounts
    accounts = []
    for account_data in config_data.get('accounts', []) or []:
        playlist_id = account_data.get('playlist_id')
        accounts.append(AccountRecord(
            id=str(account_data.get('id', account_data['username'])),
            username=str(account_data['username']),
            password=str(account_data['password']),
            playlist_id=str(playlist_id) if playlist_id is not None else None,
            playlist_url=account_data.get('playlist_url'),
            is_active=bool(account_data.get('is_active', True)),
            expiry=_parse_datetime(account_data.get('expiry')),
            max_connections=int(account_data.get('max_connections', 1)),
            created_at=_parse_datetime(account_data.get('created_at'))
        ))
    
    # return the applications configuration with defaults if necessary
    return AppConfig(
        catalog=catalog,
        accounts=accounts,
        playlists=playlists,
        bind_host=config_data.get('bind_host', '0.0.0.0'),
        bind_port=config_data.get('bind_port', 8080),
        public_url=config_data.get('public_url', 'http://localhost:8080'),
        log_level=config_data.get('log_level', 'INFO')
    )
