#!/usr/bin/env python3
"""
Playlist Source Resolver Module

This module decides where the playlist text for an account comes from: the
inline content of its stored playlist, the stored playlist's own URL, or the
account's direct URL. A failed fetch is reported, never retried against a
different source.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
from kptv_catalog.exceptions import NoSource
from kptv_catalog.models import AccountRecord
from kptv_catalog.sources.base import PlaylistFetcher

# setup the logger
logger = logging.getLogger(__name__)

"""
Resolves the playlist text of an account

The playlist store is any object exposing get_playlist(playlist_id) that returns
a StoredPlaylistDocument or None.
"""
class SourceResolver:

    """
    Initialize the SourceResolver

    @param fetcher: PlaylistFetcher Bounded HTTP fetcher
    @param playlists: object Stored playlist lookup
    """
    def __init__(self, fetcher: PlaylistFetcher, playlists):

        # setup the internals
        self.fetcher = fetcher
        self.playlists = playlists

    """
    Resolve the playlist text for an account
    The first configured source wins.

    @param account: AccountRecord Account to resolve
    @return str: Raw playlist text
    @throws NoSource: When the account has no playlist source at all
    @throws FetchFailed: When the identified remote source cannot be fetched
    """
    async def resolve(self, account: AccountRecord) -> str:

        # the assigned stored playlist comes first
        if account.playlist_id:
            playlist = self.playlists.get_playlist(account.playlist_id)

            # inline content is returned as is
            if playlist is not None and playlist.content:
                logger.info(f"Using stored content of playlist {playlist.id} ({len(playlist.content)} chars)")
                return playlist.content

            # then the stored playlist's own url
            if playlist is not None and playlist.url:
                logger.info(f"Fetching playlist {playlist.id} from {playlist.url}")
                return await self.fetcher.fetch(playlist.url)

            # a dangling reference falls through to the account url
            if playlist is None:
                logger.warning(f"Account {account.id} references unknown playlist {account.playlist_id}")

        # fall back to the account's own url
        if account.playlist_url:
            logger.info(f"Fetching playlist for account {account.id} from {account.playlist_url}")
            return await self.fetcher.fetch(account.playlist_url)

        # nothing configured
        raise NoSource(account.id)
