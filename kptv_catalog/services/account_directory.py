#!/usr/bin/env python3
"""
Account Directory Module

This module holds the read-only view of end-user accounts and stored playlist
documents loaded at startup, and checks Xtream credentials against it.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import hmac, logging
from datetime import datetime
from typing import Dict, Iterable, Optional
from kptv_catalog.exceptions import AccessDenied
from kptv_catalog.models import AccountRecord, AppConfig, StoredPlaylistDocument

# setup the logger
logger = logging.getLogger(__name__)

"""
Read-only lookup of accounts and stored playlists

Doubles as the playlist store used by the source resolver.
"""
class AccountDirectory:

    """
    Initialize the AccountDirectory

    @param accounts: Iterable Account records
    @param playlists: Iterable Stored playlist documents
    """
    def __init__(self, accounts: Iterable[AccountRecord] = (), playlists: Iterable[StoredPlaylistDocument] = ()):

        # index them
        self._accounts: Dict[str, AccountRecord] = {a.username: a for a in accounts}
        self._playlists: Dict[str, StoredPlaylistDocument] = {p.id: p for p in playlists}

    """
    Build the directory from the application configuration

    @param config: AppConfig Application configuration
    @return AccountDirectory: Populated directory
    """
    @classmethod
    def from_config(cls, config: AppConfig) -> "AccountDirectory":
        return cls(config.accounts, config.playlists)

    def get_account(self, username: str) -> Optional[AccountRecord]:
        return self._accounts.get(username)

    def get_playlist(self, playlist_id: str) -> Optional[StoredPlaylistDocument]:
        return self._playlists.get(playlist_id)

    @property
    def account_count(self) -> int:
        return len(self._accounts)

    @property
    def playlist_count(self) -> int:
        return len(self._playlists)

    """
    Check Xtream credentials and account status

    @param username: str Xtream username
    @param password: str Xtream password
    @param now: datetime Moment used for the expiry check (default: now)
    @return AccountRecord: The authenticated account
    @throws AccessDenied: 401 for bad credentials, 403 for disabled or expired accounts
    """
    def authenticate(self, username: Optional[str], password: Optional[str],
                     now: Optional[datetime] = None) -> AccountRecord:

        # find the account
        account = self._accounts.get(username or "")
        if account is None or not hmac.compare_digest((password or "").encode(), account.password.encode()):
            raise AccessDenied(401, "Invalid credentials")

        # check the status
        if not account.is_active:
            logger.info(f"Rejected disabled account {account.username}")
            raise AccessDenied(403, "Account disabled")
        if account.is_expired(now):
            logger.info(f"Rejected expired account {account.username}")
            raise AccessDenied(403, "Subscription expired")

        return account
