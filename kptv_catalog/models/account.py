#!/usr/bin/env python3
"""
Account Data Models Module

This module defines the read-only records supplied by the account management
side of the system: end-user accounts and the stored playlist documents they
may be assigned to.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

"""
A stored playlist document

Either inline M3U content, a remote URL the content can be fetched from, or both.
"""
@dataclass(frozen=True)
class StoredPlaylistDocument:
    """A stored playlist document"""
    id: str
    name: str = ""
    content: Optional[str] = None
    url: Optional[str] = None

"""
An end-user account

The catalog core only reads the playlist reference fields. The credential and
status fields are used by the Xtream facade.
"""
@dataclass(frozen=True)
class AccountRecord:
    """An end-user account"""
    id: str
    username: str = ""
    password: str = ""
    playlist_id: Optional[str] = None
    playlist_url: Optional[str] = None
    is_active: bool = True
    expiry: Optional[datetime] = None
    max_connections: int = 1
    created_at: Optional[datetime] = None

    """
    Check if the account subscription has expired

    @param now: datetime Moment to compare against (default: current UTC time)
    @return bool: True when an expiry is set and lies in the past
    """
    def is_expired(self, now: Optional[datetime] = None) -> bool:

        # no expiry means it never expires
        if self.expiry is None:
            return False

        # compare against now
        now = now or datetime.now(timezone.utc)
        return self.expiry < now
