#!/usr/bin/env python3
"""
Catalog Exceptions Module

This module defines the errors raised while obtaining playlist text for an
account. Callers can tell "no source configured" apart from "source configured
but unreachable".

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""


class FetchError(Exception):
    """Base class for playlist retrieval failures."""


class NoSource(FetchError):
    """The account has neither a stored playlist nor a direct playlist URL."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"No playlist source configured for account {account_id}")


class FetchFailed(FetchError):
    """A playlist source was identified but could not be retrieved."""

    def __init__(self, url: str, cause):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch playlist from {url}: {cause}")


class AccessDenied(Exception):
    """Xtream credentials were rejected."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)
