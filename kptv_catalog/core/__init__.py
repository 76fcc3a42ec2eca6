#!/usr/bin/env python3
"""
Core Package Initialization

This package contains the core components for the KPTV Catalog application.
It exports the main CatalogServer class for application use.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .catalog_server import CatalogServer

__all__ = ["CatalogServer"]
