#!/usr/bin/env python3
"""
API Routes Package Initialization

This package contains all API route definitions for the KPTV Catalog application.
It exports the service router and the Xtream router for inclusion in the FastAPI application.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .routes import router
from .xtream_routes import router as xtream_router

# hold the necessary modules
__all__ = ["router", "xtream_router"]
