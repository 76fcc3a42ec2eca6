#!/usr/bin/env python3
"""
API Routes Module

This module defines the service endpoints of the KPTV Catalog application.
It includes the API information root, status monitoring, and catalog refresh.

@package KPTV Catalog
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# imports
import logging
from fastapi import APIRouter, HTTPException, Request, Query
from fastapi.responses import RedirectResponse
from typing import Optional
from kptv_catalog import __version__
from kptv_catalog.exceptions import AccessDenied, FetchError
from kptv_catalog.services import cache_key

# setup the logger
logger = logging.getLogger(__name__)

# setup the api router
router = APIRouter()

"""
Get catalog server instance from application state

@param request: Request FastAPI request object
@return CatalogServer: Catalog server instance from app state, or None
"""
def get_server(request: Request):
    """Get catalog server instance from app state"""
    return getattr(request.app.state, "catalog", None)

"""
Root endpoint with API information or Xtream API redirect

If Xtream parameters are detected, redirect to player_api.php
Otherwise provide basic API information

@return dict or RedirectResponse: API info or redirect to Xtream endpoint
"""
@router.get("/")
async def root(
    request: Request,
    username: Optional[str] = Query(None),
    password: Optional[str] = Query(None),
    action: Optional[str] = Query(None)
):
    """Root endpoint with API information or Xtream redirect"""
    
    # Check if this is an Xtream API request
    if username is not None or password is not None or action is not None:
        redirect_url = f"/player_api.php?{request.url.query}"
        logger.info("Redirecting Xtream request from / to /player_api.php")
        return RedirectResponse(url=redirect_url)
    
    # Otherwise return API info
    return {
        "message": "KPTV Catalog - Xtream Codes compatible playlist catalog",
        "version": __version__,
        "endpoints": {
            "status": "/status",
            "refresh": "/catalog/refresh",
            "xtream_api": "/player_api.php"
        }
    }

"""
Get service status information

Returns the catalog cache statistics and the size of the account directory.

@param request: Request FastAPI request object
@return dict: Service status information
"""
@router.get("/status")
async def get_status(request: Request):
    """Get service status"""
    server = get_server(request)
    if not server or not server.cache:
        return {"status": "not_initialized"}
    
    return {
        "status": "running",
        "accounts": server.directory.account_count,
        "playlists": server.directory.playlist_count,
        "cache": server.cache.stats(),
        "limits": {
            "max_live": server.config.catalog.max_live,
            "max_movie": server.config.catalog.max_movie,
            "max_series": server.config.catalog.max_series
        }
    }

"""
Force a reload of the caller's catalog

Reloads the playlist behind the authenticated account even when the cached
catalog is still fresh. A failed reload keeps the cached catalog in place.

@param request: Request FastAPI request object
@param username: str Xtream API username
@param password: str Xtream API password
@return dict: Key and entry counts of the reloaded catalog
@throws HTTPException: 503 if not initialized, 401/403 on auth failure, 502 on fetch failure
"""
@router.post("/catalog/refresh")
async def refresh_catalog(
    request: Request,
    username: Optional[str] = Query(None),
    password: Optional[str] = Query(None)
):
    """Force a reload of the caller's catalog"""
    server = get_server(request)
    if not server or not server.cache:
        raise HTTPException(status_code=503, detail="Service not initialized")

    # Authentication check
    try:
        account = server.directory.authenticate(username, password)
    except AccessDenied as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    # reload it
    try:
        catalog = await server.cache.refresh(account)
    except FetchError as e:
        logger.warning(f"Refresh failed for {account.username}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "key": cache_key(account),
        "categories": len(catalog.categories),
        "live": len(catalog.live),
        "movie": len(catalog.movie),
        "series": len(catalog.series)
    }
