#!/usr/bin/env python3
import logging
import argparse
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kptv_catalog import __version__
from kptv_catalog.config import load_config
from kptv_catalog.models import AppConfig
from kptv_catalog.core import CatalogServer
from kptv_catalog.sources import SourceResolver

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(config: AppConfig, resolver: Optional[SourceResolver] = None) -> tuple[FastAPI, CatalogServer]:
    """Create FastAPI app and catalog server instance"""
    server_instance = CatalogServer(config, resolver=resolver)
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await server_instance.initialize()
        yield
        await server_instance.cleanup()
    
    app = FastAPI(
        title="KPTV Catalog",
        description="Xtream Codes compatible catalog of M3U playlists with single-flight caching",
        version=__version__,
        lifespan=lifespan
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.state.catalog = server_instance
    
    from kptv_catalog.api import router, xtream_router
    app.include_router(router)
    app.include_router(xtream_router)
        
    return app, server_instance


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Xtream Codes compatible M3U catalog")
    parser.add_argument(
        "--config", 
        default="config.yaml", 
        help="Path to configuration file"
    )
    parser.add_argument("--host", help="Override bind host")
    parser.add_argument("--port", type=int, help="Override bind port")
    
    args = parser.parse_args()
    
    try:
        config = load_config(args.config)
        
        if args.host:
            config.bind_host = args.host
        if args.port:
            config.bind_port = args.port
        
        logging.getLogger().setLevel(getattr(logging, config.log_level.upper()))
        
        app, server = create_app(config)
        
        logger.info(f"Starting server on {config.bind_host}:{config.bind_port}")
        logger.info(
            f"Catalog limits: {config.catalog.max_live} live, {config.catalog.max_movie} movies, "
            f"{config.catalog.max_series} series, TTL {config.catalog.ttl:.0f}s"
        )
        uvicorn.run(
            app,
            host=config.bind_host,
            port=config.bind_port,
            log_level=config.log_level.lower()
        )
    
    except FileNotFoundError as e:
        logger.error(f"Configuration error: {e}")
    except Exception as e:
        logger.error(f"Failed to start: {e}")
        raise


if __name__ == "__main__":
    main()
