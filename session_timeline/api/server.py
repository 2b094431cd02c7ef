"""
Session Timeline - FastAPI Server

Serves day-grouped session timelines to UI clients. The embedding
application supplies the session source and delta fetcher.
"""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core import InMemoryDeltaStore, InMemorySessionSource, TimelineConfig, TimelineRegistry, load_snapshot
from .routes import timeline

logger = logging.getLogger(__name__)


def create_app(registry: TimelineRegistry) -> FastAPI:
    """Build the API app around a registry of project aggregators."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Close aggregators and watchers when the server stops."""
        yield
        registry.close()

    app = FastAPI(
        title="Session Timeline",
        description="Day-grouped session timelines built from recorded file deltas",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(timeline.router, prefix="/api/timeline", tags=["timeline"])

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {"status": "ok", "version": __version__}

    return app


def serve(
    registry: TimelineRegistry,
    host: str = "127.0.0.1",
    port: int = 9877,
    config: TimelineConfig | None = None,
) -> None:
    """Run the API with uvicorn."""
    config = config or registry.config
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting session timeline API on %s:%d", host, port)
    uvicorn.run(create_app(registry), host=host, port=port, log_level=config.log_level.lower())


def build_registry(sessions_path: str | None, config: TimelineConfig) -> TimelineRegistry:
    """Registry over a JSON session snapshot, or over an empty in-memory store."""
    if sessions_path is None:
        source, store = InMemorySessionSource(), InMemoryDeltaStore()
    else:
        source, store = load_snapshot(sessions_path)
        logger.info("Loaded %d project(s) from %s", len(source.list_projects()), sessions_path)
    return TimelineRegistry(source, store.list_deltas, config=config)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Session timeline API server",
        epilog=(
            "Without --sessions the server starts with an empty in-memory store and every "
            "project returns 404; embedders pass their own source and fetcher to serve()."
        ),
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=9877, help="Port to listen on")
    parser.add_argument("--sessions", metavar="PATH", help="JSON snapshot of projects, sessions and deltas to serve")
    args = parser.parse_args()

    config = TimelineConfig.from_env()
    serve(build_registry(args.sessions, config), host=args.host, port=args.port, config=config)


if __name__ == "__main__":
    main()
