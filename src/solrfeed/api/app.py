"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from solrfeed import __version__
from solrfeed.adapters.base.adapter import SearchAdapter
from solrfeed.adapters.base.exceptions import AdapterError
from solrfeed.adapters.solr.adapter import SolrAdapter
from solrfeed.api.deps import set_service
from solrfeed.api.v1.router import router as v1_router
from solrfeed.config.settings import Settings
from solrfeed.core.service import FeedService
from solrfeed.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, adapter: SearchAdapter | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.
        adapter: Query executor to publish. If None, a ``SolrAdapter`` is
            built from ``settings.solr``.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # Auto-detect solrfeed-config.yaml if present
        yaml_path = Path("solrfeed-config.yaml")
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    setup_logging(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting solrfeed v%s", __version__)

        service = FeedService(settings, adapter or build_adapter(settings))
        try:
            await service.initialize()
        except AdapterError:
            # Keep serving the description; feed requests report 502 until Solr is back
            logger.warning("Search adapter failed to initialize", exc_info=True)

        set_service(service)
        app.state.settings = settings
        app.state.service = service

        logger.info("solrfeed is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down solrfeed...")
        await service.shutdown()
        set_service(None)
        logger.info("solrfeed shutdown complete")

    app = FastAPI(
        title="solrfeed",
        description=(
            "OpenSearch/Atom bridge that publishes Apache Solr search results "
            "to Salesforce Federated Search."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/v1")

    return app


def build_adapter(settings: Settings) -> SolrAdapter:
    """Build the Solr adapter described by ``settings.solr``."""
    solr = settings.solr
    return SolrAdapter(
        base_url=solr.base_url,
        collection=solr.collection,
        profile=settings.mapping,
        username=solr.username,
        password=solr.password,
        timeout=solr.timeout,
        query_fields=solr.query_fields,
        default_operator=solr.default_operator,
    )
