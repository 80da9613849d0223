"""
Collector Application
=====================
FastAPI application factory.

Usage:
    from credbazar_core.api import create_app

    app = create_app()  # reads CollectorConfig.from_env()
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import structlog

from .. import __version__
from ..config import CollectorConfig
from ..metrics import get_metrics_app
from ..services import CollectorServices, build_services
from .errors import register_error_handlers
from .middleware import setup_middleware
from .routes import router

logger = structlog.get_logger(__name__)


def create_app(
    config: Optional[CollectorConfig] = None,
    services: Optional[CollectorServices] = None,
) -> FastAPI:
    """
    Build the collector app.

    Args:
        config: Runtime configuration (defaults to the environment)
        services: Pre-wired services; built from ``config`` when omitted
    """
    if services is not None:
        config = services.config
    config = config or CollectorConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = app.state.services
        if config.enable_scheduler:
            svc.scheduler.start()
        logger.info(
            "collector_started",
            data_dir=str(config.data_dir),
            scheduler=config.enable_scheduler,
        )
        try:
            yield
        finally:
            await svc.close()
            logger.info("collector_stopped")

    app = FastAPI(
        title="CredBazar Form Collector",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services or build_services(config)

    register_error_handlers(app)
    setup_middleware(app, config)
    app.include_router(router)
    app.mount("/metrics", get_metrics_app())

    return app
