"""FastAPI application factory for the display hub."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hub import __version__
from hub.constants import STYLE_FILE
from hub.core.bus import MessageBus
from hub.core.dispatcher import Dispatcher
from hub.dependencies import get_dispatcher
from hub.plugins.registry import PluginRegistry
from hub.plugins.style import StyleRegistry
from hub.routers import assets_router, ws_router

logger = logging.getLogger(__name__)


def create_app(
    plugins_dir: Optional[Path] = None,
    style_file: Optional[Path] = None,
) -> FastAPI:
    """Build the hub application.

    Args:
        plugins_dir: Plugin store root; when omitted the process-wide
            services from ``hub.dependencies`` are used
        style_file: Stylesheet path; only used together with ``plugins_dir``

    Returns:
        FastAPI app with the dispatcher on ``app.state``
    """
    app = FastAPI(
        title="Display Hub",
        description="Keeps display clients in sync with plugins and a custom stylesheet",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if plugins_dir is not None:
        dispatcher = Dispatcher(
            plugins=PluginRegistry(plugins_dir),
            styles=StyleRegistry(style_file or STYLE_FILE),
            bus=MessageBus(),
        )
    else:
        dispatcher = get_dispatcher()

    app.state.dispatcher = dispatcher
    app.state.plugins = dispatcher.plugins
    app.state.styles = dispatcher.styles

    app.include_router(assets_router)
    app.include_router(ws_router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting Display Hub")
        logger.info(f"Plugin store: {dispatcher.plugins.plugins_dir}")
        logger.info(f"Stylesheet: {dispatcher.styles.style_file}")
        logger.info(f"Plugins available: {len(dispatcher.plugins.get_all())}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Display Hub")
        await dispatcher.bus.close_all()

    return app
