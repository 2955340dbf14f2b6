"""FastAPI application factory for the bridge control-plane.

Creates the app with all routers mounted and the HueBridge injected via
app.state. The description document is mounted at the bridge's configured
description path.
"""

import logging

from fastapi import FastAPI, Request, Response

from . import routes_bridge
from .routes_bridge import router as bridge_router
from .routes_lights import router as lights_router

logger = logging.getLogger("huesim.api")


def create_app(bridge) -> FastAPI:
    """Create the FastAPI application with all routes.

    Args:
        bridge: HueBridge instance (injected into app.state)
    """
    app = FastAPI(
        title="Hue Bridge Emulator",
        description="v1 bridge API subset for discovery and light control",
        version="1.0.0",
    )

    app.state.bridge = bridge

    app.add_api_route(
        bridge.identity.description_path,
        routes_bridge.get_description,
        methods=["GET"],
        response_class=Response,
        tags=["bridge"],
    )
    app.include_router(bridge_router)
    app.include_router(lights_router)

    if bridge.config.debug:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            client = request.client.host if request.client else "-"
            logger.debug("%s %s %s", client, request.method, request.url.path)
            return await call_next(request)

    logger.info(
        "FastAPI app created, description at %s", bridge.identity.description_path
    )
    return app
