"""FastAPI / Starlette integration — serve cache routes as HTTP middleware.

Requests whose path matches a cache route are answered directly; every
other request continues down the application's normal handler chain.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import Response

from bccache.routing.dispatcher import RouteDispatcher

logger = logging.getLogger(__name__)


def install_middleware(app: FastAPI, dispatcher: RouteDispatcher) -> None:
    """Register *dispatcher* as an HTTP middleware on *app*."""

    @app.middleware("http")
    async def bcc_routes(request: Request, call_next):
        if request.method not in ("GET", "HEAD"):
            return await call_next(request)
        routed = await dispatcher.dispatch(request.url.path)
        if routed is None:
            return await call_next(request)
        return Response(
            content=routed.body,
            status_code=routed.status_code,
            media_type=routed.media_type,
        )

    logger.info(
        "Installed cache routes: %s",
        ", ".join(kind.value for kind in dispatcher.active_routes) or "none",
    )
