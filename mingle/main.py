"""
Mingle — FastAPI application entry point.

Configures the HTTP app, registers the API routers and wraps everything
in the Socket.IO ASGI app. Run with ``uvicorn mingle.main:app``.
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from mingle.api import matching, webhooks
from mingle.config import settings
from mingle.matching_engine.config import SWEEP_INTERVAL_SECONDS
from mingle.matching_engine.coordinator import match_coordinator
from mingle.matching_engine.timeout_handler import run_sweeper
from mingle.realtime.server import sio

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from mingle.database import engine

    sweeper = None
    if SWEEP_INTERVAL_SECONDS > 0:
        sweeper = asyncio.create_task(run_sweeper(match_coordinator, SWEEP_INTERVAL_SECONDS))

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    await engine.dispose()


fastapi_app = FastAPI(
    title=settings.APP_NAME,
    description="Real-time chat backend with interest-based random matching.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
fastapi_app.include_router(webhooks.router, prefix="/api/v1/webhooks", tags=["Webhooks"])
fastapi_app.include_router(matching.router, prefix="/api/v1/matching", tags=["Matching"])


@fastapi_app.get("/", response_class=PlainTextResponse)
async def root():
    return "Chat backend is running."


@fastapi_app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }


# Socket.IO on /socket.io, everything else falls through to FastAPI
app = socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
