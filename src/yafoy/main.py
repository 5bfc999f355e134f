import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from yafoy.api.v1 import (
    auth,
    chat,
    favorites,
    notifications,
    orders,
    organizers,
    planner,
    products,
    voice,
    ws,
)
from yafoy.core.config import settings
from yafoy.core.database import check_database
from yafoy.core.redis import check_redis, close_redis
from yafoy.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from yafoy.middleware.rate_limit import RateLimitMiddleware
from yafoy.services.completion_client import close_completion_client
from yafoy.services.realtime import hub

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application...")
    Path(settings.STORAGE_ROOT).mkdir(parents=True, exist_ok=True)

    yield

    # Shutdown
    logger.info(f"Shutting down with {len(hub.get_active_topics())} active realtime topics")
    await close_completion_client()
    await close_redis()


app = FastAPI(
    title="YAFOY",
    version="1.0.0",
    description="Event equipment rental marketplace",
    lifespan=lifespan,
)

# Prometheus Metrics Middleware (must be first to capture all requests)
app.add_middleware(PrometheusMiddleware)

# Rate Limiting Middleware (must be before CORS)
app.add_middleware(RateLimitMiddleware)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/v1/products", tags=["products"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(favorites.router, prefix="/api/v1/favorites", tags=["favorites"])
app.include_router(chat.router, prefix="/api/v1/chat", tags=["chat"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["notifications"])
app.include_router(voice.router, prefix="/api/v1/voice", tags=["voice"])
app.include_router(planner.router, prefix="/api/v1/planner", tags=["planner"])
app.include_router(organizers.router, prefix="/api/v1/organizers", tags=["organizers"])

# WebSocket router (no prefix): /ws/rooms/{room_id}, /ws/notifications, /ws/orders/{order_id}
app.include_router(ws.router, tags=["websocket"])

# Uploaded objects
app.mount(
    "/storage",
    StaticFiles(directory=settings.STORAGE_ROOT, check_dir=False),
    name="storage",
)


@app.get("/health")
async def health_check():
    """Liveness: the process is serving requests."""
    return {"status": "healthy"}


@app.get("/health/ready")
async def readiness_check():
    """Readiness: PostgreSQL and Redis are reachable."""
    checks = {"database": await check_database(), "redis": await check_redis()}
    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "unavailable", "checks": checks},
    )


# Prometheus metrics endpoint
app.add_route("/metrics", metrics_endpoint)
