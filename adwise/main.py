# adwise/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from adwise.core.config import settings
from adwise.database import models
from adwise.database.database import engine
from adwise.routers import (
    ai_routes,
    auth_routes,
    billboard_routes,
    booking_routes,
    campaign_routes,
    dashboard_routes,
    health,
    payment_routes,
    traffic_routes,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# Lifespan events (startup/shutdown)
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Redis init (non-fatal)
    try:
        from adwise.core.redis import get_redis
        await get_redis()
    except RedisError as e:
        logger.warning(f"⚠ Redis connection failed (AI rate limiting disabled): {e}")

    from adwise.ai.config import AI_ENABLED, LLM_MODEL
    if AI_ENABLED:
        logger.info(f"✓ AI recommendations enabled (Model: {LLM_MODEL})")
    else:
        logger.info("ℹ️ AI recommendations disabled (AI_API_KEY not set)")

    yield

    # Close redis (non-fatal)
    try:
        from adwise.core.redis import close_redis
        await close_redis()
    except RedisError as e:
        logger.error(f"Error closing Redis: {e}")
    logger.info("✅ Graceful shutdown complete")


# Build FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend APIs for the AdWise billboard marketplace",
    version=settings.VERSION,
    lifespan=lifespan,
)

# Ensure DB models/tables exist
models.Base.metadata.create_all(bind=engine)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register routers under the /api prefix the frontend expects ---
for module in (
    auth_routes,
    billboard_routes,
    booking_routes,
    payment_routes,
    traffic_routes,
    ai_routes,
    campaign_routes,
    dashboard_routes,
    health,
):
    app.include_router(module.router, prefix="/api")


@app.get("/")
def root():
    return {"message": "🪧 AdWise API is running successfully!"}
