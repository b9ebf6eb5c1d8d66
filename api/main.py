"""
Dispatch Quoting API — FastAPI Backend
Delivery quotes and vehicle eligibility for the order-creation flow
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from routers import quotes
from services.vehicles import get_catalog

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup: fail fast on a broken pricing rules file
    fares = quotes.get_fare_table()
    logger.info(
        "%s starting (catalog=%s, base fare=%s %s)",
        settings.APP_NAME, get_catalog().version, fares.base_fare, fares.currency,
    )
    yield
    # Shutdown
    logger.info("%s shut down.", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Delivery quoting and vehicle-eligibility engine",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ───────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ────────────────────────────────────────────────
app.include_router(quotes.router, prefix="/api/quotes", tags=["Quotes"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}
