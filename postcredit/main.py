"""POSTCREDIT — FastAPI Application Entry Point.

Content-to-revenue attribution: credits inbound signals, meetings and
pipeline to the posts that drove them, and serves the per-post rollups.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from postcredit.database import init_db, test_connection
from postcredit.scheduler.jobs import start_scheduler, stop_scheduler
from postcredit.api.attribution_routes import router as attribution_router
from postcredit.core.logging import get_logger

logger = get_logger("main")

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 POSTCREDIT starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    db_ok = test_connection()
    if db_ok:
        try:
            init_db()
        except Exception as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected, endpoints will fail")
    if not IS_SERVERLESS:
        start_scheduler()
    yield
    if not IS_SERVERLESS:
        stop_scheduler()
    logger.info("POSTCREDIT shut down")


app = FastAPI(
    title="POSTCREDIT",
    description="Attribute meetings, pipeline and revenue to the content that drove them.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(attribution_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "postcredit",
        "version": "1.0.0",
    }
