"""Crossing Times — FastAPI Application Entry Point.

Ingests crossing telemetry into a normalized relational schema.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crossings.database import init_db, test_connection
from crossings.api.ingest_routes import router as ingest_router
from crossings.api.reading_routes import router as reading_router
from crossings.core.logging import get_logger

logger = get_logger("main")

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("Crossing Times starting up...")
    logger.info(f"Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    if test_connection():
        try:
            init_db()
        except Exception as e:
            logger.error(f"Table creation failed: {e}")
    else:
        logger.error("Database NOT connected, endpoints will fail")
    yield
    logger.info("Crossing Times shut down")


app = FastAPI(
    title="Crossing Times",
    description="Fetch crossing travel-time telemetry and store it as normalized dimension and fact rows.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS for the read-only dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(ingest_router)
app.include_router(reading_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "crossings",
        "version": "1.0.0",
    }
