"""Exam Session Engine - FastAPI Application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exam_engine import __version__
from exam_engine.config import settings
from exam_engine.db import async_session, init_db
from exam_engine.routers import exams_router, sessions_router
from exam_engine.services import (
    AsyncioClock,
    CatalogContentProvider,
    ExamRunner,
    SqlSessionStore,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Initializing database...")
    await init_db()
    logger.info("Database initialized.")

    app.state.runner = ExamRunner(
        provider=CatalogContentProvider(exams_dir=settings.exams_dir),
        store=SqlSessionStore(async_session),
        clock=AsyncioClock(interval=settings.tick_interval_seconds),
    )

    logger.info("Startup complete.")
    yield

    # Shutdown
    logger.info("Shutting down...")
    await app.state.runner.close()


app = FastAPI(
    title=settings.app_name,
    description="Timed multi-section exam sessions with scoring and analysis",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(exams_router)
app.include_router(sessions_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
