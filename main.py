import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import init_db
from app.core.logging_config import setup_logging
from app.api.error_handlers import register_error_handlers
from app.api.endpoints import health, job_seekers, jobs, skills

setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up Job Marketplace API...")
    init_db()
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down Job Marketplace API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Job marketplace API: skills catalog, job postings and job seeker profiles",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(skills.router, prefix=settings.API_V1_STR)
app.include_router(jobs.router, prefix=settings.API_V1_STR)
app.include_router(job_seekers.router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "message": "Job Marketplace API",
        "version": "1.0.0",
        "status": "healthy"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload during development
        log_level="info"
    )
