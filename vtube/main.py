"""
Main FastAPI application
"""

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from vtube.core.config import settings
from vtube.core.error_handlers import register_error_handlers
from vtube.core.logging_config import setup_logging
from vtube.db.database import create_tables, engine
from vtube.api.routes import api_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info("Starting vTube backend", environment=settings.ENVIRONMENT)
    try:
        await create_tables()
        logger.info("vTube backend started successfully")
    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down vTube backend")
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title="vTube Backend API",
    description="Video sharing platform API: watch history, reactions, follows",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Parse CORS_ORIGINS environment variable
cors_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Register error handlers
register_error_handlers(app)

# Local media is served from disk; R2 objects carry their own public URLs
if settings.USE_R2_STORAGE.lower() != "true":
    app.mount(
        settings.MEDIA_BASE_URL,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads"
    )

# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "vTube Backend API",
        "version": "1.0.0",
        "docs": "/api/docs"
    }


@app.get("/health")
async def health_check():
    """Simple health check endpoint"""
    return {
        "status": "healthy",
        "service": "vtube-backend",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }
