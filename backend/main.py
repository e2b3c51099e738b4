"""
Pack Allocation Service - FastAPI Application
==============================================
Allocation, reconciliation and scan-entry endpoints for the shipping
and receiving workflow.
"""
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from packalloc.core.config import get_settings
from packalloc.api.v1.router import api_router
from packalloc.middleware.exception_handler import (
    global_exception_handler, request_logging_middleware, value_error_handler,
)
from packalloc.schemas.common import HealthResponse
from packalloc.services.allocation_engine import get_allocation_engine

settings = get_settings()

# ============================================================================
# Logging Configuration
# ============================================================================
logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL, format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")
log_dir = os.path.dirname(settings.LOG_FILE)
if log_dir:
    os.makedirs(log_dir, exist_ok=True)
logger.add(
    settings.LOG_FILE,
    rotation="10 MB",
    retention="30 days",
    level=settings.LOG_LEVEL,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}",
)


# ============================================================================
# Application Lifespan
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Config errors surface here rather than on the first request
    engine = get_allocation_engine()
    logger.info(
        f"Allocation engine ready: {len(engine.default_locations)} locations, "
        f"{len(engine.config.pack_sequence)} pack slots, order={engine.distribution_order}"
    )

    logger.info(f"✅ {settings.APP_NAME} started on {settings.HOST}:{settings.PORT}")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}")


# ============================================================================
# Create FastAPI App
# ============================================================================
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Pack-based allocation of shipped purchase-order lines across locations",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# Store debug flag for exception handler
app.state.debug = settings.DEBUG

# ============================================================================
# Middleware
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(request_logging_middleware)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, global_exception_handler)

# ============================================================================
# Routes
# ============================================================================
app.include_router(api_router)


@app.get("/", tags=["Health"])
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check():
    engine = get_allocation_engine()
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        locations=len(engine.default_locations),
        pack_slots=len(engine.config.pack_sequence),
    )


# ============================================================================
# Entry Point
# ============================================================================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else 4,
    )
