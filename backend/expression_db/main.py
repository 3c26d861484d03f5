import logging

from fastapi import FastAPI

from expression_db.api import datasets, features, links
from expression_db.config import get_settings
from expression_db.core.error_handlers import register_exception_handlers, CorrelationIDMiddleware

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Gene/transcript expression database: FPKM links, cross-references and entropy",
    debug=settings.debug,
)

# Adds X-Request-ID header to every request/response
app.add_middleware(CorrelationIDMiddleware)

# Converts all exceptions to structured JSON responses
register_exception_handlers(app)

# Include API routers
app.include_router(datasets.router, prefix="/api", tags=["genomes & datasets"])
app.include_router(features.router, prefix="/api", tags=["features"])
app.include_router(links.router, prefix="/api", tags=["links"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/api/health",
    }
