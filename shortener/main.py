"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS, rate limiting)
- Store lifecycle (built on startup, closed on shutdown)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortener.api import endpoints
from shortener.core.exceptions import StorageError
from shortener.core.rate_limit import limiter
from shortener.core.setting import settings
from shortener.core.store_manager import initialize_store, shutdown_store
from shortener.middleware.logging import add_logging_middleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="URL Shortener Service",
    description="Short codes with expiry and click counting",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Store failures raised outside an endpoint body (e.g., in dependencies)."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    return {
        "message": "URL Shortener Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Initialize the mapping store on startup."""
    await initialize_store(settings)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    await shutdown_store()
