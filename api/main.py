#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for the CAT editor engine.

App creation, middleware, error mapping and router includes.

Usage:
    uvicorn api.main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pathlib import Path
import time
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from config.logging_config import get_logger
logger = get_logger(__name__)

from core.exceptions import (
    EngineError,
    ImportConflictError,
    SourceNotFoundError,
    StaleJobError,
    StorageQuotaError,
    ValidationError,
)
from api.editor_router import router as editor_router
from api.tm_router import router as tm_router

VERSION = "1.0.0"

# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="CAT Editor Engine API",
    description="Segmentation, translation memory and document reconstruction",
    version=VERSION,
)

# CORS middleware, origins from settings (env var) or dev defaults
from config.settings import settings as _settings
ALLOWED_ORIGINS = _settings.get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

app.add_middleware(SecurityHeadersMiddleware)

# =============================================================================
# Error Mapping
# =============================================================================

STATUS_CODES = [
    (ValidationError, 400),
    (SourceNotFoundError, 404),
    (ImportConflictError, 409),
    (StaleJobError, 409),
    (StorageQuotaError, 507),
]


def status_for(exc: EngineError) -> int:
    for exc_type, status in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status
    return 500


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status}): {exc.message}")
    return JSONResponse(
        status_code=status,
        content={"detail": exc.message, "title": exc.title},
    )

# =============================================================================
# Include Routers
# =============================================================================

app.include_router(editor_router)
app.include_router(tm_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": time.time()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
