"""
URL to PDF Service - FastAPI Application.

A microservice that renders web pages to PDF using Playwright. Each request
gets its own headless Chromium session, bounded by a configurable limit.

Usage:
    Direct: url2pdf
    Uvicorn: uvicorn url2pdf.main:app --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .errors import RenderError, UrlValidationError
from .models import ErrorResponse, utc_timestamp
from .services.browser_pool import session_manager
from .api.v1.routers import pdf as pdf_router
from .api.v1.routers import system as system_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("url2pdf.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - start and stop the Playwright driver."""
    # Startup
    logger.info(f"Starting URL to PDF Service on port {settings.port}")
    await session_manager.start()
    yield
    # Shutdown
    logger.info("Shutting down URL to PDF Service")
    await session_manager.shutdown()


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.debug,
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def _error(status_code: int, **fields) -> JSONResponse:
    body = ErrorResponse(**fields).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(UrlValidationError)
async def url_validation_error_handler(request: Request, exc: UrlValidationError) -> JSONResponse:
    """Missing or malformed target URL."""
    return _error(exc.status_code, error=exc.message, example=exc.example)


@app.exception_handler(RenderError)
async def render_error_handler(request: Request, exc: RenderError) -> JSONResponse:
    """Render failures keep the engine's message; the session is already closed."""
    logger.warning(f"Error generating PDF: {exc.message}")
    return _error(
        exc.status_code,
        error="Failed to generate PDF",
        message=exc.message,
        timestamp=utc_timestamp(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body or unrecognized render options."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return _error(400, error="Invalid request", message=problems, timestamp=utc_timestamp())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, and unsupported methods on known ones, are 404s."""
    if exc.status_code in (404, 405):
        return _error(404, error="Endpoint not found")
    return _error(exc.status_code, error=str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all; the details stay in the log."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, error="Internal server error", timestamp=utc_timestamp())


# Include routers
app.include_router(system_router.router, prefix="")
app.include_router(pdf_router.router, prefix="")

# Versioned aliases
app.include_router(system_router.router, prefix="/api/v1")
app.include_router(pdf_router.router, prefix="/api/v1")


def run() -> None:
    """Run the service with uvicorn."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
