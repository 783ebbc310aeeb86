"""
FastAPI application for the Mystira session engine
"""

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mystira.api.scenarios import router as scenarios_router
from mystira.api.sessions import router as sessions_router
from mystira.config import settings
from mystira.errors import (
    ConcurrencyError,
    InvalidStateError,
    MystiraError,
    NotFoundError,
    ValidationError,
)
from mystira.utils.logger import get_logger, normalize_level, setup_logging

log_level = normalize_level(settings.log_level)

setup_logging(
    level=log_level,
    log_file=settings.log_file,
    enable_colors=True,
    include_timestamp=True,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Mystira",
    description="Branching-narrative session engine for children's interactive fiction",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

logger.info("FastAPI application initialized")
logger.info(f"Log level: {log_level}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log all HTTP requests and responses with a correlation id"""
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    request.state.request_id = request_id

    logger.info(
        f"[API] Request started: {request.method} {request.url.path}",
        extra={
            "component": "API",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"[API] Request failed: {request.method} {request.url.path} -> ERROR ({duration_ms:.2f}ms): {str(e)}",
            extra={
                "component": "API",
                "request_id": request_id,
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"[API] Request completed: {request.method} {request.url.path} -> {response.status_code} ({duration_ms:.2f}ms)",
        extra={
            "component": "API",
            "request_id": request_id,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# Engine errors -> HTTP status codes
_ERROR_STATUS = [
    (NotFoundError, 404),
    (ValidationError, 400),
    (InvalidStateError, 400),
    (ConcurrencyError, 409),
]


@app.exception_handler(MystiraError)
async def handle_engine_error(request: Request, exc: MystiraError) -> JSONResponse:
    status_code = 500
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"Unhandled engine error: {exc}", exc_info=exc)
    else:
        logger.warning(f"{type(exc).__name__}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


app.include_router(scenarios_router, prefix="/scenarios", tags=["scenarios"])
app.include_router(sessions_router, prefix="/sessions", tags=["sessions"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Mystira",
        "version": "0.1.0",
        "status": "running",
        "log_level": log_level,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {settings.host}:{settings.port}")
    uvicorn.run(
        "mystira.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=log_level.lower(),
    )
