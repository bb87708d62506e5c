import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from shared_models import LogEventType, configure_logging, get_logger

from checkpointer import (
    CheckpointError,
    InvalidArgument,
    StoreUnavailable,
    is_retryable,
)
from config import settings
from database import init_db
from metrics import PrometheusMiddleware, get_content_type, get_metrics
from middleware import CorrelationIdMiddleware
from routers import checkpoints, threads

# Configure structured logging
configure_logging(
    service_name="rest_service",
    log_level=settings.LOG_LEVEL,
    json_format=settings.LOG_JSON_FORMAT,
)
logger = get_logger(__name__)

RETRY_AFTER_SECONDS = "1"


# Define a filter to exclude /health endpoint logs
class HealthCheckFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            if len(record.args) >= 3 and isinstance(record.args[2], str):
                return record.args[2] != "/health"
        except (IndexError, TypeError):
            pass
        return True


logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application lifespan events (startup/shutdown)."""
    logger.info(
        "Starting REST service",
        event_type=LogEventType.STARTUP,
        environment=settings.ENVIRONMENT,
    )
    await init_db()
    yield
    logger.info("Shutting down REST service", event_type=LogEventType.SHUTDOWN)


app = FastAPI(lifespan=lifespan, title="Chat Checkpoint Service API")

app.add_middleware(PrometheusMiddleware)
app.add_middleware(CorrelationIdMiddleware)


def _status_for(exc: CheckpointError) -> int:
    if isinstance(exc, InvalidArgument):
        return 400
    if isinstance(exc, StoreUnavailable):
        return 503
    return 500


@app.exception_handler(CheckpointError)
async def checkpoint_exception_handler(request: Request, exc: CheckpointError):
    status_code = _status_for(exc)
    logger.error(
        "Checkpoint store error",
        event_type=LogEventType.ERROR,
        error_type=type(exc).__name__,
        error=str(exc),
        path=str(request.url.path),
        status_code=status_code,
    )
    headers = {"Retry-After": RETRY_AFTER_SECONDS} if is_retryable(exc) else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 handler that logs the validation errors."""
    errors = exc.errors()
    logger.error(
        "Validation error",
        event_type=LogEventType.ERROR,
        errors=errors,
        path=str(request.url.path),
    )
    return JSONResponse(
        status_code=422,
        content={"detail": errors},
    )


app.include_router(threads.router, prefix="/api")
app.include_router(checkpoints.router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=get_content_type())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
