from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from practice_api import __version__
from practice_api.core.config import settings
from practice_api.db.base import init_db
from practice_api.db.session import engine
from practice_api.logging_utils import (
    _request_id_ctx_var,
    _resource_ctx_var,
    configure_logging,
)
from practice_api.routes import register_routes

configure_logging(settings.log_level.upper())

logger = logging.getLogger(__name__)

REQUEST_COUNTER = Counter(
    "practice_api_requests_total",
    "Total number of processed HTTP requests.",
    ["method", "path", "status", "resource"],
)
REQUEST_LATENCY = Histogram(
    "practice_api_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
)


def _resource_label(request: Request) -> str:
    return getattr(request.state, "resource", None) or "none"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Populate request context for logging."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request_id_token = _request_id_ctx_var.set(request_id)
        resource_token = _resource_ctx_var.set(None)

        try:
            response = await call_next(request)
        finally:
            _request_id_ctx_var.reset(request_id_token)
            _resource_ctx_var.reset(resource_token)

        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit structured access logs and feed metrics."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start_time = time.perf_counter()
        path = request.scope.get("root_path", "") + request.scope.get("path", request.url.path)
        method = request.method

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start_time
            resource = _resource_label(request)
            REQUEST_COUNTER.labels(
                method=method, path=path, status="500", resource=resource
            ).inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)
            logger.exception(
                "request failed",
                extra={
                    "method": method,
                    "path": path,
                    "resource": resource,
                    "duration_ms": round(elapsed * 1000, 2),
                },
            )
            raise

        elapsed = time.perf_counter() - start_time
        status_code = response.status_code
        resource = _resource_label(request)

        REQUEST_COUNTER.labels(
            method=method,
            path=path,
            status=str(status_code),
            resource=resource,
        ).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)

        logger.info(
            "request completed",
            extra={
                "method": method,
                "path": path,
                "status_code": status_code,
                "resource": resource,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )

        return response


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if settings.create_schema:
        init_db(engine)
        logger.info("database schema ensured")
    yield


app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

# Last added runs outermost: the request context must wrap the access log.
app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(RequestValidationError)
async def log_validation_error(request: Request, exc: RequestValidationError) -> Response:
    """Log rejected request bodies before answering with the standard 422."""

    logger.warning(
        "request validation failed",
        extra={
            "resource": _resource_label(request),
            "operation": request.method,
            "errors": exc.errors(),
        },
    )
    return await request_validation_exception_handler(request, exc)


@app.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint used by infrastructure probes."""

    return {"status": "ok"}


register_routes(app, settings.api_root)

if settings.docs_dir.is_dir():
    app.mount(
        "/apidocs",
        StaticFiles(directory=settings.docs_dir, html=True),
        name="apidocs",
    )
else:  # pragma: no cover - depends on deployment layout
    logger.warning(
        "api documentation directory missing", extra={"docs_dir": str(settings.docs_dir)}
    )
