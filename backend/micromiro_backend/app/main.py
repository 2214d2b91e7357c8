"""FastAPI application factory for the MicroMiro backend."""

from __future__ import annotations

import logging
import time

import duckdb
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from micromiro_backend import __version__
from micromiro_backend.app.api.router import api_router
from micromiro_backend.app.core.config import MicroMiroSettings, get_settings
from micromiro_backend.app.core.errors import InternalError, MicroMiroError
from micromiro_backend.app.services.duckdb_utils import get_warehouse_pool
from micromiro_backend.app.services.schema import ensure_schema


def _configure_logging(settings: MicroMiroSettings) -> None:
    """Configure application logging destinations."""

    log_file = settings.data_dir.logs / "backend.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    error_logger = logging.getLogger("micromiro_backend.errors")

    @app.exception_handler(MicroMiroError)
    async def handle_domain_error(request: Request, exc: MicroMiroError) -> JSONResponse:
        if isinstance(exc, InternalError):
            error_logger.error("internal_error method=%s path=%s: %s", request.method, request.url.path, exc)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, _format_validation_error(exc))

    @app.exception_handler(duckdb.Error)
    async def handle_storage_error(request: Request, exc: duckdb.Error) -> JSONResponse:
        error_logger.error(
            "storage_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error_response(500, InternalError.default_message)


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()

    _configure_logging(settings)

    # Schema errors are fatal; the app cannot serve without its tables
    ensure_schema(get_warehouse_pool())

    app = FastAPI(
        title="MicroMiro API",
        version=__version__,
    )

    request_logger = logging.getLogger("micromiro_backend.http")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = None
        try:
            response = await call_next(request)
        except Exception:
            request_logger.exception("request_failed method=%s path=%s", request.method, request.url.path)
            raise
        finally:
            duration_ms = int((time.time() - start) * 1000)
            request_logger.info(
                "request method=%s path=%s status=%s duration_ms=%s",
                request.method,
                request.url.path,
                getattr(response, "status_code", "ERR"),
                duration_ms,
            )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )

    _register_exception_handlers(app)

    @app.get("/health", tags=["health"], summary="Health check")
    def health() -> dict[str, str]:
        """Return a simple status payload for readiness checks."""

        return {
            "status": "ok",
            "version": __version__,
        }

    app.include_router(api_router)

    return app
