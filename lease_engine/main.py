# lease_engine/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError

from . import __version__
from .config import settings
from .db import Database
from .errors import ConflictError, LeasingError, StoreUnavailableError
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware
from .routers.applications import router as applications_router
from .routers.health import router as health_router

log = logging.getLogger(__name__)

API_PREFIX = "/api"


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


async def _leasing_error_handler(request: Request, exc: LeasingError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning("request failed: %s", exc.error_code, extra={"status_code": exc.status_code})
        return JSONResponse(status_code=exc.status_code, content=exc.as_dict(), headers={"Retry-After": "1"})
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


async def _operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    log.error("store error outside a unit of work", exc_info=exc)
    err = StoreUnavailableError()
    return JSONResponse(status_code=err.status_code, content=err.as_dict(), headers={"Retry-After": "1"})


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    err = ConflictError("Conflicting write; reload and retry")
    return JSONResponse(status_code=err.status_code, content=err.as_dict())


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API. Pass a Database to run against a specific store (tests);
    otherwise one is built from settings.
    """
    database = database or Database.from_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        if settings.db_auto_create:
            app.state.database.create_all()
        log.info("startup", extra={"event": "startup"})
        try:
            yield
        finally:
            app.state.database.dispose()

    app = FastAPI(
        title="Lease Engine",
        version=getattr(settings, "app_version", __version__),
        lifespan=lifespan,
    )
    app.state.database = database

    # Request-ID first (observability baseline)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LeasingError, _leasing_error_handler)
    app.add_exception_handler(OperationalError, _operational_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(applications_router, prefix=API_PREFIX)

    return app


app = create_app()
