"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contudo.config import settings
from contudo.jobs.scheduler import register_jobs, scheduler
from contudo.routers import backup, preferences, scheduled, transactions
from contudo.services.common import LedgerStore
from contudo.services.ledger_service import LedgerService
from contudo.services.recurrence_service import RecurrenceService
from contudo.utils.errors import AppError, ValidationError
from contudo.utils.storage import build_storage
from contudo.utils.time import Clock, SystemClock

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def build_store(clock: Clock) -> LedgerStore:
    """Create the store from the configured data file."""
    store = LedgerStore(build_storage(settings.data_file))
    store.load()
    ledger = LedgerService(store, clock)
    ledger.refresh_overdue()
    if settings.seed_sample_data:
        ledger.seed_sample_data()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the startup due-check and manage the scheduler and final save."""
    store: LedgerStore = app.state.store
    clock: Clock = app.state.clock
    RecurrenceService(store, clock).run_due()
    if settings.enable_scheduler:
        register_jobs(store, clock)
        scheduler.start()
        logger.info("Scheduler started")
    yield
    if settings.enable_scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    store.persist()


def create_app(store: LedgerStore | None = None, clock: Clock | None = None) -> FastAPI:
    """Build the API around one ledger store."""
    clock = clock or SystemClock(settings.timezone)

    app = FastAPI(
        title=settings.app_name,
        description="Contudo - personal finance tracker API",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.clock = clock
    app.state.store = store if store is not None else build_store(clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_timing_middleware(request: Request, call_next):
        """Log each request with its processing time."""
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

        threshold_ms = settings.slow_request_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning(
                "Slow request %s %s %.1fms",
                request.method,
                request.url.path,
                elapsed_ms,
            )

        return response

    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
        """Convert domain exceptions into structured API responses."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        _: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Normalize FastAPI validation responses."""
        detail = exc.errors()
        message = detail[0].get("msg", "Dados inválidos") if detail else "Dados inválidos"
        api_error = ValidationError(message)
        return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unmatched routes and other framework HTTP errors."""
        if exc.status_code == 404:
            content = {"error": "Rota não encontrada", "code": "NOT_FOUND"}
        else:
            content = {"error": str(exc.detail), "code": "HTTP_ERROR"}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        """Catch unexpected errors without leaking internals."""
        logger.exception("Unhandled exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Erro interno do servidor", "code": "INTERNAL_ERROR"},
        )

    app.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    app.include_router(scheduled.router, prefix="/scheduled", tags=["scheduled"])
    app.include_router(preferences.router, prefix="/settings", tags=["settings"])
    app.include_router(backup.router, tags=["backup"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for deploys and uptime probes."""
        return {"status": "ok", "version": settings.app_version}

    return app


app = create_app()
