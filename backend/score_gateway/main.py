"""
backend/score_gateway/main.py

Purpose:
    FastAPI application bootstrap: logging, middleware and router wiring,
    database lifecycle, and translation of typed pipe failures into the
    response contract seen by the leasing subsystem.

Dependencies:
    - score_gateway.database
    - score_gateway.registry
    - score_gateway.routers.pipe
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from score_gateway.config import settings
from score_gateway.database import close_db, connect_db
from score_gateway.errors import PipeError
from score_gateway.middleware.logging import PipeRequestLoggingMiddleware, setup_logging
from score_gateway.registry import providers
from score_gateway.routers import pipe

logger = logging.getLogger("score_gateway")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await connect_db()
    logger.info("Providers registered: %s", ", ".join(sorted(providers)))
    yield
    for provider in providers.values():
        aclose = getattr(provider, "aclose", None)
        if aclose is not None:
            await aclose()
    await close_db()


async def pipe_error_handler(request: Request, exc: PipeError):
    logger.warning(
        "[%s] %s on %s %s: %s",
        getattr(request.state, "request_id", "-"),
        type(exc).__name__, request.method, request.url.path, exc.message,
    )
    return JSONResponse(status_code=int(exc.code), content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        # Strip the "body" / "query" prefix for cleaner messages
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


async def db_unavailable_handler(request: Request, exc: Exception):
    logger.error("Database unavailable: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PipeError, pipe_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ServerSelectionTimeoutError, db_unavailable_handler)
    app.add_exception_handler(ConnectionFailure, db_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app() -> FastAPI:
    app = FastAPI(title="Score Prediction Gateway", lifespan=lifespan)
    app.add_middleware(PipeRequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.BACKEND_CORS_ORIGINS.split(",") if o.strip()],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(pipe.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
