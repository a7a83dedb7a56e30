"""
backend/score_gateway/middleware/logging.py

Purpose:
    One JSON access line per pipe request, tagged with the pipe operation
    and the provider tag so failures can be traced back to an offer's
    virtual provider. The request id is echoed in `X-Request-ID` and made
    available to exception handlers.

Dependencies:
    - starlette
    - score_gateway.config
"""

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from score_gateway.config import settings

logger = logging.getLogger("score_gateway.access")

PIPE_PREFIX = "/api/pipe/"
_QUIET_PATHS = {"/health"}


def pipe_operation(path: str) -> str | None:
    """`/api/pipe/resources/details` -> `resources.details`; None outside the pipe."""
    if not path.startswith(PIPE_PREFIX):
        return None
    return path[len(PIPE_PREFIX):].strip("/").replace("/", ".") or None


class PipeRequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.time()

        response: Response = await call_next(request)

        duration_ms = round((time.time() - start) * 1000, 2)
        path = request.url.path
        log_data = {
            "request_id": request_id,
            "operation": pipe_operation(path),
            "provider": request.query_params.get("provider", "main") if path.startswith(PIPE_PREFIX) else None,
            "path": path,
            "status": response.status_code,
            "duration_ms": duration_ms,
        }

        if path in _QUIET_PATHS:
            level = logging.DEBUG
        elif response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, json.dumps(log_data))

        response.headers["X-Request-ID"] = request_id
        return response


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
