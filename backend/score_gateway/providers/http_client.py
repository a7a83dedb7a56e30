"""
backend/score_gateway/providers/http_client.py

Purpose:
    Single-shot outbound call to a prediction API. One authenticated POST,
    bounded by a fixed timeout from issuance; no retry, no backoff, no
    circuit breaking. The caller owns retry policy.

Dependencies:
    - httpx
    - score_gateway.config
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from score_gateway.config import settings
from score_gateway.errors import PredictionRequestFailed, ResponseParseError

logger = logging.getLogger("score_gateway.http_client")

_BODY_NOT_AVAILABLE = "[body not available]"


def _safe_url(url: str) -> str:
    """Strip query params (may contain API keys) for safe logging."""
    parsed = urlparse(str(url))
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


def _body_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.HTTPError, UnicodeDecodeError, LookupError):
        return _BODY_NOT_AVAILABLE


class PredictionClient:
    """httpx.AsyncClient wrapper for prediction API calls."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._timeout = float(timeout if timeout is not None else settings.PREDICTION_REQUEST_TIMEOUT_SECONDS)
        self._client = client or httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)

    @property
    def timeout(self) -> float:
        return self._timeout

    async def post_predictions(self, url: str, api_key: str, body: str) -> list[Any]:
        """POST a serialized challenge array and return the parsed prediction array."""
        try:
            # wait_for bounds the whole call; httpx timeouts are per phase.
            response = await asyncio.wait_for(
                self._client.post(
                    url,
                    content=body,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {api_key}",
                    },
                    timeout=self._timeout,
                    follow_redirects=True,
                ),
                timeout=self._timeout,
            )
        except (httpx.TransportError, asyncio.TimeoutError) as exc:
            logger.debug(
                "Fetch error cause for %s: %r", _safe_url(url), exc.__cause__ or exc
            )
            raise

        # httpx buffers non-streamed bodies, so logging and parsing share one read.
        if not response.is_success:
            logger.error(
                "API call to %s failed with status %d: %s",
                _safe_url(url), response.status_code, _body_text(response),
            )
            raise PredictionRequestFailed(
                "Prediction is failed",
                body={"predictions": "", "message": "Prediction is failed"},
            )

        logger.debug("Response got from %s: %s", _safe_url(url), _body_text(response))

        try:
            predictions = json.loads(response.content)
        except ValueError as exc:
            raise ResponseParseError("Prediction API returned a non-JSON body") from exc
        if not isinstance(predictions, list):
            raise ResponseParseError("Prediction API did not return a JSON array")
        return predictions

    async def aclose(self) -> None:
        await self._client.aclose()
