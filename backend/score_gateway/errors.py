"""
backend/score_gateway/errors.py

Purpose:
    Typed failures surfaced to the leasing subsystem. Every request-path
    failure carries a pipe response code; transport errors from httpx are
    not wrapped and propagate as-is.

Dependencies:
    - score_gateway.models.protocol
"""

from __future__ import annotations

from typing import Any

from score_gateway.models.protocol import PipeResponseCode


class PipeError(Exception):
    """Failure with a protocol response code and a JSON-serializable body."""

    code: PipeResponseCode = PipeResponseCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: PipeResponseCode | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message
        self.body: dict[str, Any] = dict(body) if body else {"message": message}

    def to_payload(self) -> dict[str, Any]:
        return {"code": int(self.code), "body": self.body}


class ConfigurationMissing(PipeError):
    """No virtual provider configuration exists for the offer."""


class InvalidProviderConfiguration(PipeError):
    """Stored configuration does not satisfy the configuration schema."""


class InvalidOfferDetails(PipeError):
    """Offer details are not structured data."""


class MalformedChallengePayload(PipeError):
    """Challenge payload is not a JSON array of fixtures with kickoff times."""


class PredictionRequestFailed(PipeError):
    """Prediction API answered with a non-2xx status."""


class ResponseParseError(PipeError):
    """Prediction API answered 2xx with a body that is not a JSON array."""


class ProviderNotFound(PipeError):
    code = PipeResponseCode.NOT_FOUND
