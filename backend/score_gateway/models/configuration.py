"""
backend/score_gateway/models/configuration.py

Purpose:
    Typed virtual provider configuration (target API URL + credential) with
    an explicit validation entry point, plus the advisory field metadata
    shown to virtual providers when they configure an offer.

Dependencies:
    - pydantic
    - score_gateway.errors
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from score_gateway.errors import InvalidProviderConfiguration

_HTTP_URL = TypeAdapter(HttpUrl)

# UI metadata only; nothing here is enforced at runtime.
AVAILABLE_CONFIGURATIONS: dict[str, dict[str, Any]] = {
    "apiBaseURL": {
        "example": "https://api.score-prediction.net",
        "format": "http(s)://<address>(port if needed)",
        "description": (
            "The API that will be used for the predictions. "
            "Must be compatible with Prediction API spec"
        ),
        "required": True,
    },
    "apiKey": {
        "example": "4vXK8xf3wTYJzVk18ADtoRkhblC79gvgZ0XhEFPc",
        "description": 'API key that will be included in the "Authorization" header',
        "required": True,
    },
}


class ProviderConfiguration(BaseModel):
    """Configuration a virtual provider declared for one of its offers."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    api_base_url: str = Field(alias="apiBaseURL")
    api_key: str = Field(alias="apiKey")

    @field_validator("api_base_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        # Keep the declared string verbatim; HttpUrl would append a trailing slash.
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError("apiBaseURL must be an http(s) URL") from exc
        return value


def validate_provider_configuration(raw: Mapping[str, Any]) -> ProviderConfiguration:
    """Return a fully valid configuration or raise InvalidProviderConfiguration."""
    if not isinstance(raw, Mapping):
        raise InvalidProviderConfiguration("Configuration of the Offer is not an object")
    try:
        return ProviderConfiguration.model_validate(dict(raw))
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()})
        raise InvalidProviderConfiguration(
            f"Configuration of the Offer is invalid: {', '.join(fields) or 'unknown'}"
        ) from exc
