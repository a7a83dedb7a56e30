"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap for import paths and gateway test fixtures.
"""

from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest

_THIS_FILE = Path(__file__).resolve()
_BACKEND_DIR = _THIS_FILE.parents[1]

if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))

from score_gateway.models.protocol import Agreement, DeploymentStatus, Resource  # noqa: E402

PROVIDER_ADDRESS = "0xGatewayProvider"
API_URL = "https://api.score-prediction.test/predict"
API_KEY = "test-api-key"


@pytest.fixture
def agreement() -> Agreement:
    return Agreement(id=11, offerId=3, userAddress="0xUser", providerAddress=PROVIDER_ADDRESS)


@pytest.fixture
def resource() -> Resource:
    return Resource(
        id=11,
        name="prediction-11",
        deploymentStatus=DeploymentStatus.RUNNING,
        details={"Predictions_Allowance_Count": 50, "Predictions_Count": 4},
    )


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays a responder."""

    def __init__(self, responder):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.responder(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def echo_responder(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=request.content, headers={"Content-Type": "application/json"})
