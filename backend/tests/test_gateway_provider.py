"""
backend/tests/test_gateway_provider.py

Purpose:
    Gateway provider lifecycle hooks and the full prediction path
    (configuration -> normalization -> outbound call -> response contract).
"""

import json

import httpx
import pytest

from conftest import API_KEY, API_URL, PROVIDER_ADDRESS, RecordingTransport, echo_responder
from score_gateway.errors import (
    ConfigurationMissing,
    InvalidOfferDetails,
    InvalidProviderConfiguration,
    MalformedChallengePayload,
    PipeError,
)
from score_gateway.models.protocol import DeploymentStatus, DetailedOffer, PipeResponseCode, Resource
from score_gateway.providers.gateway import GatewayProvider
from score_gateway.providers.http_client import PredictionClient
from score_gateway.services.virtual_provider_config_service import InMemoryConfigurationLookup


def _provider(transport: RecordingTransport, configured: bool = True, raw_config=None) -> GatewayProvider:
    lookup = InMemoryConfigurationLookup()
    if configured:
        lookup.put(3, PROVIDER_ADDRESS, raw_config or {"apiBaseURL": API_URL, "apiKey": API_KEY})
    return GatewayProvider(
        lookup,
        address=PROVIDER_ADDRESS,
        client=PredictionClient(client=transport.client()),
    )


@pytest.mark.asyncio
async def test_create_extracts_prediction_allowance(agreement):
    provider = _provider(RecordingTransport(echo_responder))
    offer = DetailedOffer(
        id=3, details={"params": {"Number of Predictions": {"value": 50, "unit": "count"}}}
    )

    details = await provider.create(agreement, offer)

    assert details.model_dump() == {
        "status": "Running",
        "Predictions_Allowance_Count": 50,
        "Predictions_Count": 0,
    }
    assert details.remaining_predictions == 50
    assert not details.allowance_exhausted


@pytest.mark.asyncio
@pytest.mark.parametrize("details", [{}, {"params": {}}, {"params": {"Number of Predictions": {"unit": "count"}}}])
async def test_create_defaults_allowance_to_zero(agreement, details):
    provider = _provider(RecordingTransport(echo_responder))

    created = await provider.create(agreement, DetailedOffer(id=3, details=details))

    assert created.Predictions_Allowance_Count == 0
    assert created.Predictions_Count == 0
    assert created.allowance_exhausted


@pytest.mark.asyncio
@pytest.mark.parametrize("details", ["opaque-cid", None])
async def test_create_rejects_unstructured_offer_details(agreement, details):
    provider = _provider(RecordingTransport(echo_responder))

    with pytest.raises(InvalidOfferDetails):
        await provider.create(agreement, DetailedOffer(id=3, details=details))


@pytest.mark.asyncio
async def test_get_details_merges_deployment_status(agreement, resource):
    provider = _provider(RecordingTransport(echo_responder))
    resource = Resource(
        id=resource.id,
        deploymentStatus=DeploymentStatus.CLOSED,
        details={**resource.details, "Extra_Field": "kept"},
    )

    details = await provider.get_details(agreement, DetailedOffer(id=3, details={}), resource)

    assert details.model_dump() == {
        "status": "Closed",
        "Predictions_Allowance_Count": 50,
        "Predictions_Count": 4,
        "Extra_Field": "kept",
    }
    assert details.remaining_predictions == 46


@pytest.mark.asyncio
async def test_delete_is_a_noop(agreement, resource):
    transport = RecordingTransport(echo_responder)
    provider = _provider(transport)

    assert await provider.delete(agreement, DetailedOffer(id=3, details={}), resource) is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_predict_normalizes_and_returns_echoed_predictions(agreement, resource):
    transport = RecordingTransport(echo_responder)
    provider = _provider(transport)
    challenges = json.dumps([{"kickoffTime": "2024-05-01T12:00:00.123Z", "home": "A", "away": "B"}])

    result = await provider.predict_fixture_results(agreement, resource, challenges)

    sent = json.loads(transport.requests[0].content)
    assert sent == [{"kickoffTime": "2024-05-01T12:00:00Z", "home": "A", "away": "B"}]
    assert transport.requests[0].headers["Authorization"] == f"Bearer {API_KEY}"
    assert str(transport.requests[0].url) == API_URL
    assert result["responseCode"] == PipeResponseCode.OK
    assert result["predictions"] == json.dumps(sent)


@pytest.mark.asyncio
async def test_predict_without_configuration_fails_before_network(agreement, resource):
    transport = RecordingTransport(echo_responder)
    provider = _provider(transport, configured=False)

    with pytest.raises(ConfigurationMissing) as exc_info:
        await provider.predict_fixture_results(agreement, resource, "[]")

    assert exc_info.value.code == PipeResponseCode.INTERNAL_SERVER_ERROR
    assert transport.requests == []


@pytest.mark.asyncio
async def test_predict_with_invalid_configuration_fails_before_network(agreement, resource):
    transport = RecordingTransport(echo_responder)
    provider = _provider(transport, raw_config={"apiBaseURL": "ftp://nope", "apiKey": API_KEY})

    with pytest.raises(InvalidProviderConfiguration):
        await provider.predict_fixture_results(agreement, resource, "[]")

    assert transport.requests == []


@pytest.mark.asyncio
async def test_predict_with_malformed_challenges_fails_before_network(agreement, resource):
    transport = RecordingTransport(echo_responder)
    provider = _provider(transport)

    with pytest.raises(MalformedChallengePayload):
        await provider.predict_fixture_results(agreement, resource, '[{"home": "A"}]')

    assert transport.requests == []


@pytest.mark.asyncio
async def test_predict_downstream_500_surfaces_generic_internal_error(agreement, resource):
    transport = RecordingTransport(lambda _req: httpx.Response(500, text="stack trace from upstream"))
    provider = _provider(transport)

    with pytest.raises(PipeError) as exc_info:
        await provider.predict_fixture_results(agreement, resource, "[]")

    assert exc_info.value.code == PipeResponseCode.INTERNAL_SERVER_ERROR
    assert "stack trace" not in json.dumps(exc_info.value.to_payload())
    assert len(transport.requests) == 1


def test_configuration_metadata_is_advisory():
    provider = _provider(RecordingTransport(echo_responder))
    metadata = provider.available_virtual_provider_configurations

    assert set(metadata) == {"apiBaseURL", "apiKey"}
    assert all(entry["required"] for entry in metadata.values())
    assert provider.virtual_provider_configuration_schema.model_fields.keys() == {"api_base_url", "api_key"}


@pytest.mark.asyncio
async def test_create_passes_negative_allowance_through(agreement):
    provider = _provider(RecordingTransport(echo_responder))
    offer = DetailedOffer(id=3, details={"params": {"Number of Predictions": {"value": -5, "unit": "count"}}})

    details = await provider.create(agreement, offer)

    assert details.Predictions_Allowance_Count == -5
    assert details.remaining_predictions == 0


@pytest.mark.asyncio
async def test_get_details_projects_stored_counters_verbatim(agreement):
    provider = _provider(RecordingTransport(echo_responder))
    resource = Resource(
        id=12,
        deploymentStatus=DeploymentStatus.RUNNING,
        details={"Predictions_Allowance_Count": -1, "Predictions_Count": "7"},
    )

    details = await provider.get_details(agreement, DetailedOffer(id=3, details={}), resource)

    assert details.status == "Running"
    assert details.Predictions_Allowance_Count == -1
    assert details.Predictions_Count == "7"
