"""
backend/score_gateway/providers/gateway.py

Purpose:
    Gateway provider: forwards fixture predictions to the API that each
    virtual provider configured for its offer, and reports prediction
    allowance counters for created resources.

Dependencies:
    - score_gateway.providers.base
    - score_gateway.providers.http_client
    - score_gateway.services.challenge_normalizer
"""

import json
import logging
from typing import Any, Mapping, Optional

from score_gateway.errors import InvalidOfferDetails
from score_gateway.models.configuration import AVAILABLE_CONFIGURATIONS, ProviderConfiguration
from score_gateway.models.protocol import (
    NUMBER_OF_PREDICTIONS_PARAM,
    Agreement,
    DeploymentStatus,
    DetailedOffer,
    PipeResponseCode,
    Resource,
)
from score_gateway.models.resource import ScorePredictionResourceDetails
from score_gateway.providers.base import ScorePredictionServiceProvider
from score_gateway.providers.http_client import PredictionClient
from score_gateway.services.challenge_normalizer import normalize_challenges
from score_gateway.services.virtual_provider_config_service import ConfigurationLookup

logger = logging.getLogger("score_gateway.gateway")


def _allowance_from_offer(details: Mapping[str, Any]) -> int:
    params = details.get("params") or {}
    param = params.get(NUMBER_OF_PREDICTIONS_PARAM) if isinstance(params, Mapping) else None
    value = param.get("value") if isinstance(param, Mapping) else None
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class GatewayProvider(ScorePredictionServiceProvider):
    """Gateway for virtual providers registered on this provider."""

    def __init__(
        self,
        config_lookup: ConfigurationLookup,
        address: Optional[str] = None,
        client: Optional[PredictionClient] = None,
    ):
        super().__init__(config_lookup, address)
        self._client = client or PredictionClient()

    @property
    def available_virtual_provider_configurations(self) -> Mapping[str, dict[str, Any]]:
        return AVAILABLE_CONFIGURATIONS

    @property
    def virtual_provider_configuration_schema(self) -> type[ProviderConfiguration]:
        return ProviderConfiguration

    async def predict_fixture_results(
        self, agreement: Agreement, resource: Resource, challenges: str
    ) -> dict[str, Any]:
        configuration = await self.get_virtual_provider_configuration(
            agreement.offer_id, self.address
        )
        payload = normalize_challenges(challenges)

        logger.info(
            "Forwarding predictions for agreement %s resource %s", agreement.id, resource.id
        )
        predictions = await self._client.post_predictions(
            configuration.api_base_url, configuration.api_key, payload
        )
        return {
            "predictions": json.dumps(predictions),
            "responseCode": PipeResponseCode.OK,
        }

    async def create(
        self, agreement: Agreement, offer: DetailedOffer
    ) -> ScorePredictionResourceDetails:
        if not isinstance(offer.details, Mapping):
            raise InvalidOfferDetails("Invalid offer details")
        return ScorePredictionResourceDetails(
            status=DeploymentStatus.RUNNING,
            Predictions_Allowance_Count=_allowance_from_offer(offer.details),
            Predictions_Count=0,
        )

    async def get_details(
        self, agreement: Agreement, offer: DetailedOffer, resource: Resource
    ) -> ScorePredictionResourceDetails:
        # Projection of stored details; counters are not re-validated.
        return ScorePredictionResourceDetails.model_construct(
            **{**resource.details, "status": resource.deployment_status.value}
        )

    async def delete(
        self, agreement: Agreement, offer: DetailedOffer, resource: Resource
    ) -> None:
        # Teardown is owned by the leasing subsystem.
        return None

    async def aclose(self) -> None:
        await self._client.aclose()
