from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from score_gateway.config import settings
from score_gateway.models.configuration import ProviderConfiguration
from score_gateway.models.protocol import Agreement, DetailedOffer, Resource
from score_gateway.models.resource import ScorePredictionResourceDetails
from score_gateway.services.virtual_provider_config_service import (
    ConfigurationLookup,
    resolve_provider_configuration,
)


class BaseProvider(ABC):
    """Abstract base class for providers driven by the leasing subsystem."""

    def __init__(self, config_lookup: ConfigurationLookup, address: Optional[str] = None):
        self.config_lookup = config_lookup
        self.address = address if address is not None else settings.PROVIDER_ADDRESS

    async def get_virtual_provider_configuration(
        self, offer_id: int, provider_address: str
    ) -> ProviderConfiguration:
        """Validated configuration of an offer; raises ConfigurationMissing if absent."""
        return await resolve_provider_configuration(self.config_lookup, offer_id, provider_address)

    @property
    def available_virtual_provider_configurations(self) -> Mapping[str, dict[str, Any]]:
        """Advisory metadata describing what a virtual provider can configure."""
        return {}

    @abstractmethod
    async def create(self, agreement: Agreement, offer: DetailedOffer) -> dict[str, Any]:
        """Create a resource for a new agreement and return its initial details."""
        ...

    @abstractmethod
    async def get_details(
        self, agreement: Agreement, offer: DetailedOffer, resource: Resource
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def delete(
        self, agreement: Agreement, offer: DetailedOffer, resource: Resource
    ) -> None:
        ...


class ScorePredictionServiceProvider(BaseProvider):
    """Providers that predict fixture results for leased prediction resources."""

    @abstractmethod
    async def create(
        self, agreement: Agreement, offer: DetailedOffer
    ) -> ScorePredictionResourceDetails:
        ...

    @abstractmethod
    async def predict_fixture_results(
        self, agreement: Agreement, resource: Resource, challenges: str
    ) -> dict[str, Any]:
        """Return {"predictions": <JSON string>, "responseCode": PipeResponseCode}.

        challenges is a JSON array of fixtures, each with at least a kickoffTime.
        """
        ...
