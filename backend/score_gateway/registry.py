"""
backend/score_gateway/registry.py

Purpose:
    Registered provider implementations keyed by provider tag. The gateway
    provider is the default ("main") and reads offer configurations from
    MongoDB.

Dependencies:
    - score_gateway.providers.gateway
    - score_gateway.services.virtual_provider_config_service
"""

from score_gateway.errors import ProviderNotFound
from score_gateway.providers.base import BaseProvider
from score_gateway.providers.gateway import GatewayProvider
from score_gateway.services.virtual_provider_config_service import MongoConfigurationLookup

DEFAULT_PROVIDER_TAG = "main"

providers: dict[str, BaseProvider] = {
    DEFAULT_PROVIDER_TAG: GatewayProvider(MongoConfigurationLookup()),
}


def get_provider(tag: str = DEFAULT_PROVIDER_TAG) -> BaseProvider:
    provider = providers.get(tag)
    if provider is None:
        raise ProviderNotFound(f"Provider '{tag}' is not registered")
    return provider
