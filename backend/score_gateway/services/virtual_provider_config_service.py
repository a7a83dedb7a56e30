"""
backend/score_gateway/services/virtual_provider_config_service.py

Purpose:
    Resolve the configuration a virtual provider declared for an offer.
    The lookup itself is pluggable (`ConfigurationLookup`); the resolver only
    guarantees that callers get a fully validated `ProviderConfiguration` or
    a typed failure. Nothing is cached here.

Dependencies:
    - score_gateway.database
    - score_gateway.services.encryption
    - score_gateway.models.configuration
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from cryptography.fernet import InvalidToken

import score_gateway.database as _db
from score_gateway.errors import ConfigurationMissing, InvalidProviderConfiguration
from score_gateway.models.configuration import (
    ProviderConfiguration,
    validate_provider_configuration,
)
from score_gateway.services.encryption import (
    current_key_version,
    decrypt,
    encrypt,
    needs_reencryption,
    reencrypt,
)
from score_gateway.utils import utcnow

logger = logging.getLogger("score_gateway.virtual_provider_config")

COLLECTION = "virtual_provider_configs"


def _norm_address(address: str | None) -> str:
    return str(address or "").strip().lower()


class ConfigurationLookup(Protocol):
    """Key-value lookup of raw configuration keyed by offer identity."""

    async def get(self, offer_id: int, provider_address: str) -> Optional[Mapping[str, Any]]:
        ...


async def resolve_provider_configuration(
    lookup: ConfigurationLookup,
    offer_id: int,
    provider_address: str,
) -> ProviderConfiguration:
    raw = await lookup.get(offer_id, provider_address)
    if raw is None:
        logger.warning(
            "No configuration for offer %s of provider %s", offer_id, provider_address
        )
        raise ConfigurationMissing("Configuration of the Offer is not found")
    return validate_provider_configuration(raw)


class InMemoryConfigurationLookup:
    """Dict-backed lookup for local runs and wiring tests."""

    def __init__(self, configs: Mapping[tuple[int, str], Mapping[str, Any]] | None = None) -> None:
        self._configs: dict[tuple[int, str], dict[str, Any]] = {}
        for (offer_id, address), raw in (configs or {}).items():
            self.put(offer_id, address, raw)

    def put(self, offer_id: int, provider_address: str, raw: Mapping[str, Any]) -> None:
        self._configs[(int(offer_id), _norm_address(provider_address))] = dict(raw)

    async def get(self, offer_id: int, provider_address: str) -> Optional[Mapping[str, Any]]:
        raw = self._configs.get((int(offer_id), _norm_address(provider_address)))
        return dict(raw) if raw is not None else None


class MongoConfigurationLookup:
    """Configuration documents in MongoDB with the API key encrypted at rest."""

    async def get(self, offer_id: int, provider_address: str) -> Optional[Mapping[str, Any]]:
        query = {"offer_id": int(offer_id), "provider_address": _norm_address(provider_address)}
        doc = await _db.db[COLLECTION].find_one(
            query,
            {"api_base_url": 1, "api_key_enc": 1, "encryption_key_version": 1},
        )
        if not doc:
            return None

        try:
            stored_version = int(doc.get("encryption_key_version") or current_key_version())
            api_key = decrypt(str(doc.get("api_key_enc") or ""), key_version=stored_version)
        except (InvalidToken, ValueError) as exc:
            logger.error("Stored API key of offer %s cannot be decrypted: %s", offer_id, type(exc).__name__)
            raise InvalidProviderConfiguration("Configuration of the Offer cannot be decrypted") from exc
        if needs_reencryption(stored_version):
            ciphertext, version = reencrypt(str(doc["api_key_enc"]), stored_version)
            await _db.db[COLLECTION].update_one(
                query,
                {"$set": {"api_key_enc": ciphertext, "encryption_key_version": version}},
            )
            logger.info("Re-encrypted API key for offer %s (v%d -> v%d)", offer_id, stored_version, version)

        return {"apiBaseURL": doc.get("api_base_url"), "apiKey": api_key}

    async def set_configuration(
        self,
        offer_id: int,
        provider_address: str,
        raw: Mapping[str, Any],
        *,
        actor_id: str,
    ) -> dict[str, Any]:
        """Validate and upsert a configuration. Invalid input is never stored."""
        config = validate_provider_configuration(raw)
        address = _norm_address(provider_address)
        now = utcnow()
        version = current_key_version()
        await _db.db[COLLECTION].update_one(
            {"offer_id": int(offer_id), "provider_address": address},
            {
                "$set": {
                    "api_base_url": config.api_base_url,
                    "api_key_enc": encrypt(config.api_key, key_version=version),
                    "encryption_key_version": version,
                    "updated_at": now,
                    "updated_by": actor_id,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )
        logger.info("Stored configuration for offer %s of provider %s", offer_id, address)
        return {
            "offer_id": int(offer_id),
            "provider_address": address,
            "api_base_url": config.api_base_url,
            "updated_at": now,
        }

    async def clear_configuration(self, offer_id: int, provider_address: str) -> bool:
        result = await _db.db[COLLECTION].delete_one(
            {"offer_id": int(offer_id), "provider_address": _norm_address(provider_address)}
        )
        return bool(getattr(result, "deleted_count", 0))
