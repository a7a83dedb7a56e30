"""
backend/scripts/set_virtual_provider_config.py

Purpose:
    Maintenance tool that stores (or clears) the prediction API configuration
    of a virtual provider offer. The API key is encrypted before it is
    written; invalid configurations are rejected without touching the DB.

Usage:
    cd backend && python -m scripts.set_virtual_provider_config \
        --offer-id 3 --api-base-url https://api.example.net/predict --api-key <key>
    cd backend && python -m scripts.set_virtual_provider_config --offer-id 3 --clear
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Any

import score_gateway.database as _db
from score_gateway.config import settings
from score_gateway.errors import InvalidProviderConfiguration
from score_gateway.services.virtual_provider_config_service import MongoConfigurationLookup


async def _run(args: argparse.Namespace) -> int:
    address = args.provider_address or settings.PROVIDER_ADDRESS
    if not address:
        print({"ok": False, "reason": "provider_address_missing"})
        return 2

    lookup = MongoConfigurationLookup()
    await _db.connect_db()
    try:
        if args.clear:
            removed = await lookup.clear_configuration(args.offer_id, address)
            print({"ok": True, "mode": "clear", "offer_id": args.offer_id, "removed": removed})
            return 0

        raw: dict[str, Any] = {"apiBaseURL": args.api_base_url, "apiKey": args.api_key}
        try:
            stored = await lookup.set_configuration(args.offer_id, address, raw, actor_id=args.actor)
        except InvalidProviderConfiguration as exc:
            print({"ok": False, "reason": "invalid_configuration", "message": exc.message})
            return 2
        print({"ok": True, "mode": "set", **{k: str(v) for k, v in stored.items()}})
        return 0
    finally:
        await _db.close_db()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Store or clear a virtual provider offer configuration.")
    parser.add_argument("--offer-id", type=int, required=True)
    parser.add_argument("--provider-address", default="", help="Defaults to PROVIDER_ADDRESS.")
    parser.add_argument("--api-base-url", default="")
    parser.add_argument("--api-key", default="")
    parser.add_argument("--actor", default="cli")
    parser.add_argument("--clear", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(_parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
