"""
backend/score_gateway/services/challenge_normalizer.py

Purpose:
    Canonicalize fixture challenges before they are forwarded to a
    prediction API. Some downstream parsers reject sub-second precision, so
    every `kickoffTime` is rewritten to whole seconds in UTC with a `Z`
    suffix. Normalizing an already normalized payload is a no-op.

Dependencies:
    - score_gateway.utils.parse_utc
"""

from __future__ import annotations

import json
import re
from typing import Any

from score_gateway.errors import MalformedChallengePayload
from score_gateway.utils import parse_utc

KICKOFF_FIELD = "kickoffTime"

# Fraction digits between the seconds and the offset/end; any precision.
_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})[.,]\d+")


def normalize_kickoff_time(value: Any) -> str:
    """Truncate an ISO-8601 timestamp to whole seconds and render it in UTC."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedChallengePayload(f"Invalid {KICKOFF_FIELD}: {value!r}")
    try:
        kickoff = parse_utc(_FRACTION_RE.sub(r"\1", value.strip()))
    except (ValueError, OverflowError) as exc:
        raise MalformedChallengePayload(f"Invalid {KICKOFF_FIELD}: {value!r}") from exc
    return kickoff.replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def normalize_challenge_records(records: list[Any]) -> list[dict[str, Any]]:
    normalized: list[dict[str, Any]] = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            raise MalformedChallengePayload(f"Challenge #{idx} is not an object")
        if KICKOFF_FIELD not in record:
            raise MalformedChallengePayload(f"Challenge #{idx} has no {KICKOFF_FIELD}")
        normalized.append({**record, KICKOFF_FIELD: normalize_kickoff_time(record[KICKOFF_FIELD])})
    return normalized


def normalize_challenges(payload: str) -> str:
    """Parse a serialized challenge array, normalize kickoff times, re-serialize."""
    try:
        records = json.loads(payload)
    except (TypeError, ValueError) as exc:
        raise MalformedChallengePayload("Challenges are not valid JSON") from exc
    if not isinstance(records, list):
        raise MalformedChallengePayload("Challenges must be a JSON array")
    return json.dumps(normalize_challenge_records(records))
