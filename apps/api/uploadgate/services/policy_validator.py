from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

CONTENT_LENGTH_RANGE = "content-length-range"
CREDENTIAL_CONDITION = "x-amz-credential"

_MISSING = object()

# Far above any object size S3 accepts; larger values are treated as malformed.
MAX_SIZE_DIGITS = 18
_MAX_SIZE = 10**MAX_SIZE_DIGITS


@dataclass(frozen=True)
class PolicyConditions:
    """Last-seen values of the conditions this service cares about."""

    bucket: str | None = None
    has_size_range: bool = False
    max_size: int | None = None
    credential: str | None = None


def normalize_size(value: object) -> int | None:
    """Return an integral byte count, or None when *value* is not one.

    Policies serialise sizes as text or numbers, so ``"100"``, ``100`` and
    ``"100.0"`` all normalise to ``100``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if abs(value) <= _MAX_SIZE else None
    if isinstance(value, float):
        if not value.is_integer() or abs(value) > _MAX_SIZE:
            return None
        return int(value)
    if not isinstance(value, str):
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return None
    # Check magnitude first: int(Decimal("1e1000000")) is very slow.
    if not parsed.is_finite() or parsed.adjusted() > MAX_SIZE_DIGITS:
        return None
    if parsed != parsed.to_integral_value():
        return None
    return int(parsed)


def _size_range_max(condition: object) -> object:
    if isinstance(condition, list):
        if len(condition) == 3 and condition[0] == CONTENT_LENGTH_RANGE:
            return condition[2]
        return _MISSING
    if isinstance(condition, dict) and CONTENT_LENGTH_RANGE in condition:
        bounds = condition[CONTENT_LENGTH_RANGE]
        if isinstance(bounds, list) and len(bounds) == 2:
            return bounds[1]
        return None
    return _MISSING


def collect_policy_conditions(conditions: list) -> PolicyConditions:
    bucket: str | None = None
    has_size_range = False
    max_size: int | None = None
    credential: str | None = None

    for condition in conditions:
        if isinstance(condition, dict):
            if "bucket" in condition:
                value = condition["bucket"]
                bucket = value if isinstance(value, str) else None
            if CREDENTIAL_CONDITION in condition:
                value = condition[CREDENTIAL_CONDITION]
                credential = value if isinstance(value, str) else None

        raw_max = _size_range_max(condition)
        if raw_max is not _MISSING:
            has_size_range = True
            max_size = normalize_size(raw_max)

    return PolicyConditions(
        bucket=bucket,
        has_size_range=has_size_range,
        max_size=max_size,
        credential=credential,
    )


def validate_policy(
    conditions: PolicyConditions,
    *,
    expected_bucket: str,
    expected_max_size: int | None,
) -> bool:
    if conditions.bucket != expected_bucket:
        logger.info("Rejected policy: bucket %r does not match", conditions.bucket)
        return False

    if conditions.has_size_range and conditions.max_size is None:
        logger.info("Rejected policy: malformed %s condition", CONTENT_LENGTH_RANGE)
        return False

    if expected_max_size is None:
        return True

    if conditions.max_size != expected_max_size:
        logger.info(
            "Rejected policy: max size %r does not match configured limit %d",
            conditions.max_size,
            expected_max_size,
        )
        return False
    return True
