from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Every numeric column is a 32-bit INTEGER
MAX_INTEGER = 2**31 - 1


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer for JSON bodies that do not map onto a single model:
    - fields: allowed keys, each coerced to an integer
    - required: keys that must be present
    - nullable: keys that may be sent as null
    """
    fields: set[str]
    required: set[str] = field(default_factory=set)
    nullable: set[str] = field(default_factory=set)


def _in_range(key: str, value: int) -> int:
    if abs(value) > MAX_INTEGER:
        raise ValidationError(f"{key} is out of range")
    return value


def coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return _in_range(key, value)
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            value = int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
        return _in_range(key, value)
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def validate_payload(*, payload: Any, policy: PayloadPolicy) -> dict:
    """
    Validates + normalizes an incoming JSON object against a PayloadPolicy.

    Rejects unknown keys, missing required keys and unexpected nulls.
    Integers outside the INTEGER column range are rejected too.
    Returns a cleaned dict holding only the provided keys, coerced.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    missing = sorted(f for f in policy.required if f not in payload)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    for k in payload.keys():
        if k not in policy.fields:
            raise ValidationError(f"Field not allowed: {k}")

    cleaned: dict = {}
    for k, raw in payload.items():
        if raw is None:
            if k not in policy.nullable:
                raise ValidationError(f"{k} cannot be null")
            cleaned[k] = None
            continue
        cleaned[k] = coerce_int(k, raw)

    return cleaned
