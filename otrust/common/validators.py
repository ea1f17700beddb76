"""
Input validation shared by the CLI prompts and the library.

Each validator returns the normalized value or raises ValidationError.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from otrust.common.config import (
    CLAIM_MAX_LENGTH,
    CLAIM_MIN_LENGTH,
    CLAIM_TYPES,
    PROOF_ACTIONS,
    SORT_FIELDS,
)
from otrust.common.exceptions import ValidationError


def validate_non_empty(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        msg = f"{field.capitalize()} is required"
        raise ValidationError(msg, field)
    return str(value).strip()


def validate_claim_text(value: str | None) -> str:
    text = validate_non_empty(value, "claim")
    if not CLAIM_MIN_LENGTH <= len(text) <= CLAIM_MAX_LENGTH:
        msg = (
            f"Claim must be between {CLAIM_MIN_LENGTH} and "
            f"{CLAIM_MAX_LENGTH} characters"
        )
        raise ValidationError(msg, "claim")
    return text


def parse_evidence(value: str | Iterable[str] | None) -> list[str]:
    """Split comma separated evidence URLs; at least one is required."""
    if value is None:
        items: list[str] = []
    elif isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    urls = [item.strip() for item in items if item and item.strip()]
    if not urls:
        msg = "At least one evidence URL is required"
        raise ValidationError(msg, "evidence")
    return urls


def validate_choice(value: str | None, choices: Iterable[str], field: str) -> str:
    allowed = tuple(choices)
    if value not in allowed:
        msg = f"{field.capitalize()} must be one of: {', '.join(allowed)}"
        raise ValidationError(msg, field)
    return value


def validate_claim_type(value: str | None) -> str:
    return validate_choice(value, CLAIM_TYPES, "type")


def validate_proof_action(value: str | None) -> str:
    return validate_choice(value, PROOF_ACTIONS, "action")


def validate_sort(value: str | None) -> str:
    return validate_choice(value, SORT_FIELDS, "sort")


def validate_confidence(value: str | float | None) -> float:
    """Parse a confidence level and check it lies in [0, 1]."""
    try:
        confidence = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as err:
        msg = "Confidence must be between 0.0 and 1.0"
        raise ValidationError(msg, "confidence") from err
    if math.isnan(confidence) or not 0.0 <= confidence <= 1.0:
        msg = "Confidence must be between 0.0 and 1.0"
        raise ValidationError(msg, "confidence")
    return confidence


def validate_positive_int(value: str | int | None, field: str) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as err:
        msg = f"{field.capitalize()} must be a positive integer"
        raise ValidationError(msg, field) from err
    if number <= 0:
        msg = f"{field.capitalize()} must be a positive integer"
        raise ValidationError(msg, field)
    return number


def parse_bool(value: str | bool | None, field: str) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    msg = f"{field.capitalize()} must be true or false"
    raise ValidationError(msg, field)
