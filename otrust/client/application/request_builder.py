"""
Application layer: canonical payloads and their signatures.

The server rebuilds the exact same string to verify a signature, so the
field selection, field order and number formatting below are part of the
wire contract.
"""

from __future__ import annotations

import json
import logging
import math
import time
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable

from otrust.client.domain.entities import SignedPayload
from otrust.common.crypto import CryptoUtils
from otrust.common.exceptions import MissingKeyPairError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from otrust.client.application.credential_store import CredentialStore

logger = logging.getLogger(__name__)

AUTH_ACTIONS = ("register", "login")

PAYLOAD_FIELDS: dict[str, tuple[str, ...]] = {
    "register": ("action", "publicKey", "timestamp"),
    "login": ("action", "publicKey", "timestamp"),
    "claim": (
        "claim",
        "evidence",
        "publicKey",
        "type",
        "parent_id",
        "timestamp",
        "semantic",
    ),
    "proof": ("claimId", "action", "publicKey", "timestamp", "reason", "confidence"),
}

SEMANTIC_FIELDS = ("subject", "predicate", "object")

JS_EXPONENT_MAX = 1e21

# Absent values are dropped from the string instead of serialized as null
OMIT_IF_MISSING: dict[str, frozenset[str]] = {
    "proof": frozenset({"reason"}),
}


def now_ms() -> int:
    return int(time.time() * 1000)


def _format_float(value: float) -> str:
    """Write a float the way JSON.stringify does."""
    if math.isnan(value) or math.isinf(value):
        msg = f"Out of range float values are not JSON compliant: {value!r}"
        raise ValueError(msg)
    if value.is_integer() and abs(value) < JS_EXPONENT_MAX:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    # JS only switches to exponent form below 1e-6 and from 1e21 up
    if -7 < power < 21:  # noqa: PLR2004
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def _encode(value: Any) -> str:
    if isinstance(value, dict):
        items = (f"{_encode(str(k))}:{_encode(v)}" for k, v in value.items())
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(v) for v in value) + "]"
    if isinstance(value, float):
        return _format_float(value)
    return json.dumps(value, ensure_ascii=False)


def canonical_json(obj: Mapping[str, Any]) -> str:
    """Compact JSON preserving insertion order, numbers written as in JS."""
    return _encode(dict(obj))


class SignedRequestBuilder:
    """Builds and signs request payloads with the stored key pair."""

    def __init__(
        self,
        credentials: CredentialStore,
        clock: Callable[[], int] = now_ms,
    ):
        self.credentials = credentials
        self.clock = clock

    def ordered_fields(
        self,
        action: str,
        fields: Mapping[str, Any],
        timestamp: int | None = None,
    ) -> dict[str, Any]:
        """Select and order the fields signed for an action kind."""
        try:
            schema = PAYLOAD_FIELDS[action]
        except KeyError as err:
            msg = f"Unknown payload action: {action}"
            raise ValueError(msg) from err

        key_pair = self.credentials.key_pair
        values: dict[str, Any] = dict(fields)
        values["publicKey"] = key_pair.public_key
        values["timestamp"] = self.clock() if timestamp is None else timestamp
        if action in AUTH_ACTIONS:
            values["action"] = action
        if action == "claim":
            values.setdefault("parent_id", None)
            semantic = values.get("semantic") or {}
            values["semantic"] = {k: semantic.get(k) for k in SEMANTIC_FIELDS}

        omit = OMIT_IF_MISSING.get(action, frozenset())
        payload: dict[str, Any] = {}
        for name in schema:
            if name in omit and values.get(name) is None:
                continue
            if name not in values:
                msg = f"Missing field '{name}' for {action} payload"
                raise ValueError(msg)
            payload[name] = values[name]
        return payload

    def build_payload(
        self,
        action: str,
        fields: Mapping[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> str:
        """Canonical string signed for ``action``."""
        return canonical_json(self.ordered_fields(action, fields or {}, timestamp))

    def sign(self, canonical: str, private_key: str | None = None) -> str:
        """Sign the canonical string with the given or the stored private key."""
        if private_key is None:
            if not self.credentials.config.has_key_pair:
                raise MissingKeyPairError
            private_key = self.credentials.key_pair.private_key
        return CryptoUtils.sign(canonical, private_key)

    @staticmethod
    def verify(canonical: str, signature: str, public_key: str) -> bool:
        return CryptoUtils.verify(canonical, signature, public_key)

    def signed_request(
        self,
        action: str,
        fields: Mapping[str, Any] | None = None,
        timestamp: int | None = None,
    ) -> SignedPayload:
        """Build, sign and assemble the HTTP body for ``action``."""
        payload = self.ordered_fields(action, fields or {}, timestamp)
        canonical = canonical_json(payload)
        signature = self.sign(canonical)
        logger.debug("Signed %s payload (%d bytes)", action, len(canonical))

        if action in AUTH_ACTIONS:
            body = {
                "publicKey": payload["publicKey"],
                "signature": signature,
                "timestamp": payload["timestamp"],
            }
        else:
            body = {**json.loads(canonical), "signature": signature}
        return SignedPayload(canonical_json=canonical, signature=signature, body=body)
