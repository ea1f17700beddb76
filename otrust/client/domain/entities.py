"""Domain layer: values handed back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from otrust.common.exceptions import OtrustError


@dataclass(frozen=True)
class PublicKeyInfo:
    """Public half of the stored key pair, PEM armour stripped."""

    public_key: str
    created: bool


@dataclass(frozen=True)
class ConfigSummary:
    server: str
    has_key_pair: bool
    is_logged_in: bool


@dataclass(frozen=True)
class SignedPayload:
    """Canonical string, its signature and the HTTP body built from both."""

    canonical_json: str
    signature: str
    body: dict[str, Any] = field(default_factory=dict)


@dataclass
class ClaimLookup:
    """Outcome of one lookup in a batch; exactly one of data/error is set."""

    claim_id: str
    data: dict[str, Any] | None = None
    error: OtrustError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
