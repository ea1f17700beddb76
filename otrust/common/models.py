"""
Pydantic models for persisted state and request payloads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KeyPair(BaseModel):
    public_key: str = Field(alias="publicKey", min_length=1)
    private_key: str = Field(alias="privateKey", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class StoredConfig(BaseModel):
    """Contents of the local config file."""

    server: str
    key_pair: KeyPair | None = Field(default=None, alias="keyPair")
    token: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def has_key_pair(self) -> bool:
        return self.key_pair is not None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token)

    def to_file_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Semantic(BaseModel):
    subject: str
    predicate: str
    object: str


class ClaimData(BaseModel):
    claim: str
    evidence: list[str]
    type: str
    semantic: Semantic
    parent_id: str | None = None


class ProofData(BaseModel):
    claim_id: str = Field(alias="claimId")
    action: str
    reason: str | None = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = ConfigDict(populate_by_name=True)


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, alias="displayName")
    email: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class ClaimListFilter(BaseModel):
    page: int = Field(default=1, gt=0)
    limit: int = Field(default=10, gt=0)
    type: str | None = None
    subject: str | None = None
    predicate: str | None = None
    object: str | None = None
    public_key: str | None = Field(default=None, alias="publicKey")
    verified: bool | None = None
    sort: str = "newest"

    model_config = ConfigDict(populate_by_name=True)

    def to_params(self) -> dict[str, Any]:
        """Query parameters with unset filters left out."""
        params = self.model_dump(by_alias=True, exclude_none=True)
        if "verified" in params:
            params["verified"] = "true" if params["verified"] else "false"
        return params
