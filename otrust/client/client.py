"""
OTRUST client: one method per server operation.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from otrust.client.application.credential_store import CredentialStore
from otrust.client.application.request_builder import SignedRequestBuilder
from otrust.client.domain.entities import ClaimLookup, ConfigSummary, PublicKeyInfo
from otrust.client.infrastructure.http import ApiTransport, build_path
from otrust.common.config import Config, parse_log_level
from otrust.common.decorators import requires_key_pair, requires_session
from otrust.common.exceptions import (
    MissingKeyPairError,
    OtrustError,
    TransportError,
    ValidationError,
)
from otrust.common.logging_utils import setup_logger
from otrust.common.models import (
    ClaimData,
    ClaimListFilter,
    ProfileUpdate,
    ProofData,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from otrust.common.interfaces import ITransport

logger = logging.getLogger(__name__)


class OtrustClient:
    """Client for the OTRUST distributed truth service.

    Settings and credentials are injected; nothing is read from module
    level state. Server URL resolution order: explicit ``server_url``,
    then the stored config.
    """

    def __init__(
        self,
        config: Config | None = None,
        credentials: CredentialStore | None = None,
        transport: ITransport | None = None,
        server_url: str | None = None,
        log_level: int | str | None = None,
    ):
        self.settings = config or Config()
        self.credentials = credentials or CredentialStore(self.settings)
        self.builder = SignedRequestBuilder(self.credentials)
        self._server_override = server_url
        self._transport = transport

        self.logger = logging.getLogger("otrust")
        if log_level is not None:
            self.set_log_level(log_level)

    @property
    def server(self) -> str:
        return self._server_override or self.credentials.config.server

    @property
    def transport(self) -> ITransport:
        if self._transport is None:
            self._transport = ApiTransport(self.server, self.settings.REQUEST_TIMEOUT)
        return self._transport

    def set_log_level(self, level: int | str) -> None:
        setup_logger(self.logger, parse_log_level(level))

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.transport.request(
            "GET", path, params=params, token=self.credentials.token
        )

    def _send(self, method: str, path: str, body: dict[str, Any]) -> Any:
        return self.transport.request(
            method, path, json_body=body, token=self.credentials.token
        )

    # Configuration and credentials

    def get_config(self) -> ConfigSummary:
        config = self.credentials.config
        return ConfigSummary(
            server=self.server,
            has_key_pair=config.has_key_pair,
            is_logged_in=config.is_logged_in,
        )

    def set_config(self, server: str | None = None) -> ConfigSummary:
        if server:
            self.credentials.set_server(server)
            self._server_override = None
            self._transport = None
        return self.get_config()

    def init(self, *, force: bool = False) -> PublicKeyInfo:
        """Generate a key pair unless one already exists."""
        return self.credentials.generate(force=force)

    def load_key_pair(
        self, private_key: str, public_key: str | None = None
    ) -> PublicKeyInfo:
        return self.credentials.import_key_pair(private_key, public_key)

    # Authentication

    @requires_key_pair()
    def register(self) -> dict[str, Any]:
        """Register the stored public key and keep the returned token."""
        return self._authenticate("register", "/api/auth/register")

    @requires_key_pair()
    def login(self) -> dict[str, Any]:
        return self._authenticate("login", "/api/auth/login")

    def _authenticate(self, action: str, path: str) -> dict[str, Any]:
        signed = self.builder.signed_request(action)
        data = self.transport.request("POST", path, json_body=signed.body)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            msg = f"Server did not return a token for {action}"
            raise TransportError(msg)
        self.credentials.set_session(token)
        logger.info("%s succeeded", action.capitalize())
        return data

    def logout(self) -> bool:
        """Forget the session token. Returns False if there was none."""
        was_logged_in = self.credentials.config.is_logged_in
        self.credentials.clear_session()
        return was_logged_in

    @requires_session("You must be logged in to update your profile")
    def update_profile(
        self, display_name: str | None = None, email: str | None = None
    ) -> dict[str, Any]:
        if not display_name and not email:
            msg = "No updates provided. Use --name or --email to update profile"
            raise ValidationError(msg)
        profile = ProfileUpdate(display_name=display_name, email=email)
        return self._send("PUT", "/api/user/profile", profile.model_dump(by_alias=True))

    # Claims

    @requires_key_pair()
    def build_claim_payload(
        self, claim: ClaimData | dict[str, Any], timestamp: int | None = None
    ) -> str:
        """Canonical claim string, for signing outside this client."""
        data = claim if isinstance(claim, ClaimData) else ClaimData.model_validate(claim)
        return self.builder.build_payload("claim", data.model_dump(), timestamp)

    @requires_session("You must be logged in to create a claim", key_pair=True)
    def create_claim(self, claim: ClaimData | dict[str, Any]) -> dict[str, Any]:
        data = claim if isinstance(claim, ClaimData) else ClaimData.model_validate(claim)
        signed = self.builder.signed_request("claim", data.model_dump())
        return self._send("POST", "/api/claim", signed.body)

    @requires_session("You must be logged in to create a claim")
    def create_claim_with_signature(
        self, payload: str, signature: str
    ) -> dict[str, Any]:
        """Submit a claim whose canonical string was signed elsewhere."""
        try:
            body = json.loads(payload)
        except ValueError as err:
            msg = f"Claim payload is not valid JSON: {err}"
            raise ValidationError(msg, "payload") from err
        body["signature"] = signature
        return self._send("POST", "/api/claim", body)

    def get_claim(self, claim_id: str) -> dict[str, Any]:
        return self._get(build_path("/api/claim", claim_id))

    def get_claims(
        self, claim_ids: Iterable[str], max_workers: int | None = None
    ) -> list[ClaimLookup]:
        """Fetch several claims concurrently; failures stay per item."""
        ids = list(claim_ids)
        if not ids:
            return []
        transport = self.transport
        token = self.credentials.token

        def lookup(claim_id: str) -> ClaimLookup:
            try:
                data = transport.request(
                    "GET",
                    build_path("/api/claim", claim_id),
                    token=token,
                )
            except OtrustError as err:
                logger.debug("Lookup of %s failed: %s", claim_id, err)
                return ClaimLookup(claim_id=claim_id, error=err)
            return ClaimLookup(claim_id=claim_id, data=data)

        workers = max(1, min(max_workers or self.settings.MAX_WORKERS, len(ids)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lookup, ids))

    def list_claims(
        self, filters: ClaimListFilter | dict[str, Any] | None = None
    ) -> dict[str, Any]:
        if filters is None:
            filters = ClaimListFilter()
        elif isinstance(filters, dict):
            filters = ClaimListFilter.model_validate(filters)
        return self._get("/api/claims", filters.to_params())

    def search(self, query: str, limit: int = 10) -> dict[str, Any]:
        return self._get("/api/search", {"q": query, "limit": limit})

    def verify(self, claim_id: str) -> dict[str, Any]:
        """Ask the server to check a claim against its blockchain."""
        return self._get(build_path("/api/claim", claim_id, "verify"))

    def semantic_query(self, subject: str, predicate: str) -> dict[str, Any]:
        return self._get(build_path("/api/semantic", subject, predicate))

    # Proofs

    @requires_session("You must be logged in to add a proof", key_pair=True)
    def add_proof(self, proof: ProofData | dict[str, Any]) -> dict[str, Any]:
        data = proof if isinstance(proof, ProofData) else ProofData.model_validate(proof)
        signed = self.builder.signed_request("proof", data.model_dump(by_alias=True))
        return self._send("POST", "/api/proof", signed.body)

    # Users and statistics

    def get_user_info(self, public_key: str | None = None) -> dict[str, Any]:
        key = public_key
        if not key:
            key_pair = self.credentials.config.key_pair
            if key_pair is None:
                msg = "No public key provided and not logged in"
                raise MissingKeyPairError(msg)
            key = key_pair.public_key
        return self._get(build_path("/api/user", key))

    def get_blockchain_stats(self) -> dict[str, Any]:
        return self._get("/api/blockchain/stats")

    def get_system_stats(self) -> dict[str, Any]:
        return self._get("/api/stats")

    def get_health(self) -> dict[str, Any]:
        return self._get("/health")
