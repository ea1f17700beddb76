"""
Application layer: ownership of the local key pair and session token.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from otrust.client.domain.entities import PublicKeyInfo
from otrust.client.infrastructure.persistence import ConfigFile
from otrust.common.crypto import CryptoUtils
from otrust.common.exceptions import MissingKeyPairError, ValidationError
from otrust.common.models import KeyPair, StoredConfig

if TYPE_CHECKING:
    from otrust.common.config import Config
    from otrust.common.interfaces import IConfigPersistence

logger = logging.getLogger(__name__)


class CredentialStore:
    """Loads, mutates and persists the key pair, token and server URL.

    Every mutating call writes the file before returning, so the in-memory
    ``config`` and the file on disk agree between calls.
    """

    def __init__(
        self,
        config: Config,
        persistence: IConfigPersistence | None = None,
    ):
        self.settings = config
        self.persistence: IConfigPersistence = persistence or ConfigFile(
            config.CONFIG_FILE_PATH, config.DEFAULT_SERVER_URL
        )
        self._config: StoredConfig | None = None

    @property
    def config(self) -> StoredConfig:
        if self._config is None:
            self._config = self.load()
        return self._config

    @property
    def key_pair(self) -> KeyPair:
        """The stored key pair; raises MissingKeyPairError if there is none."""
        if self.config.key_pair is None:
            raise MissingKeyPairError
        return self.config.key_pair

    @property
    def token(self) -> str | None:
        return self.config.token

    def load(self) -> StoredConfig:
        """Read persisted state, writing the defaults on first run."""
        first_run = not self.persistence.exists()
        config = self.persistence.load()
        if first_run:
            logger.info("No config found, creating %s", self.persistence.file_path)
            self.persistence.save(config)
        self._config = config
        return config

    def save(self, config: StoredConfig) -> None:
        self.persistence.save(config)
        self._config = config

    def _update(self, **changes: object) -> StoredConfig:
        # Persist first so a failed write leaves memory untouched
        updated = self.config.model_copy(update=changes)
        self.save(updated)
        return updated

    def generate(self, *, force: bool = False) -> PublicKeyInfo:
        """Create a key pair unless one exists and force is not set."""
        current = self.config.key_pair
        if current is not None and not force:
            logger.info("Key pair already exists")
            return PublicKeyInfo(
                public_key=CryptoUtils.strip_pem(current.public_key), created=False
            )

        logger.info("Generating RSA key pair...")
        public_pem, private_pem = CryptoUtils.generate_key_pair(
            self.settings.KEY_SIZE, self.settings.PUBLIC_EXPONENT
        )
        key_pair = KeyPair(public_key=public_pem, private_key=private_pem)
        self._update(key_pair=key_pair)
        logger.info("New key pair generated and saved")
        return PublicKeyInfo(public_key=CryptoUtils.strip_pem(public_pem), created=True)

    def import_key_pair(
        self, private_pem: str, public_pem: str | None = None
    ) -> PublicKeyInfo:
        """Store an existing key pair after checking both halves match."""
        if not private_pem or not private_pem.strip():
            msg = "Both public and private key are required"
            raise ValidationError(msg, "privateKey")
        try:
            derived_public = CryptoUtils.public_pem_from_private(private_pem)
        except (ValueError, TypeError) as err:
            msg = f"Invalid private key: {err}"
            raise ValidationError(msg, "privateKey") from err

        if public_pem is not None:
            probe = "otrust-key-check"
            try:
                matches = CryptoUtils.verify(
                    probe, CryptoUtils.sign(probe, private_pem), public_pem
                )
            except (ValueError, TypeError) as err:
                msg = f"Invalid public key: {err}"
                raise ValidationError(msg, "publicKey") from err
            if not matches:
                msg = "Public key does not match private key"
                raise ValidationError(msg, "publicKey")
        else:
            public_pem = derived_public

        self._update(key_pair=KeyPair(public_key=public_pem, private_key=private_pem))
        logger.info("Key pair imported")
        return PublicKeyInfo(public_key=CryptoUtils.strip_pem(public_pem), created=False)

    def set_session(self, token: str) -> None:
        self._update(token=token)

    def clear_session(self) -> None:
        self._update(token=None)

    def set_server(self, server_url: str) -> None:
        self._update(server=server_url)
