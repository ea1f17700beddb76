from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import requests

from otrust.client.application.credential_store import CredentialStore
from otrust.common.config import Config
from otrust.common.crypto import CryptoUtils
from otrust.common.models import KeyPair


class MockResponse:
    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        text: str = "",
        reason: str = "OK",
    ):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.reason = reason

    def json(self) -> Any:
        if self._json is None:
            raise requests.JSONDecodeError("Expecting value", self.text, 0)
        return self._json


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every test at its own config directory."""
    directory = tmp_path / "otrust-home"
    monkeypatch.setenv("OTRUST_CONFIG_DIR", str(directory))
    for var in (
        "OTRUST_SERVER_URL",
        "OTRUST_LOG_LEVEL",
        "OTRUST_REQUEST_TIMEOUT",
        "OTRUST_MAX_WORKERS",
    ):
        monkeypatch.delenv(var, raising=False)
    return directory


@pytest.fixture(scope="session")
def rsa_keys() -> tuple[str, str]:
    """One RSA key pair (public_pem, private_pem) shared by the session."""
    return CryptoUtils.generate_key_pair()


@pytest.fixture
def config(config_dir: Path) -> Config:
    return Config()


@pytest.fixture
def store(config: Config) -> CredentialStore:
    return CredentialStore(config)


@pytest.fixture
def keyed_store(store: CredentialStore, rsa_keys: tuple[str, str]) -> CredentialStore:
    public_pem, private_pem = rsa_keys
    key_pair = KeyPair(public_key=public_pem, private_key=private_pem)
    store.save(store.config.model_copy(update={"key_pair": key_pair}))
    return store


@pytest.fixture
def logged_in_store(keyed_store: CredentialStore) -> CredentialStore:
    keyed_store.set_session("test-token")
    return keyed_store


@pytest.fixture
def mock_request():
    """Patch requests.request as used by the HTTP transport."""
    with patch("otrust.client.infrastructure.http.requests.request") as request:
        yield request


@pytest.fixture
def response_factory() -> type[MockResponse]:
    return MockResponse
