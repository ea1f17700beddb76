"""
Infrastructure layer: reading and writing the credential file.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from otrust.common.exceptions import PersistenceError
from otrust.common.models import StoredConfig

logger = logging.getLogger(__name__)


class ConfigFile:
    """Handles loading and saving the JSON config file."""

    def __init__(self, file_path: Path, default_server: str):
        self.file_path = file_path
        self.default_server = default_server

    def exists(self) -> bool:
        return self.file_path.exists()

    def default(self) -> StoredConfig:
        return StoredConfig(server=self.default_server)

    def load(self) -> StoredConfig:
        """Load the config file; a missing file yields defaults."""
        try:
            with self.file_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return self.default()
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as err:
            msg = f"Could not read {self.file_path}: {err}"
            raise PersistenceError(msg) from err

        if not isinstance(data, dict):
            msg = f"Invalid config file format in {self.file_path}"
            raise PersistenceError(msg)

        # Keys missing from the file fall back to the defaults
        merged = {**self.default().to_file_dict(), **data}
        try:
            return StoredConfig.model_validate(merged)
        except PydanticValidationError as err:
            msg = f"Invalid config file format in {self.file_path}: {err}"
            raise PersistenceError(msg) from err

    def save(self, config: StoredConfig) -> None:
        """Write the config to a temp file and rename it over the target."""
        content = json.dumps(config.to_file_dict(), indent=2)
        tmp_name: str | None = None
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.file_path.parent, prefix=".config-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.file_path)
        except OSError as err:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            msg = f"Could not write {self.file_path}: {err}"
            raise PersistenceError(msg) from err
        logger.debug("Config saved to %s", self.file_path)
