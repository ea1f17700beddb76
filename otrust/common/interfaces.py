"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from otrust.common.models import StoredConfig


class IConfigPersistence(Protocol):
    """Protocol for reading and writing the credential file."""

    file_path: Path

    def exists(self) -> bool: ...

    def load(self) -> StoredConfig: ...

    def save(self, config: StoredConfig) -> None: ...


class ITransport(Protocol):
    """Protocol for the HTTP layer used by the client facade."""

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any: ...
