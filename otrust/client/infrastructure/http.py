"""
Infrastructure layer: HTTP transport to the OTRUST server.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from otrust.common.exceptions import ServerError, TransportError

logger = logging.getLogger(__name__)


def build_path(*segments: str) -> str:
    """Join path segments, percent-encoding everything but the template."""
    head, *rest = segments
    return "/".join([head.rstrip("/"), *(quote(str(s), safe="") for s in rest)])


class ApiTransport:
    """Sends requests and maps failures onto the client error taxonomy."""

    def __init__(self, server_url: str, timeout: float = 10):
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body."""
        url = f"{self.server_url}{path}"
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s params=%s", method, url, params)
        try:
            r = requests.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as err:
            msg = f"Request to {url} timed out"
            raise TransportError(msg) from err
        except requests.RequestException as err:
            msg = f"Could not connect to server at {self.server_url}"
            raise TransportError(msg) from err

        if not 200 <= r.status_code < 300:  # noqa: PLR2004
            body = self._decode(r)
            logger.debug("%s %s failed with %s", method, url, r.status_code)
            raise ServerError(r.status_code, body, getattr(r, "reason", "") or "")

        try:
            return r.json()
        except ValueError as err:
            msg = f"Invalid JSON in response from {url}"
            raise TransportError(msg) from err

    @staticmethod
    def _decode(r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError:
            return getattr(r, "text", None)
