"""Precondition decorators for client operations.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from otrust.common.exceptions import MissingKeyPairError, NotLoggedInError

logger = logging.getLogger(__name__)


def requires_key_pair(
    error_message: str = 'No key pair configured. Run "otrust-cli init" first',
) -> Callable:
    """Decorator that fails fast when the client has no key pair.

    The decorated method must belong to an object exposing a
    ``credentials`` attribute with a ``config`` (StoredConfig).

    Args:
        error_message: Message carried by the raised MissingKeyPairError

    Returns:
        Decorated method that only executes when a key pair is stored
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            if not self.credentials.config.has_key_pair:
                logger.debug("%s refused: no key pair", func.__name__)
                raise MissingKeyPairError(error_message)
            return func(self, *args, **kwargs)

        return wrapper

    return decorator


def requires_session(
    error_message: str = "You must be logged in",
    *,
    key_pair: bool = False,
) -> Callable:
    """Decorator that fails fast when the client holds no session token.

    Args:
        error_message: Message carried by the raised NotLoggedInError
        key_pair: Also require a stored key pair

    Returns:
        Decorated method that only executes for a logged in client
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            config = self.credentials.config
            if not config.is_logged_in:
                logger.debug("%s refused: not logged in", func.__name__)
                raise NotLoggedInError(error_message)
            if key_pair and not config.has_key_pair:
                raise MissingKeyPairError
            return func(self, *args, **kwargs)

        return wrapper

    return decorator
