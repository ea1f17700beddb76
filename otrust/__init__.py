# OTRUST distributed truth client

__version__ = "1.0.0"

from otrust.client.client import OtrustClient
from otrust.common.config import Config
from otrust.common.exceptions import (
    OtrustError,
    PersistenceError,
    PreconditionError,
    ServerError,
    TransportError,
)

__all__ = [
    "Config",
    "OtrustClient",
    "OtrustError",
    "PersistenceError",
    "PreconditionError",
    "ServerError",
    "TransportError",
    "__version__",
]
