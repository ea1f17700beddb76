# Common utilities
from otrust.common.crypto import CryptoUtils as CryptoUtils
from otrust.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
