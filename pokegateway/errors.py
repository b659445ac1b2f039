"""
Error taxonomy shared by the gateway services.
"""
from enum import Enum


class ConfigurationError(ValueError):
    """Raised at startup when the backend registry is missing or invalid."""


class ErrorKind(str, Enum):
    """Classification of a failed backend call."""
    NETWORK = "network_error"
    UPSTREAM = "upstream_error"
