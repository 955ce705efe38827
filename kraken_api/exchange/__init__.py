"""Kraken exchange access: HTTP client, request signing and error types."""

from kraken_api.exchange.errors import ApiError, ConfigurationError, KrakenError, ValidationError
from kraken_api.exchange.kraken_client import KrakenClient, KrakenConfig
from kraken_api.exchange.signing import Credentials, SignedRequest

__all__ = [
    "ApiError",
    "ConfigurationError",
    "Credentials",
    "KrakenClient",
    "KrakenConfig",
    "KrakenError",
    "SignedRequest",
    "ValidationError",
]
