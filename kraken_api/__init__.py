"""Client library for the Kraken exchange REST API."""

from kraken_api.exchange import (  # noqa: F401
    ApiError,
    ConfigurationError,
    KrakenClient,
    KrakenConfig,
    KrakenError,
    ValidationError,
)

__all__ = [
    "ApiError",
    "ConfigurationError",
    "KrakenClient",
    "KrakenConfig",
    "KrakenError",
    "ValidationError",
]
