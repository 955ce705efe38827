"""Shared error types raised by the Kraken client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class KrakenError(Exception):
    """Base class for every error raised by this package."""


@dataclass
class ApiError(KrakenError):
    """Raised when the exchange answers with an error instead of a result.

    Attributes
    ----------
    reason:
        Raw error description (stringified error list, or a fixed message for
        edge/CDN failures and unparsable bodies).
    errors:
        The `error` list from the response body, when one was returned.
    status_code:
        HTTP status of the response, when known.
    """

    reason: str
    errors: List[str] = field(default_factory=list)
    status_code: Optional[int] = None

    def __str__(self) -> str:
        return str(self.reason or "api error")


@dataclass
class ValidationError(KrakenError):
    """Raised before any network call when required parameters are missing."""

    missing: List[str]

    def __str__(self) -> str:
        return f"Required options, not given. Input must include {self.missing}"


@dataclass
class ConfigurationError(KrakenError):
    """Raised for missing or malformed credentials/settings."""

    reason: str

    def __str__(self) -> str:
        return str(self.reason)
