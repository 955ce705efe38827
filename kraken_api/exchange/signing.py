"""Request signing for Kraken private endpoints.

Every private call carries a nonce in its form body and two headers:

* ``API-Key``: the public API key.
* ``API-Sign``: ``base64(HMAC-SHA512(base64_decode(secret), path + SHA256(nonce + body)))``.

Apart from :class:`NonceGenerator`, which remembers the last nonce it issued,
the helpers below are pure functions of their inputs.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Collection, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

from kraken_api.exchange.errors import ConfigurationError

ParamValue = Union[str, List[str]]

NONCE_RANDOM_BITS = 16
# Clock ticks per second used for the timestamp half of the nonce.
NONCE_TIME_SCALE = 10000


@dataclass(frozen=True)
class Credentials:
    api_key: str
    api_secret: str

    def __repr__(self) -> str:
        return f"Credentials(api_key={self.api_key!r}, api_secret='***')"


@dataclass(frozen=True)
class SignedRequest:
    """Ephemeral artifact of one private call."""

    nonce: str
    body: str
    signature: str

    def headers(self, api_key: str) -> Dict[str, str]:
        return {
            "API-Key": api_key,
            "API-Sign": self.signature,
            "Content-Type": "application/x-www-form-urlencoded",
        }


def generate_nonce(
    clock: Callable[[], float] = time.time,
    rng: Callable[[int], int] = secrets.randbits,
) -> str:
    """Return a 64-bit nonce candidate as a decimal string.

    The high 48 bits come from the current timestamp and the low 16 bits are
    random. Two calls inside the same tick may come out in either order; use
    :class:`NonceGenerator` when strictly increasing values are required.
    """
    high_bits = int(clock() * NONCE_TIME_SCALE) << NONCE_RANDOM_BITS
    low_bits = rng(NONCE_RANDOM_BITS) & 0xFFFF
    return str(high_bits | low_bits)


class NonceGenerator:
    """Issue strictly increasing nonces, safe to share between threads.

    Each value is a :func:`generate_nonce` candidate, bumped to ``last + 1``
    when it would not exceed the previous nonce (same clock tick, or a clock
    that stepped backwards).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: Callable[[int], int] = secrets.randbits,
    ) -> None:
        self._clock = clock
        self._rng = rng
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        candidate = int(generate_nonce(self._clock, self._rng))
        with self._lock:
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
        return str(candidate)


_default_nonces = NonceGenerator()


def encode_params(params: Mapping[str, Any]) -> str:
    """Form-encode `params`; list values are encoded element-wise as repeated keys."""
    return urlencode(list(params.items()), doseq=True)


def decode_params(body: str, array_keys: Collection[str] = ()) -> Dict[str, ParamValue]:
    """Inverse of :func:`encode_params`.

    Keys named in `array_keys` always decode to lists (an absent key becomes an
    empty list, since form encoding drops empty arrays). Other keys decode to a
    string, or to a list when they repeat.
    """
    decoded: Dict[str, ParamValue] = {key: [] for key in array_keys}
    for key, value in parse_qsl(body, keep_blank_values=True):
        existing = decoded.get(key)
        if existing is None:
            decoded[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            decoded[key] = [existing, value]
    return decoded


def url_path(version: str, method: str) -> str:
    return f"/{version}/private/{method}"


def build_message(path: str, nonce: str, body: str) -> bytes:
    digest = hashlib.sha256((nonce + body).encode("utf-8")).digest()
    return path.encode("utf-8") + digest


def decode_secret(api_secret: Optional[str]) -> bytes:
    if not api_secret:
        raise ConfigurationError("Kraken API secret required for private endpoints.")
    try:
        return base64.b64decode(api_secret, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError(f"Kraken API secret is not valid base64: {exc}") from exc


def sign(api_secret: str, path: str, nonce: str, body: str) -> str:
    """Return the base64 ``API-Sign`` value for one request."""
    key = decode_secret(api_secret)
    message = build_message(path, nonce, body)
    return base64.b64encode(hmac.new(key, message, hashlib.sha512).digest()).decode("ascii")


def sign_request(
    credentials: Credentials,
    path: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    nonce: Optional[str] = None,
) -> SignedRequest:
    """Inject a nonce into a copy of `params`, encode it and sign the result."""
    if not credentials.api_key:
        raise ConfigurationError("Kraken API key required for private endpoints.")
    data: Dict[str, Any] = dict(params or {})
    data["nonce"] = nonce if nonce is not None else _default_nonces.next()
    body = encode_params(data)
    signature = sign(credentials.api_secret, path, data["nonce"], body)
    return SignedRequest(nonce=data["nonce"], body=body, signature=signature)
