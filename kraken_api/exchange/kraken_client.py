"""Synchronous client for the Kraken REST API (public + private endpoints)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from kraken_api.exchange import signing
from kraken_api.exchange.errors import ApiError, ConfigurationError, ValidationError

JsonValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]
Params = Optional[Mapping[str, Any]]

CLOUDFLARE_ERROR_MARKER = '<span class="cf-error-type" data-translate="error">Error</span>'
ADD_ORDER_REQUIRED = ("pair", "type", "ordertype", "volume")


@dataclass(frozen=True)
class KrakenConfig:
    version: str = "0"
    base_uri: str = "https://api.kraken.com"
    timeout_seconds: float = 300.0


class KrakenClient:
    """Access public market data and private account/trading endpoints on Kraken.

    Every operation is a single request/response round trip. Public calls are
    plain GETs; private calls are signed POSTs (see :mod:`kraken_api.exchange.signing`).
    Callers only ever see the ``result`` payload; error responses raise
    :class:`ApiError`.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        config: Optional[KrakenConfig] = None,
        *,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Store credentials/configuration without triggering any network calls."""
        self._credentials = signing.Credentials(api_key=api_key or "", api_secret=api_secret or "")
        self._cfg = config or KrakenConfig()
        self._nonces = signing.NonceGenerator()
        self._http = http_client

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **kwargs: Any) -> "KrakenClient":
        """Build a client from the ``kraken`` section of a loaded YAML config."""
        section = config.get("kraken") or {}
        if not isinstance(section, Mapping):
            raise ConfigurationError("'kraken' config section must be a mapping.")
        defaults = KrakenConfig()
        cfg = KrakenConfig(
            version=str(section.get("version") or defaults.version),
            base_uri=str(section.get("base_uri") or defaults.base_uri).rstrip("/"),
            timeout_seconds=float(section.get("timeout_seconds") or defaults.timeout_seconds),
        )
        return cls(
            api_key=section.get("api_key"),
            api_secret=section.get("api_secret"),
            config=cfg,
            **kwargs,
        )

    @property
    def config(self) -> KrakenConfig:
        return self._cfg

    # ------------------------------------------------------------------ #
    # Public market data
    # ------------------------------------------------------------------ #
    def server_time(self, params: Params = None) -> JsonValue:
        return self.get_public("Time", params)

    def assets(self, params: Params = None) -> JsonValue:
        return self.get_public("Assets", params)

    def asset_pairs(self, params: Params = None) -> JsonValue:
        return self.get_public("AssetPairs", params)

    def ticker(self, pairs: str, params: Params = None) -> JsonValue:
        """Ticker info for a comma-delimited list of pairs (e.g. "XBTUSD,ETHUSD")."""
        return self.get_public("Ticker", _with(params, pair=pairs))

    def order_book(self, pair: str, params: Params = None) -> JsonValue:
        return self.get_public("Depth", _with(params, pair=pair))

    def trades(self, pair: str, params: Params = None) -> JsonValue:
        return self.get_public("Trades", _with(params, pair=pair))

    def spread(self, pair: str, params: Params = None) -> JsonValue:
        return self.get_public("Spread", _with(params, pair=pair))

    def get_public(self, method: str, params: Params = None) -> JsonValue:
        """GET ``<base_uri>/<version>/public/<method>`` and return its ``result``."""
        url = f"{self._cfg.base_uri}/{self._cfg.version}/public/{method}"
        query = dict(params or {})
        logging.debug("Kraken public request %s params=%s", method, query)
        if self._http is not None:
            response = self._http.get(url, params=query, timeout=self._cfg.timeout_seconds)
        else:
            response = httpx.get(url, params=query, timeout=self._cfg.timeout_seconds)
        return self._parse_response(method, response)

    # ------------------------------------------------------------------ #
    # Private account data
    # ------------------------------------------------------------------ #
    def balance(self, params: Params = None) -> JsonValue:
        return self.post_private("Balance", params)

    def trade_balance(self, params: Params = None) -> JsonValue:
        return self.post_private("TradeBalance", params)

    def open_orders(self, params: Params = None) -> JsonValue:
        return self.post_private("OpenOrders", params)

    def closed_orders(self, params: Params = None) -> JsonValue:
        return self.post_private("ClosedOrders", params)

    def query_orders(self, params: Params = None) -> JsonValue:
        return self.post_private("QueryOrders", params)

    def trade_history(self, params: Params = None) -> JsonValue:
        return self.post_private("TradesHistory", params)

    def query_trades(self, tx_ids: Union[str, List[str]], params: Params = None) -> JsonValue:
        return self.post_private("QueryTrades", _with(params, txid=tx_ids))

    def open_positions(self, tx_ids: Union[str, List[str]], params: Params = None) -> JsonValue:
        return self.post_private("OpenPositions", _with(params, txid=tx_ids))

    def ledgers_info(self, params: Params = None) -> JsonValue:
        return self.post_private("Ledgers", params)

    def query_ledgers(self, ledger_ids: Union[str, List[str]], params: Params = None) -> JsonValue:
        return self.post_private("QueryLedgers", _with(params, id=ledger_ids))

    def trade_volume(self, asset_pairs: Union[str, List[str]], params: Params = None) -> JsonValue:
        return self.post_private("TradeVolume", _with(params, pair=asset_pairs))

    # ------------------------------------------------------------------ #
    # Private trading
    # ------------------------------------------------------------------ #
    def add_order(self, params: Params = None) -> JsonValue:
        """Place an order.

        `params` must include ``pair``, ``type`` (buy/sell), ``ordertype`` and
        ``volume``; any other AddOrder field is forwarded as-is.
        """
        data = dict(params or {})
        given = {str(key) for key in data}
        missing = [key for key in ADD_ORDER_REQUIRED if key not in given]
        if missing:
            raise ValidationError(missing)
        return self.post_private("AddOrder", data)

    def cancel_order(self, txid: str) -> JsonValue:
        return self.post_private("CancelOrder", {"txid": txid})

    def post_private(self, method: str, params: Params = None) -> JsonValue:
        """Sign and POST to ``<base_uri>/<version>/private/<method>``; return ``result``."""
        path = signing.url_path(self._cfg.version, method)
        signed = signing.sign_request(self._credentials, path, params, nonce=self._nonces.next())
        headers = signed.headers(self._credentials.api_key)
        url = f"{self._cfg.base_uri}{path}"
        logging.debug("Kraken private request %s nonce=%s", method, signed.nonce)
        if self._http is not None:
            response = self._http.post(
                url, content=signed.body, headers=headers, timeout=self._cfg.timeout_seconds
            )
        else:
            response = httpx.post(
                url, content=signed.body, headers=headers, timeout=self._cfg.timeout_seconds
            )
        return self._parse_response(method, response)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _parse_response(method: str, response: httpx.Response) -> JsonValue:
        """Return the ``result`` field or raise :class:`ApiError`."""
        text = response.text
        if CLOUDFLARE_ERROR_MARKER in text:
            logging.warning("Kraken %s returned an edge error page (HTTP %s).", method, response.status_code)
            raise ApiError("cloudflare error", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(
                f"Unexpected non-JSON response from Kraken {method} (HTTP {response.status_code}).",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise ApiError(
                f"Unexpected response shape from Kraken {method}: {type(payload).__name__}",
                status_code=response.status_code,
            )
        raw_errors = payload.get("error") or []
        errors = list(raw_errors) if isinstance(raw_errors, list) else [str(raw_errors)]
        if errors:
            logging.warning("Kraken %s failed: %s", method, errors)
            raise ApiError(str(errors), errors=errors, status_code=response.status_code)
        return payload.get("result")


def _with(params: Params, **extra: Any) -> Dict[str, Any]:
    """Return a new parameter mapping: a copy of `params` updated with `extra`."""
    merged = dict(params or {})
    merged.update(extra)
    return merged
