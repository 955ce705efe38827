"""Tests for config loading, environment overrides and logging setup."""

import logging

import pytest

from kraken_api.core.utils import (
    load_config,
    resolve_environment_variables,
    setup_structured_logging,
)
from kraken_api.exchange.errors import ConfigurationError
from kraken_api.exchange.kraken_client import KrakenClient


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("kraken:\n  version: '0'\n  base_uri: https://api.kraken.com\nlogging:\n  level: DEBUG\n")
    config = load_config(path)
    assert config["kraken"]["base_uri"] == "https://api.kraken.com"
    assert config["logging"]["level"] == "DEBUG"


def test_load_config_adds_missing_kraken_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("logging:\n  level: INFO\n")
    assert load_config(path)["kraken"] == {}


def test_load_config_rejects_missing_or_invalid_files(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.yaml")
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_environment_overrides_credentials(monkeypatch):
    monkeypatch.setenv("KRAKEN_API_KEY", "env-key")
    monkeypatch.setenv("KRAKEN_API_SECRET", "ZW52LXNlY3JldA==")
    monkeypatch.delenv("KRAKEN_BASE_URI", raising=False)
    monkeypatch.delenv("KRAKEN_API_VERSION", raising=False)
    config = {"kraken": {"api_key": "file-key", "base_uri": "https://api.kraken.com"}}
    resolved = resolve_environment_variables(config)
    assert resolved["kraken"] == {
        "api_key": "env-key",
        "api_secret": "ZW52LXNlY3JldA==",
        "base_uri": "https://api.kraken.com",
    }
    assert config["kraken"]["api_key"] == "file-key"


def test_packaged_sample_config_builds_client(monkeypatch):
    from pathlib import Path

    import kraken_api

    monkeypatch.delenv("KRAKEN_API_KEY", raising=False)
    monkeypatch.delenv("KRAKEN_API_SECRET", raising=False)
    monkeypatch.delenv("KRAKEN_BASE_URI", raising=False)
    monkeypatch.delenv("KRAKEN_API_VERSION", raising=False)
    path = Path(kraken_api.__file__).parent / "config" / "config.yaml"
    client = KrakenClient.from_config(resolve_environment_variables(load_config(path)))
    assert client.config.base_uri == "https://api.kraken.com"
    assert client.config.timeout_seconds == 300.0


def test_setup_structured_logging_quiets_httpx():
    setup_structured_logging({"logging": {"level": "INFO"}})
    assert logging.getLogger("httpx").level == logging.WARNING
