"""Unit tests for configuration management.

Tests cover:
- Loading configuration from JSON files
- Default values when no file exists
- Environment variable overrides
- Validation errors
- Sensitive value warnings
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from saml_post_idp.config import (
    Config,
    IdPConfig,
    KeysConfig,
    LoggingConfig,
    get_idp_config,
    get_keys_config,
    get_logging_config,
    load_config,
)
from saml_post_idp.utils.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove SAML_IDP_* overrides and skip .env loading."""
    for name in [
        "ISSUER",
        "NOT_BEFORE",
        "SIGNATURE_ALGORITHM",
        "ENCODE_RESPONSE",
        "PRIVATE_KEY_PATH",
        "PUBLIC_KEY_PATH",
        "CERTIFICATE_PATH",
        "KEY_FORMAT",
        "LOG_LEVEL",
        "LOG_FILE",
        "REDACT_IDENTITIES",
    ]:
        monkeypatch.delenv(f"SAML_IDP_{name}", raising=False)
    monkeypatch.setattr("saml_post_idp.config.manager.load_dotenv", lambda: None)


@pytest.fixture
def config_file(tmp_path):
    def _write(content) -> Path:
        path = tmp_path / "config.json"
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


class TestLoadConfig:
    """Test load_config()."""

    def test_defaults_when_file_missing(self, tmp_path):
        config = load_config(tmp_path / "missing.json")

        assert config.idp.issuer == "https://www.opensaml.org/IDP"
        assert config.idp.not_before == datetime(2003, 4, 17, 0, 46, 2, tzinfo=timezone.utc)
        assert config.idp.signature_algorithm == "RSA-SHA256"
        assert config.idp.encode_response is False
        assert config.keys.private_key_path is None
        assert config.keys.key_format == "pem"
        assert config.logging.level == "INFO"
        assert config.logging.redact_identities is False

    def test_load_from_file(self, config_file, tmp_path):
        path = config_file(
            {
                "idp": {
                    "issuer": "https://idp.example.org",
                    "not_before": "2010-01-01T00:00:00Z",
                    "signature_algorithm": "rsa-sha512",
                    "encode_response": True,
                },
                "keys": {"private_key_path": str(tmp_path / "key.pem")},
                "logging": {"level": "debug", "log_file": "custom.log"},
            }
        )

        config = load_config(path)

        assert config.idp.issuer == "https://idp.example.org"
        assert config.idp.not_before == datetime(2010, 1, 1, tzinfo=timezone.utc)
        assert config.idp.signature_algorithm == "RSA-SHA512"
        assert config.idp.encode_response is True
        assert config.keys.private_key_path == tmp_path / "key.pem"
        assert config.logging.level == "DEBUG"
        assert config.logging.log_file == Path("custom.log")

    def test_partial_file_uses_defaults(self, config_file):
        config = load_config(config_file({"idp": {"issuer": "https://idp.example.org"}}))

        assert config.idp.signature_algorithm == "RSA-SHA256"
        assert config.logging.level == "INFO"

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("SAML_IDP_ISSUER", "https://env.example.org")
        monkeypatch.setenv("SAML_IDP_ENCODE_RESPONSE", "yes")
        monkeypatch.setenv("SAML_IDP_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("SAML_IDP_REDACT_IDENTITIES", "true")
        monkeypatch.setenv("SAML_IDP_PRIVATE_KEY_PATH", "/keys/key.pem")

        config = load_config(config_file({"idp": {"issuer": "https://file.example.org"}}))

        assert config.idp.issuer == "https://env.example.org"
        assert config.idp.encode_response is True
        assert config.logging.level == "WARNING"
        assert config.logging.redact_identities is True
        assert config.keys.private_key_path == Path("/keys/key.pem")

    def test_invalid_json(self, config_file):
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(config_file("{ not json"))

    def test_non_object_json(self, config_file):
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(config_file("[1, 2]"))

    @pytest.mark.parametrize(
        "content",
        [
            {"idp": {"signature_algorithm": "RSA-SHA1"}},
            {"idp": {"issuer": ""}},
            {"idp": {"not_before": "yesterday"}},
            {"keys": {"key_format": "jks"}},
            {"logging": {"level": "LOUD"}},
            {"keys": {"certificate_path": "cert.pem"}},
        ],
    )
    def test_invalid_values(self, config_file, content):
        with pytest.raises(ConfigurationError, match="validation failed"):
            load_config(config_file(content))

    def test_password_in_file_warns(self, config_file, caplog):
        with caplog.at_level(logging.WARNING):
            load_config(config_file({"keys": {"password": "hunter2"}}))

        assert "Key password found in configuration file" in caplog.text


class TestSchema:
    """Test schema models directly."""

    def test_naive_not_before_is_utc(self):
        settings = IdPConfig(not_before=datetime(2003, 4, 17, 0, 46, 2))

        assert settings.not_before.tzinfo == timezone.utc

    def test_helpers(self):
        config = Config()

        assert isinstance(get_idp_config(config), IdPConfig)
        assert isinstance(get_keys_config(config), KeysConfig)
        assert isinstance(get_logging_config(config), LoggingConfig)
