"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from saml_post_idp.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from saml_post_idp.config.schema import Config, IdPConfig, KeysConfig, LoggingConfig
from saml_post_idp.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SAML_IDP_"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (SAML_IDP_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> issuer = config.idp.issuer
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format. See documentation for details."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or unreadable
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object at the top level"
            )
        return config_dict

    logger.info(f"Config file not found: {config_path}. Using default configuration.")
    # Return a deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SAML_IDP_ prefix.

    Environment variables follow the pattern: SAML_IDP_<FIELD>
    For example: SAML_IDP_ISSUER, SAML_IDP_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    # IdP section
    if issuer := os.getenv(f"{ENV_PREFIX}ISSUER"):
        config_dict.setdefault("idp", {})["issuer"] = issuer
        logger.debug("Override: issuer from environment")

    if not_before := os.getenv(f"{ENV_PREFIX}NOT_BEFORE"):
        config_dict.setdefault("idp", {})["not_before"] = not_before
        logger.debug("Override: not_before from environment")

    if signature_algorithm := os.getenv(f"{ENV_PREFIX}SIGNATURE_ALGORITHM"):
        config_dict.setdefault("idp", {})["signature_algorithm"] = signature_algorithm
        logger.debug("Override: signature_algorithm from environment")

    if encode_response := os.getenv(f"{ENV_PREFIX}ENCODE_RESPONSE"):
        config_dict.setdefault("idp", {})["encode_response"] = _parse_bool(encode_response)
        logger.debug("Override: encode_response from environment")

    # Keys section
    if private_key_path := os.getenv(f"{ENV_PREFIX}PRIVATE_KEY_PATH"):
        config_dict.setdefault("keys", {})["private_key_path"] = private_key_path
        logger.debug("Override: private_key_path from environment")

    if public_key_path := os.getenv(f"{ENV_PREFIX}PUBLIC_KEY_PATH"):
        config_dict.setdefault("keys", {})["public_key_path"] = public_key_path
        logger.debug("Override: public_key_path from environment")

    if certificate_path := os.getenv(f"{ENV_PREFIX}CERTIFICATE_PATH"):
        config_dict.setdefault("keys", {})["certificate_path"] = certificate_path
        logger.debug("Override: certificate_path from environment")

    if key_format := os.getenv(f"{ENV_PREFIX}KEY_FORMAT"):
        config_dict.setdefault("keys", {})["key_format"] = key_format
        logger.debug("Override: key_format from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact := os.getenv(f"{ENV_PREFIX}REDACT_IDENTITIES"):
        config_dict.setdefault("logging", {})["redact_identities"] = _parse_bool(redact)
        logger.debug("Override: redact_identities from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when secrets are stored in the configuration file.

    Args:
        config_dict: Configuration dictionary to check
    """
    keys = config_dict.get("keys", {})
    if "password" in keys or "key_password" in keys:
        logger.warning(
            "WARNING: Key password found in configuration file! "
            "Passwords should be stored in environment variables, not config files. "
            f"Use the {ENV_PREFIX}KEY_PASSWORD environment variable instead."
        )


def get_idp_config(config: Config) -> IdPConfig:
    """Get response construction settings from configuration."""
    return config.idp


def get_keys_config(config: Config) -> KeysConfig:
    """Get key material settings from configuration."""
    return config.keys


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration from configuration."""
    return config.logging
