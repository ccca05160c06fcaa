"""Config module.

This module provides configuration management functionality.
"""

from saml_post_idp.config.manager import (
    get_idp_config,
    get_keys_config,
    get_logging_config,
    load_config,
)
from saml_post_idp.config.schema import (
    Config,
    IdPConfig,
    KeysConfig,
    LoggingConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_idp_config",
    "get_keys_config",
    "get_logging_config",
    # Configuration models
    "Config",
    "IdPConfig",
    "KeysConfig",
    "LoggingConfig",
]
