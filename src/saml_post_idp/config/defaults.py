"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from datetime import datetime, timezone
from typing import Any

# Issuer used when none is configured
DEFAULT_ISSUER = "https://www.opensaml.org/IDP"

# Fixed lower bound for Conditions/@NotBefore and Assertion/@IssueInstant.
# Kept as a constant rather than derived from "now"; do not replace it with
# a relative clock-skew offset.
DEFAULT_NOT_BEFORE = datetime(2003, 4, 17, 0, 46, 2, tzinfo=timezone.utc)

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "idp": {
        "issuer": DEFAULT_ISSUER,
        "not_before": "2003-04-17T00:46:02Z",
        "signature_algorithm": "RSA-SHA256",
        # Raw signed XML in the SAMLResponse field; set true for base64
        "encode_response": False,
    },
    "keys": {
        # No default key paths - must be provided by user
        "private_key_path": None,
        "public_key_path": None,
        "certificate_path": None,
        "key_format": "pem",
        "password_env_var": "SAML_IDP_KEY_PASSWORD",
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/saml-post-idp.log",
        # Do not redact identities by default (operator must opt in)
        "redact_identities": False,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
