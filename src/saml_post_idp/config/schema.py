"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from saml_post_idp.config.defaults import DEFAULT_ISSUER, DEFAULT_NOT_BEFORE

SUPPORTED_SIGNATURE_ALGORITHMS = ("RSA-SHA256", "RSA-SHA512")


class IdPConfig(BaseModel):
    """Identity provider response settings.

    Attributes:
        issuer: Entity id placed in the Issuer element
        not_before: Fixed lower bound of the assertion validity window
        signature_algorithm: XML signature algorithm (RSA-SHA256, RSA-SHA512)
        encode_response: Base64-encode the signed document in the SAMLResponse field
    """

    issuer: str = Field(default=DEFAULT_ISSUER, min_length=1)
    not_before: datetime = Field(
        default=DEFAULT_NOT_BEFORE,
        description="Fixed NotBefore instant (not derived from the current time)",
    )
    signature_algorithm: str = Field(default="RSA-SHA256")
    encode_response: bool = False

    @field_validator("not_before")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Interpret naive datetimes as UTC.

        Args:
            v: Parsed datetime

        Returns:
            Timezone-aware UTC datetime
        """
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("signature_algorithm")
    @classmethod
    def validate_signature_algorithm(cls, v: str) -> str:
        """Validate signature algorithm name.

        Raises:
            ValueError: If the algorithm is not supported
        """
        v_upper = v.upper()
        if v_upper not in SUPPORTED_SIGNATURE_ALGORITHMS:
            raise ValueError(
                f"Invalid signature_algorithm: {v}. "
                f"Must be one of: {', '.join(SUPPORTED_SIGNATURE_ALGORITHMS)}"
            )
        return v_upper


class KeysConfig(BaseModel):
    """Configuration for signing key material.

    Attributes:
        private_key_path: PEM private key, or PKCS12 bundle when key_format is pkcs12
        public_key_path: PEM public key (used when no certificate is configured)
        certificate_path: PEM X.509 certificate embedded in signatures
        key_format: pem or pkcs12
        password_env_var: Environment variable holding the key/bundle password
    """

    private_key_path: Optional[Path] = None
    public_key_path: Optional[Path] = None
    certificate_path: Optional[Path] = None
    key_format: str = Field(default="pem", description="Key format: pem or pkcs12")
    password_env_var: Optional[str] = Field(
        default="SAML_IDP_KEY_PASSWORD",
        description="Environment variable for the key password",
    )

    @field_validator("key_format")
    @classmethod
    def validate_key_format(cls, v: str) -> str:
        valid_formats = ["pem", "pkcs12"]
        if v not in valid_formats:
            raise ValueError(
                f"Invalid key_format: {v}. Must be one of: {', '.join(valid_formats)}"
            )
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_identities: Redact e-mail addresses and signature values from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Path = Field(
        default=Path("logs/saml-post-idp.log"),
        description="Log file path",
    )
    redact_identities: bool = Field(
        default=False,
        description="Redact user identities from logs",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Raises:
            ValueError: If log level is not recognised
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        idp: Response construction settings
        keys: Key material locations
        logging: Logging configuration
    """

    idp: IdPConfig = Field(default_factory=IdPConfig)
    keys: KeysConfig = Field(default_factory=KeysConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_key_paths(self) -> "Config":
        """A public key or certificate only makes sense with a private key."""
        keys = self.keys
        if keys.private_key_path is None and (
            keys.public_key_path is not None or keys.certificate_path is not None
        ):
            raise ValueError(
                "keys.private_key_path is required when public_key_path or "
                "certificate_path is configured"
            )
        return self
