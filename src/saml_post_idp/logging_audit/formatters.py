"""Custom log formatters for the SAML POST identity provider.

This module provides specialized formatters for logging, including identity redaction.
"""

import logging
import re
from typing import List, Tuple


class IdentityRedactingFormatter(logging.Formatter):
    """Formatter that redacts user identities and signature material from log messages.

    Issued NameIDs are usually e-mail addresses, and DEBUG logging includes
    full response XML, so both addresses and ds:SignatureValue / X509Certificate
    payloads are masked when redaction is enabled.

    Attributes:
        redact_identities: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = IdentityRedactingFormatter(redact_identities=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_identities: bool = False,
    ) -> None:
        """Initialize the IdentityRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_identities: Whether to enable redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_identities = redact_identities

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # E-mail style identifiers: alice@example.org
            (re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+"), "[EMAIL-REDACTED]"),
            # Signature and certificate payloads in serialized XML
            (
                re.compile(r"(<(?:\w+:)?(SignatureValue|X509Certificate|Modulus)>)[^<]*(</)"),
                r"\1[REDACTED]\3",
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with identities redacted if enabled
        """
        original = super().format(record)

        if self.redact_identities:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
