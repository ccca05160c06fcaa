"""Custom exception classes for the SAML POST identity provider.

All exceptions inherit from SAMLIdPError to allow catching all custom exceptions.

An absent or malformed inbound AuthnRequest is deliberately NOT represented
here: the request decoder and parser report it as ``None``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SAMLIdPError(Exception):
    """Base exception for all SAML IdP custom exceptions."""

    pass


class ValidationError(SAMLIdPError):
    """Raised when input data for an exchange is invalid.

    Examples:
        - Empty delivery URL for a service binding
        - Unsupported signature algorithm name
    """

    pass


class ConfigurationError(SAMLIdPError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Configuration value out of range
    """

    pass


class SAMLError(SAMLIdPError):
    """Base exception for failures that abort a single SAML exchange."""

    pass


class KeyLoadError(SAMLError):
    """Raised when key material cannot be loaded.

    Examples:
        - Key file not found
        - Invalid PEM/PKCS12 content
        - Incorrect password for encrypted key
    """

    pass


class UnregisteredServiceError(SAMLError):
    """Raised when no registered service definition matches a binding.

    Attributes:
        service_id: Identifier of the binding that failed the lookup
    """

    def __init__(self, message: str, service_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.service_id = service_id


class IdentityResolutionError(SAMLError):
    """Raised when a username policy cannot produce an identifier.

    Attributes:
        service_id: Identifier of the service whose policy failed
    """

    def __init__(self, message: str, service_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.service_id = service_id


class SigningError(SAMLError):
    """Raised when serialization or XML signing of a response fails.

    No partially signed or unsigned document is ever returned alongside
    this error.
    """

    pass


class SignatureVerificationError(SAMLError):
    """Raised when a signed response fails verification.

    Examples:
        - Content modified after signing (digest mismatch)
        - Signature made with a different key
        - Signature element missing
    """

    pass


class ErrorCategory(Enum):
    """Error categorization for handling strategy.

    Attributes:
        PERMANENT: Fails this exchange only (unknown service, no username)
        CRITICAL: Deployment problem affecting every exchange (keys, config)
    """

    PERMANENT = "PERMANENT"
    CRITICAL = "CRITICAL"


@dataclass
class ErrorInfo:
    """Structured error information for surfacing to the login flow.

    Attributes:
        category: Error category (PERMANENT, CRITICAL)
        error_type: Exception class name (e.g., "UnregisteredServiceError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        technical_details: Optional technical details for debugging
        service_id: Optional service identifier involved in the failure
    """

    category: ErrorCategory
    error_type: str
    message: str
    remediation: str
    technical_details: Optional[str] = None
    service_id: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize exception for error handling strategy.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory indicating handling strategy

    Example:
        >>> categorize_error(UnregisteredServiceError("no service"))
        <ErrorCategory.PERMANENT: 'PERMANENT'>
        >>> categorize_error(KeyLoadError("bad key"))
        <ErrorCategory.CRITICAL: 'CRITICAL'>
    """
    if isinstance(exception, (KeyLoadError, SigningError, ConfigurationError)):
        return ErrorCategory.CRITICAL

    return ErrorCategory.PERMANENT


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with categorization and remediation guidance
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = (
            f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"
        )

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(exception),
        technical_details=technical_details,
        service_id=getattr(exception, "service_id", None),
    )


def _generate_remediation(exception: Exception) -> str:
    """Generate actionable remediation message for an error."""
    if isinstance(exception, UnregisteredServiceError):
        return (
            "No registered service matches the assertion consumer URL. "
            "Register the service (exact id or pattern) before retrying the login."
        )

    if isinstance(exception, IdentityResolutionError):
        return (
            "The service's username policy returned no identifier. Check that the "
            "principal carries the attribute the policy is configured to release."
        )

    if isinstance(exception, KeyLoadError):
        return (
            "Key material could not be loaded. Check key paths and format in the "
            "configuration, or generate a test pair with: saml-post-idp keygen"
        )

    if isinstance(exception, SigningError):
        return (
            "Signing failed. Verify that the private key is an RSA key matching the "
            "configured certificate and that signature_algorithm is supported."
        )

    if isinstance(exception, ConfigurationError):
        return (
            "Configuration error. Check config.json for missing or invalid values. "
            "Use examples/config.example.json as template."
        )

    return "Review error message and check the log file for complete details."
