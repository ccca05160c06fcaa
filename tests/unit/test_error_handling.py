"""Unit tests for exception hierarchy and error categorization."""

import pytest

from saml_post_idp.utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    IdentityResolutionError,
    KeyLoadError,
    SAMLError,
    SAMLIdPError,
    SignatureVerificationError,
    SigningError,
    UnregisteredServiceError,
    ValidationError,
    categorize_error,
    create_error_info,
)


class TestExceptionHierarchy:
    """Test that all custom exceptions share a common base."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            KeyLoadError,
            UnregisteredServiceError,
            IdentityResolutionError,
            SigningError,
            SignatureVerificationError,
        ],
    )
    def test_exchange_errors_are_saml_errors(self, exc_class):
        assert issubclass(exc_class, SAMLError)
        assert issubclass(exc_class, SAMLIdPError)

    def test_validation_and_configuration_are_not_exchange_errors(self):
        assert not issubclass(ValidationError, SAMLError)
        assert not issubclass(ConfigurationError, SAMLError)

    def test_service_id_is_kept(self):
        error = UnregisteredServiceError("missing", service_id="https://svc.example.org/acs")

        assert error.service_id == "https://svc.example.org/acs"
        assert str(error) == "missing"


class TestCategorizeError:
    """Test categorize_error()."""

    @pytest.mark.parametrize(
        "exception,expected",
        [
            (UnregisteredServiceError("x"), ErrorCategory.PERMANENT),
            (IdentityResolutionError("x"), ErrorCategory.PERMANENT),
            (SignatureVerificationError("x"), ErrorCategory.PERMANENT),
            (ValidationError("x"), ErrorCategory.PERMANENT),
            (KeyLoadError("x"), ErrorCategory.CRITICAL),
            (SigningError("x"), ErrorCategory.CRITICAL),
            (ConfigurationError("x"), ErrorCategory.CRITICAL),
            (RuntimeError("x"), ErrorCategory.PERMANENT),
        ],
    )
    def test_categories(self, exception, expected):
        assert categorize_error(exception) == expected


class TestCreateErrorInfo:
    """Test create_error_info()."""

    def test_unregistered_service(self):
        info = create_error_info(
            UnregisteredServiceError("not registered", service_id="https://svc.example.org/acs")
        )

        assert info.category == ErrorCategory.PERMANENT
        assert info.error_type == "UnregisteredServiceError"
        assert info.service_id == "https://svc.example.org/acs"
        assert "Register the service" in info.remediation
        assert info.technical_details is None

    def test_cause_is_reported(self):
        try:
            try:
                raise ValueError("bad padding")
            except ValueError as e:
                raise SigningError("signing failed") from e
        except SigningError as error:
            info = create_error_info(error)

        assert info.category == ErrorCategory.CRITICAL
        assert info.technical_details == "Caused by: ValueError: bad padding"

    @pytest.mark.parametrize(
        "exception,fragment",
        [
            (IdentityResolutionError("x"), "username policy"),
            (KeyLoadError("x"), "saml-post-idp keygen"),
            (ConfigurationError("x"), "config.json"),
            (RuntimeError("x"), "log file"),
        ],
    )
    def test_remediation(self, exception, fragment):
        assert fragment in create_error_info(exception).remediation
