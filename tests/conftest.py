"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests). Key material is generated once per session with
the cryptography library instead of being checked in.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from saml_post_idp.models.binding import KeyPair, RequestCorrelation, ServiceBinding
from saml_post_idp.models.principal import Principal
from saml_post_idp.saml.key_manager import generate_key_pair
from saml_post_idp.services.registry import InMemoryServicesManager, RegisteredService
from saml_post_idp.utils.clock import FixedClock

ACS_URL = "https://svc.example.org/acs"
REQUEST_ID = "_abc123"


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    """RSA key pair with a self-signed certificate."""
    return generate_key_pair(common_name="Test Signing Certificate")


@pytest.fixture(scope="session")
def bare_key_pair() -> KeyPair:
    """RSA key pair without a certificate (signature carries KeyValue)."""
    return generate_key_pair(with_certificate=False)


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    """Unrelated key pair, for wrong-key verification tests."""
    return generate_key_pair(common_name="Other Certificate")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now: datetime) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def authn_request_xml() -> str:
    """Minimal AuthnRequest as a service provider would send it."""
    return (
        f'<samlp:AuthnRequest xmlns:samlp="urn:oasis:names:tc:SAML:2.0:protocol" '
        f'ID="{REQUEST_ID}" Version="2.0" IssueInstant="2024-05-01T12:30:00Z" '
        f'ProtocolBinding="urn:oasis:names:tc:SAML:2.0:bindings:HTTP-POST" '
        f'AssertionConsumerServiceURL="{ACS_URL}"/>'
    )


@pytest.fixture
def binding(key_pair: KeyPair) -> ServiceBinding:
    """Binding created from the example AuthnRequest with RelayState "xyz"."""
    return ServiceBinding.from_request(
        RequestCorrelation(delivery_url=ACS_URL, correlation_id=REQUEST_ID),
        relay_token="xyz",
        key_pair=key_pair,
    )


@pytest.fixture
def principal() -> Principal:
    return Principal(
        id="alice@example.org",
        attributes={"mail": "alice@example.org", "uid": "alice"},
    )


@pytest.fixture
def services_manager() -> InMemoryServicesManager:
    """Registry with the example service registered."""
    return InMemoryServicesManager([RegisteredService(service_id=ACS_URL, name="Example")])
