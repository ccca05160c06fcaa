"""Data models for an in-flight SAML authentication exchange.

A ServiceBinding is created once per inbound AuthnRequest (or once for a
request-less, IdP-initiated flow) and never mutated afterwards. Key material
is held in-process only and never persisted.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from cryptography import x509

from ..utils.exceptions import ValidationError
from .principal import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPair:
    """Asymmetric key pair used to sign one or more exchanges.

    Attributes:
        private_key: Private key (cryptography key object), signing only
        public_key: Matching public key, embedded in or paired with the output
        certificate: Optional X.509 certificate for the public key. When
            present it is embedded in the signature's KeyInfo instead of the
            bare key value.
    """

    private_key: Any
    public_key: Any
    certificate: Optional[x509.Certificate] = None

    @property
    def certificate_subject(self) -> str:
        """Certificate subject DN, or empty string for a bare key pair."""
        if self.certificate is None:
            return ""
        return self.certificate.subject.rfc4514_string()

    def __repr__(self) -> str:
        return f"KeyPair(certificate_subject={self.certificate_subject!r})"


@dataclass(frozen=True)
class RequestCorrelation:
    """Values recovered from an inbound AuthnRequest.

    Attributes:
        delivery_url: AssertionConsumerServiceURL of the request
        correlation_id: ID attribute of the request (InResponseTo target)
    """

    delivery_url: str
    correlation_id: Optional[str]


@dataclass(frozen=True)
class DeliveryTarget:
    """Web service identity of the relying party.

    Attributes:
        id: Registered service identifier (registry lookup key)
        original_url: URL the signed response is posted to
        artifact_id: Optional artifact / session identifier
    """

    id: str
    original_url: str
    artifact_id: Optional[str] = None


@dataclass(frozen=True)
class ServiceBinding:
    """One authentication exchange in flight.

    Attributes:
        target: Delivery target (service id, delivery URL, artifact id)
        key_pair: Key pair the response for this exchange is signed with
        relay_token: Opaque RelayState echoed back unmodified (may be None)
        correlation_id: ID of the inbound request; None for a bare binding
        principal: Authenticated principal, attached once authentication
            has completed

    Example:
        >>> binding = ServiceBinding.bare("https://svc.example.org/acs", key_pair)
        >>> binding.id == binding.delivery_url
        True
    """

    target: DeliveryTarget
    key_pair: KeyPair = field(repr=False)
    relay_token: Optional[str] = None
    correlation_id: Optional[str] = None
    principal: Optional[Principal] = None

    def __post_init__(self) -> None:
        if not self.target.original_url:
            raise ValidationError(
                "Service binding requires a non-empty delivery URL "
                "(AssertionConsumerServiceURL)."
            )
        if not self.target.id:
            raise ValidationError("Service binding requires a non-empty service id.")
        # An empty InResponseTo is never emitted, so normalise it away here
        if self.correlation_id == "":
            object.__setattr__(self, "correlation_id", None)

    @classmethod
    def from_request(
        cls,
        correlation: RequestCorrelation,
        relay_token: Optional[str],
        key_pair: KeyPair,
    ) -> "ServiceBinding":
        """Create a binding from values extracted off an AuthnRequest.

        The delivery URL doubles as the service id.

        Args:
            correlation: Parsed request values
            relay_token: RelayState parameter, passed through untouched
            key_pair: Signing key pair for this exchange

        Returns:
            New ServiceBinding
        """
        binding = cls(
            target=DeliveryTarget(
                id=correlation.delivery_url,
                original_url=correlation.delivery_url,
            ),
            key_pair=key_pair,
            relay_token=relay_token,
            correlation_id=correlation.correlation_id,
        )
        logger.debug(
            f"Created service binding from request: id={binding.id}, "
            f"correlation_id={binding.correlation_id}"
        )
        return binding

    @classmethod
    def bare(
        cls,
        delivery_url: str,
        key_pair: KeyPair,
        relay_token: Optional[str] = None,
        artifact_id: Optional[str] = None,
        service_id: Optional[str] = None,
    ) -> "ServiceBinding":
        """Create a binding without an inbound request.

        Used for IdP-initiated flows and when rebuilding a binding from
        persisted correlation state. The resulting assertion carries no
        InResponseTo.

        Args:
            delivery_url: URL the response is posted to
            key_pair: Signing key pair
            relay_token: Optional RelayState to echo back
            artifact_id: Optional artifact / session identifier
            service_id: Registered service id (defaults to delivery_url)
        """
        return cls(
            target=DeliveryTarget(
                id=service_id or delivery_url,
                original_url=delivery_url,
                artifact_id=artifact_id,
            ),
            key_pair=key_pair,
            relay_token=relay_token,
        )

    @property
    def id(self) -> str:
        return self.target.id

    @property
    def delivery_url(self) -> str:
        return self.target.original_url

    @property
    def artifact_id(self) -> Optional[str]:
        return self.target.artifact_id

    @property
    def logged_out_already(self) -> bool:
        """POST-delivered services never receive a logout callback."""
        return True

    def with_principal(self, principal: Principal) -> "ServiceBinding":
        """Return a copy of this binding with the authenticated principal attached."""
        return replace(self, principal=principal)

    def to_audit_dict(self) -> Dict[str, Any]:
        """Non-secret fields of the binding, for audit logging."""
        return {
            "service_id": self.id,
            "delivery_url": self.delivery_url,
            "correlation_id": self.correlation_id or "",
            "relay_state_present": self.relay_token is not None,
        }
