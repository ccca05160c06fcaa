"""End-to-end SAML POST exchange.

Two entry points mirror the two halves of the login flow:

- ``create_binding_from_request`` runs when the service redirects the user
  in: it decodes the AuthnRequest and produces a ServiceBinding (or None for
  an unsolicited flow).
- ``issue_response`` runs once authentication has completed: it resolves
  the username, builds, signs and packages the response.
"""

import logging
import time
from typing import Optional

from ..config.schema import IdPConfig
from ..logging_audit.audit import (
    EVENT_BINDING_CREATED,
    EVENT_REQUEST_ABSENT,
    EVENT_RESPONSE_FAILED,
    EVENT_RESPONSE_ISSUED,
    log_audit_event,
)
from ..models.binding import KeyPair, ServiceBinding
from ..models.principal import Principal
from ..models.response import PostResponse
from ..services.registry import ServicesManager
from ..utils.clock import Clock
from ..utils.exceptions import IdentityResolutionError, SAMLIdPError
from ..utils.ids import IdGenerator
from .assertion_builder import build_assertion, resolve_username, serialize_assertion
from .dispatcher import dispatch
from .request_decoder import decode_authn_request
from .request_parser import extract_request_correlation
from .signer import ResponseSigner

logger = logging.getLogger(__name__)


def create_binding_from_request(
    saml_request: Optional[str],
    relay_state: Optional[str],
    key_pair: KeyPair,
) -> Optional[ServiceBinding]:
    """Create a ServiceBinding from the SAMLRequest and RelayState parameters.

    Args:
        saml_request: Encoded SAMLRequest parameter (may be None/empty)
        relay_state: RelayState parameter, passed through untouched
        key_pair: Key pair the eventual response will be signed with

    Returns:
        ServiceBinding, or None when no usable request is present
    """
    correlation = extract_request_correlation(decode_authn_request(saml_request))
    if correlation is None:
        log_audit_event(EVENT_REQUEST_ABSENT, {"status": "absent"})
        return None

    binding = ServiceBinding.from_request(correlation, relay_token=relay_state, key_pair=key_pair)
    log_audit_event(EVENT_BINDING_CREATED, {"status": "success", **binding.to_audit_dict()})
    return binding


def issue_response(
    binding: ServiceBinding,
    services_manager: ServicesManager,
    principal: Optional[Principal] = None,
    clock: Optional[Clock] = None,
    id_generator: Optional[IdGenerator] = None,
    settings: Optional[IdPConfig] = None,
) -> PostResponse:
    """Build, sign and package the SAML response for an exchange.

    Every failure is audited as RESPONSE_FAILED before it is re-raised.

    Args:
        binding: Exchange being answered
        services_manager: Registry used to resolve the username policy
        principal: Authenticated principal (defaults to binding.principal)
        clock: Time source for the response
        id_generator: Source of response/assertion IDs
        settings: IdP response settings

    Returns:
        PostResponse with SAMLResponse and RelayState

    Raises:
        UnregisteredServiceError: Service is not registered
        IdentityResolutionError: No principal, or the policy fails or yields
            no username
        SigningError: Response could not be signed
        ValidationError: Unsupported signature algorithm in settings    """
    settings = settings or IdPConfig()
    principal = principal or binding.principal
    start = time.perf_counter()

    try:
        if principal is None:
            raise IdentityResolutionError(
                f"No authenticated principal available for service {binding.id}.",
                service_id=binding.id,
            )

        username = resolve_username(binding, principal, services_manager)
        document = build_assertion(
            binding,
            username,
            clock=clock,
            id_generator=id_generator,
            settings=settings,
        )
        signer = ResponseSigner(binding.key_pair, settings.signature_algorithm)
        signed_xml = signer.sign(serialize_assertion(document))
        response = dispatch(signed_xml, binding, encode=settings.encode_response)

    except SAMLIdPError as e:
        log_audit_event(
            EVENT_RESPONSE_FAILED,
            {
                "status": "failure",
                "service_id": binding.id,
                "correlation_id": binding.correlation_id or "",
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        raise

    log_audit_event(
        EVENT_RESPONSE_ISSUED,
        {
            "status": "success",
            "service_id": binding.id,
            "correlation_id": binding.correlation_id or "",
            "response_id": document.response_id,
            "duration": time.perf_counter() - start,
        },
    )
    return response
