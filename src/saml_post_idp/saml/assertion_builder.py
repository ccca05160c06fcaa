"""SAML 2.0 Response/Assertion construction.

Builds the unsigned response for one exchange from a ServiceBinding and a
resolved username. Construction is a set of pure functions: the clock and
the ID generator are passed in, and the clock is read exactly once so that
every "now" field of the document carries the same instant.
"""

import logging
from typing import Optional

from lxml import etree

from ..config.schema import IdPConfig
from ..models.assertion import (
    AUTHN_CONTEXT_PASSWORD,
    CONFIRMATION_METHOD_BEARER,
    NAMEID_FORMAT_EMAIL,
    SAML_NS,
    SAMLP_NS,
    STATUS_SUCCESS,
    AssertionDocument,
    AuthnStatement,
    Conditions,
    Subject,
    SubjectConfirmation,
)
from ..models.binding import ServiceBinding
from ..models.principal import Principal
from ..services.registry import ServicesManager
from ..utils.clock import Clock, SystemClock, format_saml_instant
from ..utils.exceptions import (
    IdentityResolutionError,
    UnregisteredServiceError,
    ValidationError,
)
from ..utils.ids import IdGenerator, SecureIdGenerator

logger = logging.getLogger(__name__)

NSMAP = {
    "samlp": SAMLP_NS,
    "saml": SAML_NS,
}


def resolve_username(
    binding: ServiceBinding,
    principal: Principal,
    services_manager: ServicesManager,
) -> str:
    """Resolve the NameID value for a principal through the service's policy.

    Args:
        binding: Exchange the assertion is built for
        principal: Authenticated principal
        services_manager: Registry of service definitions

    Returns:
        Non-empty username

    Raises:
        UnregisteredServiceError: No service definition matches binding.id
        IdentityResolutionError: The username policy failed or returned
            nothing usable
    """
    service = services_manager.find_service_by(binding)
    if service is None:
        logger.error(f"No registered service found for {binding.id}")
        raise UnregisteredServiceError(
            f"Service {binding.id} is not registered. "
            f"Cannot issue a SAML response to an unregistered service.",
            service_id=binding.id,
        )

    try:
        username = service.resolve_username(principal, binding)
    except Exception as e:
        logger.error(f"Username policy for service {binding.id} failed: {e}")
        raise IdentityResolutionError(
            f"Username policy for service {binding.id} failed: {type(e).__name__}: {e}",
            service_id=binding.id,
        ) from e

    if username is None or not str(username).strip():
        logger.error(
            f"Username policy for service {binding.id} returned no identifier"
        )
        raise IdentityResolutionError(
            f"Username policy for service {binding.id} could not resolve an "
            f"identifier for the authenticated principal.",
            service_id=binding.id,
        )

    return str(username).strip()


def build_assertion(
    binding: ServiceBinding,
    username: str,
    clock: Optional[Clock] = None,
    id_generator: Optional[IdGenerator] = None,
    settings: Optional[IdPConfig] = None,
) -> AssertionDocument:
    """Build the unsigned response document for an exchange.

    Args:
        binding: Exchange the response answers
        username: Resolved NameID value
        clock: Time source (read exactly once)
        id_generator: Source of the response and assertion IDs
        settings: Issuer and fixed NotBefore

    Returns:
        AssertionDocument ready for serialization

    Raises:
        ValidationError: If username is empty

    Example:
        >>> document = build_assertion(binding, "alice@example.org", clock=FixedClock(now))
        >>> document.conditions.not_on_or_after == document.authn_statement.authn_instant
        True
    """
    if not username:
        raise ValidationError("username must be a non-empty string")

    clock = clock or SystemClock()
    id_generator = id_generator or SecureIdGenerator()
    settings = settings or IdPConfig()

    now = clock.now()
    response_id = id_generator.generate()
    assertion_id = id_generator.generate()

    document = AssertionDocument(
        response_id=response_id,
        assertion_id=assertion_id,
        issue_instant=now,
        in_response_to=binding.correlation_id,
        status_code=STATUS_SUCCESS,
        issuer=settings.issuer,
        assertion_issue_instant=settings.not_before,
        conditions=Conditions(
            not_before=settings.not_before,
            not_on_or_after=now,
            audience=binding.id,
        ),
        subject=Subject(
            name_id=username,
            name_id_format=NAMEID_FORMAT_EMAIL,
            confirmation=SubjectConfirmation(
                method=CONFIRMATION_METHOD_BEARER,
                recipient=binding.id,
                not_on_or_after=now,
                in_response_to=binding.correlation_id,
            ),
        ),
        authn_statement=AuthnStatement(
            authn_instant=now,
            context_class_ref=AUTHN_CONTEXT_PASSWORD,
        ),
    )

    logger.debug(
        f"Built SAML response {response_id} (assertion {assertion_id}) "
        f"for service {binding.id}"
    )
    return document


def _saml(tag: str) -> str:
    return f"{{{SAML_NS}}}{tag}"


def _samlp(tag: str) -> str:
    return f"{{{SAMLP_NS}}}{tag}"


def _add_subject(assertion: etree._Element, subject: Subject) -> None:
    subject_elem = etree.SubElement(assertion, _saml("Subject"))

    name_id = etree.SubElement(
        subject_elem, _saml("NameID"), attrib={"Format": subject.name_id_format}
    )
    name_id.text = subject.name_id

    confirmation = subject.confirmation
    confirmation_elem = etree.SubElement(
        subject_elem, _saml("SubjectConfirmation"), attrib={"Method": confirmation.method}
    )

    data_attrib = {
        "Recipient": confirmation.recipient,
        "NotOnOrAfter": format_saml_instant(confirmation.not_on_or_after),
    }
    # Bare bindings have no request to answer: omit the attribute entirely
    if confirmation.in_response_to:
        data_attrib["InResponseTo"] = confirmation.in_response_to
    etree.SubElement(confirmation_elem, _saml("SubjectConfirmationData"), attrib=data_attrib)


def _add_conditions(assertion: etree._Element, conditions: Conditions) -> None:
    conditions_elem = etree.SubElement(
        assertion,
        _saml("Conditions"),
        attrib={
            "NotBefore": format_saml_instant(conditions.not_before),
            "NotOnOrAfter": format_saml_instant(conditions.not_on_or_after),
        },
    )
    restriction = etree.SubElement(conditions_elem, _saml("AudienceRestriction"))
    audience = etree.SubElement(restriction, _saml("Audience"))
    audience.text = conditions.audience


def _add_authn_statement(assertion: etree._Element, statement: AuthnStatement) -> None:
    statement_elem = etree.SubElement(
        assertion,
        _saml("AuthnStatement"),
        attrib={"AuthnInstant": format_saml_instant(statement.authn_instant)},
    )
    context = etree.SubElement(statement_elem, _saml("AuthnContext"))
    class_ref = etree.SubElement(context, _saml("AuthnContextClassRef"))
    class_ref.text = statement.context_class_ref


def to_element(document: AssertionDocument) -> etree._Element:
    """Render an AssertionDocument as a samlp:Response element tree.

    Args:
        document: Document to render

    Returns:
        lxml Element of the samlp:Response
    """
    response_attrib = {
        "ID": document.response_id,
        "Version": "2.0",
        "IssueInstant": format_saml_instant(document.issue_instant),
    }
    if document.in_response_to:
        response_attrib["InResponseTo"] = document.in_response_to

    response = etree.Element(_samlp("Response"), nsmap=NSMAP, attrib=response_attrib)

    status = etree.SubElement(response, _samlp("Status"))
    etree.SubElement(status, _samlp("StatusCode"), attrib={"Value": document.status_code})

    assertion = etree.SubElement(
        response,
        _saml("Assertion"),
        attrib={
            "ID": document.assertion_id,
            "Version": "2.0",
            "IssueInstant": format_saml_instant(document.assertion_issue_instant),
        },
    )
    issuer = etree.SubElement(assertion, _saml("Issuer"))
    issuer.text = document.issuer

    _add_subject(assertion, document.subject)
    _add_conditions(assertion, document.conditions)
    _add_authn_statement(assertion, document.authn_statement)

    return response


def serialize_assertion(document: AssertionDocument) -> str:
    """Serialize an AssertionDocument to XML text (no XML declaration)."""
    xml = etree.tostring(to_element(document), encoding="unicode")
    logger.debug(f"Generated SAML response: {xml}")
    return xml
