"""Data models for the SAML 2.0 response/assertion being issued.

These are ephemeral values: built per exchange, serialized, signed and
dropped. Every "now" field holds the same captured instant.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

# SAML 2.0 namespaces
SAML_NS = "urn:oasis:names:tc:SAML:2.0:assertion"
SAMLP_NS = "urn:oasis:names:tc:SAML:2.0:protocol"

STATUS_SUCCESS = "urn:oasis:names:tc:SAML:2.0:status:Success"
NAMEID_FORMAT_EMAIL = "urn:oasis:names:tc:SAML:1.1:nameid-format:emailAddress"
CONFIRMATION_METHOD_BEARER = "urn:oasis:names:tc:SAML:2.0:cm:bearer"
AUTHN_CONTEXT_PASSWORD = "urn:oasis:names:tc:SAML:2.0:ac:classes:Password"


@dataclass(frozen=True)
class Conditions:
    """Validity window and audience of the assertion.

    Attributes:
        not_before: Lower bound of the window (fixed historical constant)
        not_on_or_after: Upper bound of the window (construction time)
        audience: Service id the assertion is intended for
    """

    not_before: datetime
    not_on_or_after: datetime
    audience: str


@dataclass(frozen=True)
class SubjectConfirmation:
    """Bearer confirmation of the subject.

    Attributes:
        method: Confirmation method URI
        recipient: Service id the assertion may be delivered to
        not_on_or_after: Confirmation expiry (construction time)
        in_response_to: ID of the inbound request; None omits the attribute
    """

    method: str
    recipient: str
    not_on_or_after: datetime
    in_response_to: Optional[str] = None


@dataclass(frozen=True)
class Subject:
    """Assertion subject.

    Attributes:
        name_id: Resolved username
        name_id_format: NameID format URI
        confirmation: Subject confirmation
    """

    name_id: str
    name_id_format: str
    confirmation: SubjectConfirmation


@dataclass(frozen=True)
class AuthnStatement:
    """Authentication statement.

    Attributes:
        authn_instant: When authentication happened (construction time)
        context_class_ref: Authentication context class URI
    """

    authn_instant: datetime
    context_class_ref: str


@dataclass(frozen=True)
class AssertionDocument:
    """Complete unsigned SAML 2.0 Response carrying one assertion.

    Attributes:
        response_id: Random ID of the outer samlp:Response
        assertion_id: Random ID of the saml:Assertion (independent of response_id)
        issue_instant: Response IssueInstant (construction time)
        in_response_to: Response-level InResponseTo; None omits the attribute
        status_code: Top-level status code URI
        issuer: IdP entity id
        assertion_issue_instant: Assertion IssueInstant
        conditions: Conditions element
        subject: Subject element
        authn_statement: AuthnStatement element
    """

    response_id: str
    assertion_id: str
    issue_instant: datetime
    in_response_to: Optional[str]
    status_code: str
    issuer: str
    assertion_issue_instant: datetime
    conditions: Conditions
    subject: Subject
    authn_statement: AuthnStatement
