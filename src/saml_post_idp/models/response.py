"""Outbound delivery model.

The transport layer turns a PostResponse into an auto-submitting HTML form
(or any equivalent redirect-submission mechanism).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

PARAMETER_SAML_RESPONSE = "SAMLResponse"
PARAMETER_RELAY_STATE = "RelayState"


class ResponseType(Enum):
    """How the transport should deliver the response."""

    POST = "POST"


@dataclass(frozen=True)
class PostResponse:
    """Payload handed to the transport.

    Attributes:
        url: Delivery URL (AssertionConsumerServiceURL)
        attributes: Form fields, exactly SAMLResponse and RelayState
        response_type: Delivery mechanism
    """

    url: str
    attributes: Dict[str, str] = field(default_factory=dict)
    response_type: ResponseType = ResponseType.POST

    @property
    def saml_response(self) -> str:
        return self.attributes[PARAMETER_SAML_RESPONSE]

    @property
    def relay_state(self) -> str:
        return self.attributes.get(PARAMETER_RELAY_STATE, "")
