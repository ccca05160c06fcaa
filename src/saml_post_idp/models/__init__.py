"""Models module.

This module provides the dataclasses exchanged between the SAML components.
"""

from saml_post_idp.models.assertion import AssertionDocument
from saml_post_idp.models.binding import (
    DeliveryTarget,
    KeyPair,
    RequestCorrelation,
    ServiceBinding,
)
from saml_post_idp.models.principal import Principal
from saml_post_idp.models.response import PostResponse, ResponseType

__all__ = [
    "AssertionDocument",
    "DeliveryTarget",
    "KeyPair",
    "PostResponse",
    "Principal",
    "RequestCorrelation",
    "ResponseType",
    "ServiceBinding",
]
