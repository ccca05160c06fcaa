"""SAML 2.0 request correlation, response construction, signing and delivery.

This module provides functionality for:
- Decoding inbound AuthnRequests and extracting the ACS URL and request ID
- Building SAML 2.0 responses for an authenticated principal
- Signing responses with XML Signature (using SignXML)
- Verifying signed responses
- Packaging responses for HTTP-POST delivery
"""

from saml_post_idp.saml.assertion_builder import (
    build_assertion,
    resolve_username,
    serialize_assertion,
    to_element,
)
from saml_post_idp.saml.dispatcher import dispatch, render_post_form
from saml_post_idp.saml.exchange import create_binding_from_request, issue_response
from saml_post_idp.saml.key_manager import (
    generate_key_pair,
    load_key_pair,
    load_key_pair_from_config,
    load_pkcs12_key_pair,
    write_key_pair,
)
from saml_post_idp.saml.request_decoder import decode_authn_request, encode_authn_request
from saml_post_idp.saml.request_parser import extract_request_correlation
from saml_post_idp.saml.signer import ResponseSigner
from saml_post_idp.saml.verifier import ResponseVerifier, VerifiedResponse

__all__ = [
    # Inbound request handling
    "decode_authn_request",
    "encode_authn_request",
    "extract_request_correlation",
    "create_binding_from_request",
    # Response construction
    "build_assertion",
    "resolve_username",
    "serialize_assertion",
    "to_element",
    # Signing and verification
    "ResponseSigner",
    "ResponseVerifier",
    "VerifiedResponse",
    # Delivery
    "dispatch",
    "render_post_form",
    "issue_response",
    # Key material
    "generate_key_pair",
    "load_key_pair",
    "load_key_pair_from_config",
    "load_pkcs12_key_pair",
    "write_key_pair",
]
