"""Unit tests for inbound AuthnRequest decoding and correlation extraction.

Tests cover:
- Base64 and base64+DEFLATE decoding
- Extraction of AssertionConsumerServiceURL and ID
- Absent/malformed payloads resolving to None without raising
"""

import base64
from xml.sax.saxutils import quoteattr

import pytest

from saml_post_idp.saml.request_decoder import decode_authn_request, encode_authn_request
from saml_post_idp.saml.request_parser import extract_request_correlation

ACS_URL = "https://svc.example.org/acs"


class TestDecodeAuthnRequest:
    """Test SAMLRequest parameter decoding."""

    def test_decode_deflated_request(self, authn_request_xml):
        """Test HTTP-Redirect style (deflated) request decodes to the original XML."""
        encoded = encode_authn_request(authn_request_xml, deflate=True)

        assert decode_authn_request(encoded) == authn_request_xml

    def test_decode_plain_base64_request(self, authn_request_xml):
        """Test HTTP-POST style (not deflated) request falls back to raw bytes."""
        encoded = encode_authn_request(authn_request_xml, deflate=False)

        assert decode_authn_request(encoded) == authn_request_xml

    def test_decode_tolerates_line_breaks(self, authn_request_xml):
        """Test base64 wrapped over several lines is accepted."""
        encoded = encode_authn_request(authn_request_xml)
        wrapped = "\n".join(encoded[i:i + 20] for i in range(0, len(encoded), 20))

        assert decode_authn_request(wrapped) == authn_request_xml

    @pytest.mark.parametrize("payload", [None, "", "   ", "\n"])
    def test_decode_empty_payload_is_absent(self, payload):
        """Test missing or blank parameter yields None."""
        assert decode_authn_request(payload) is None

    def test_decode_invalid_base64_is_absent(self):
        """Test non-base64 payload yields None instead of raising."""
        assert decode_authn_request("not base64 at all!!") is None

    def test_decode_non_utf8_payload_is_absent(self):
        """Test binary payload that is not UTF-8 yields None."""
        encoded = base64.b64encode(b"\xff\xfe\xfa\x00\x81").decode("ascii")

        assert decode_authn_request(encoded) is None

    def test_decode_base64_of_whitespace_is_absent(self):
        """Test payload decoding to whitespace only yields None."""
        encoded = base64.b64encode(b"   ").decode("ascii")

        assert decode_authn_request(encoded) is None


class TestExtractRequestCorrelation:
    """Test ACS URL and request ID extraction."""

    def test_extract_example_request(self):
        """Test the canonical example request."""
        correlation = extract_request_correlation(
            f'<AuthnRequest ID="_abc123" AssertionConsumerServiceURL="{ACS_URL}"/>'
        )

        assert correlation is not None
        assert correlation.delivery_url == ACS_URL
        assert correlation.correlation_id == "_abc123"

    def test_extract_namespaced_request(self, authn_request_xml):
        """Test attributes are read off a namespaced samlp:AuthnRequest root."""
        correlation = extract_request_correlation(authn_request_xml)

        assert (correlation.delivery_url, correlation.correlation_id) == (ACS_URL, "_abc123")

    @pytest.mark.parametrize(
        "url,request_id",
        [
            ("https://a.example.com/saml/acs", "id-1"),
            ("http://localhost:8080/acs?x=1&y=2", "_0123456789abcdef"),
            ("urn:example:consumer", "R"),
        ],
    )
    def test_extract_arbitrary_values(self, url, request_id):
        """Test any well-formed document with both attributes is accepted."""
        xml = f"<Anything ID={quoteattr(request_id)} AssertionConsumerServiceURL={quoteattr(url)}/>"
        correlation = extract_request_correlation(xml)

        assert (correlation.delivery_url, correlation.correlation_id) == (url, request_id)

    def test_extract_request_without_id(self):
        """Test a request without ID still yields a delivery URL."""
        correlation = extract_request_correlation(
            f'<AuthnRequest AssertionConsumerServiceURL="{ACS_URL}"/>'
        )

        assert correlation.delivery_url == ACS_URL
        assert correlation.correlation_id is None

    def test_extract_request_without_acs_url_is_absent(self):
        """Test a request without a delivery URL yields None."""
        assert extract_request_correlation('<AuthnRequest ID="_abc123"/>') is None

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "",
            "<AuthnRequest",
            "<a><b></a>",
            "plain text",
            '<AuthnRequest ID="_1" AssertionConsumerServiceURL="x"><unclosed>',
        ],
    )
    def test_extract_malformed_is_absent(self, payload):
        """Test malformed or empty markup yields None and never raises."""
        assert extract_request_correlation(payload) is None

    def test_extract_does_not_expand_external_entities(self, tmp_path):
        """Test external entities are not resolved into attribute values."""
        secret = tmp_path / "secret.txt"
        secret.write_text("top-secret")
        xml = (
            f'<!DOCTYPE r [<!ENTITY xxe SYSTEM "file://{secret}">]>'
            f'<AuthnRequest ID="_1" AssertionConsumerServiceURL="{ACS_URL}">&xxe;</AuthnRequest>'
        )

        correlation = extract_request_correlation(xml)

        assert correlation is not None
        assert "top-secret" not in correlation.delivery_url
