"""Unit tests for HTTP-POST response packaging."""

import base64

import pytest

from saml_post_idp.models.binding import ServiceBinding
from saml_post_idp.models.response import ResponseType
from saml_post_idp.saml.dispatcher import dispatch, render_post_form
from saml_post_idp.utils.exceptions import ValidationError

ACS_URL = "https://svc.example.org/acs"
SIGNED = '<samlp:Response ID="_r">signed</samlp:Response>'


class TestDispatch:
    """Test dispatch()."""

    def test_exactly_two_fields(self, binding):
        response = dispatch(SIGNED, binding)

        assert response.url == ACS_URL
        assert response.response_type is ResponseType.POST
        assert set(response.attributes) == {"SAMLResponse", "RelayState"}
        assert response.saml_response == SIGNED
        assert response.relay_state == "xyz"

    def test_absent_relay_state_is_empty_field(self, key_pair):
        response = dispatch(SIGNED, ServiceBinding.bare(ACS_URL, key_pair))

        assert response.attributes["RelayState"] == ""

    def test_relay_state_is_unmodified(self, key_pair):
        relay = "a b&c=%2F<d>"
        response = dispatch(SIGNED, ServiceBinding.bare(ACS_URL, key_pair, relay_token=relay))

        assert response.relay_state == relay

    def test_encoded_response(self, binding):
        response = dispatch(SIGNED, binding, encode=True)

        assert base64.b64decode(response.saml_response).decode("utf-8") == SIGNED

    def test_targets_delivery_url_not_service_id(self, key_pair):
        binding = ServiceBinding.bare(ACS_URL, key_pair, service_id="https://svc.example.org/")

        assert dispatch(SIGNED, binding).url == ACS_URL

    def test_empty_document_rejected(self, binding):
        with pytest.raises(ValidationError):
            dispatch("", binding)


class TestRenderPostForm:
    """Test the auto-submit form."""

    def test_form_posts_to_delivery_url(self, binding):
        form = render_post_form(dispatch(SIGNED, binding))

        assert f'action="{ACS_URL}"' in form
        assert 'method="post"' in form
        assert 'name="SAMLResponse"' in form
        assert 'name="RelayState" value="xyz"' in form

    def test_values_are_html_escaped(self, key_pair):
        binding = ServiceBinding.bare(ACS_URL, key_pair, relay_token='"><script>')
        form = render_post_form(dispatch(SIGNED, binding))

        assert "<script>" not in form
        assert "&lt;samlp:Response" in form
        assert "&quot;&gt;&lt;script&gt;" in form
