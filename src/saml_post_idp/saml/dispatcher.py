"""Packaging of the signed response for form-post delivery.

The payload carries exactly two fields, SAMLResponse and RelayState, and
targets the binding's delivery URL. Delivery itself belongs to the
transport layer; nothing here retries or buffers.
"""

import base64
import html
import logging

from ..models.binding import ServiceBinding
from ..models.response import (
    PARAMETER_RELAY_STATE,
    PARAMETER_SAML_RESPONSE,
    PostResponse,
    ResponseType,
)
from ..utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

POST_FORM_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Redirecting</title></head>
<body onload="document.forms[0].submit()">
<noscript><p>Your browser does not support JavaScript. Press Continue to proceed.</p></noscript>
<form method="post" action="{action}">
{fields}
<noscript><input type="submit" value="Continue"/></noscript>
</form>
</body>
</html>
"""


def dispatch(signed_document: str, binding: ServiceBinding, encode: bool = False) -> PostResponse:
    """Package a signed response for delivery to the service.

    Args:
        signed_document: Signed samlp:Response XML
        binding: Exchange being answered
        encode: Base64-encode the document (standard HTTP-POST binding form)

    Returns:
        PostResponse targeted at binding.delivery_url

    Raises:
        ValidationError: If signed_document is empty

    Example:
        >>> response = dispatch(signed_xml, binding)
        >>> sorted(response.attributes)
        ['RelayState', 'SAMLResponse']
    """
    if not signed_document:
        raise ValidationError("signed_document must be a non-empty signed response")

    saml_response = signed_document
    if encode:
        saml_response = base64.b64encode(signed_document.encode("utf-8")).decode("ascii")

    # Absent relay state is sent as an empty field
    relay_state = binding.relay_token if binding.relay_token is not None else ""

    response = PostResponse(
        url=binding.delivery_url,
        attributes={
            PARAMETER_SAML_RESPONSE: saml_response,
            PARAMETER_RELAY_STATE: relay_state,
        },
        response_type=ResponseType.POST,
    )
    logger.debug(f"Prepared POST response to {binding.delivery_url}")
    return response


def render_post_form(response: PostResponse) -> str:
    """Render an auto-submitting HTML form for a PostResponse.

    All values are HTML-escaped.
    """
    fields = "\n".join(
        f'<input type="hidden" name="{html.escape(name)}" value="{html.escape(value)}"/>'
        for name, value in response.attributes.items()
    )
    return POST_FORM_TEMPLATE.format(action=html.escape(response.url), fields=fields)
