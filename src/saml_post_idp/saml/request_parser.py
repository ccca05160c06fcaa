"""Extraction of correlation data from an AuthnRequest.

Only the root element's ``AssertionConsumerServiceURL`` and ``ID``
attributes are read. No schema validation is performed: any well-formed
document carrying a delivery URL is accepted.
"""

import logging
from typing import Optional

from lxml import etree

from ..models.binding import RequestCorrelation

logger = logging.getLogger(__name__)

ATTR_ASSERTION_CONSUMER_SERVICE_URL = "AssertionConsumerServiceURL"
ATTR_ID = "ID"


def _secure_parser() -> etree.XMLParser:
    """XML parser that never resolves entities or touches the network."""
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
        remove_comments=True,
    )


def extract_request_correlation(xml: Optional[str]) -> Optional[RequestCorrelation]:
    """Read the delivery URL and request ID from AuthnRequest markup.

    Never raises for bad input. Missing, empty or malformed markup, and
    markup without an AssertionConsumerServiceURL, all yield None.

    Args:
        xml: Decoded AuthnRequest XML

    Returns:
        RequestCorrelation, or None if no usable request is present

    Example:
        >>> correlation = extract_request_correlation(
        ...     '<AuthnRequest ID="_abc123" '
        ...     'AssertionConsumerServiceURL="https://svc.example.org/acs"/>'
        ... )
        >>> (correlation.delivery_url, correlation.correlation_id)
        ('https://svc.example.org/acs', '_abc123')
    """
    if not xml or not xml.strip():
        return None

    try:
        root = etree.fromstring(xml.encode("utf-8"), parser=_secure_parser())
    except (etree.XMLSyntaxError, UnicodeEncodeError) as e:
        logger.debug(f"AuthnRequest is not well-formed XML: {e}")
        return None

    delivery_url = root.get(ATTR_ASSERTION_CONSUMER_SERVICE_URL)
    request_id = root.get(ATTR_ID)

    if not delivery_url:
        logger.debug(
            f"AuthnRequest root <{etree.QName(root).localname}> has no "
            f"{ATTR_ASSERTION_CONSUMER_SERVICE_URL} attribute"
        )
        return None

    logger.debug(f"Extracted AuthnRequest: ID={request_id}, ACS={delivery_url}")
    return RequestCorrelation(delivery_url=delivery_url, correlation_id=request_id or None)
