"""Decoding of the transport-encoded SAMLRequest parameter.

HTTP-Redirect binding requests are base64(raw DEFLATE(xml)); HTTP-POST
binding requests are plain base64(xml). Both are accepted.
"""

import base64
import binascii
import logging
import zlib
from typing import Optional

logger = logging.getLogger(__name__)


def _inflate(data: bytes) -> Optional[bytes]:
    """Inflate raw DEFLATE data, returning None if it is not deflated."""
    try:
        return zlib.decompress(data, -zlib.MAX_WBITS)
    except zlib.error:
        return None


def decode_authn_request(encoded_request: Optional[str]) -> Optional[str]:
    """Decode a SAMLRequest parameter into AuthnRequest markup.

    Never raises: a missing, undecodable or empty payload is reported as
    None so callers can treat it as an unsolicited (IdP-initiated) flow.

    Args:
        encoded_request: Raw SAMLRequest parameter value

    Returns:
        Decoded XML string, or None if nothing usable was found

    Example:
        >>> import base64
        >>> decode_authn_request(base64.b64encode(b"<AuthnRequest/>").decode())
        '<AuthnRequest/>'
        >>> decode_authn_request("") is None
        True
    """
    if not encoded_request or not encoded_request.strip():
        logger.debug("No SAMLRequest parameter present")
        return None

    try:
        # validate=True rejects whitespace, so line breaks are stripped first
        raw = base64.b64decode("".join(encoded_request.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"SAMLRequest is not valid base64: {e}")
        return None

    inflated = _inflate(raw)
    payload = inflated if inflated is not None else raw
    logger.debug(
        f"Decoded SAMLRequest ({'deflated' if inflated is not None else 'plain'}, "
        f"{len(payload)} bytes)"
    )

    try:
        xml = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.debug(f"Decoded SAMLRequest is not UTF-8 text: {e}")
        return None

    if not xml.strip():
        return None

    return xml


def encode_authn_request(xml: str, deflate: bool = True) -> str:
    """Encode AuthnRequest markup the way a service provider would.

    Args:
        xml: AuthnRequest XML
        deflate: Apply raw DEFLATE first (HTTP-Redirect binding)

    Returns:
        Base64 text suitable for a SAMLRequest parameter
    """
    data = xml.encode("utf-8")
    if deflate:
        compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -zlib.MAX_WBITS)
        data = compressor.compress(data) + compressor.flush()
    return base64.b64encode(data).decode("ascii")
