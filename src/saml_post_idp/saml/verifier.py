"""XML signature verification module using signxml library.

Verifies signed SAML responses against the paired certificate or public key
and extracts the fields a relying service would check. Used by the CLI and
to confirm that issued responses round-trip.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import serialization
from lxml import etree
from signxml import XMLVerifier
from signxml.exceptions import InvalidCertificate, InvalidDigest, InvalidInput, InvalidSignature

from ..models.assertion import SAML_NS, SAMLP_NS
from ..models.binding import KeyPair
from ..utils.exceptions import SignatureVerificationError

logger = logging.getLogger(__name__)

# XML Signature namespace
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

NS = {"ds": DS_NS, "saml": SAML_NS, "samlp": SAMLP_NS}


@dataclass(frozen=True)
class VerifiedResponse:
    """Fields read from a response whose signature checked out.

    Attributes:
        response_id: Response ID
        in_response_to: Response InResponseTo (None when absent)
        name_id: Subject NameID
        audience: Conditions audience
        subject_in_response_to: SubjectConfirmationData InResponseTo
        not_on_or_after: Conditions NotOnOrAfter (string)
        signed_xml: The signed content as returned by signxml
    """

    response_id: Optional[str]
    in_response_to: Optional[str]
    name_id: Optional[str]
    audience: Optional[str]
    subject_in_response_to: Optional[str]
    not_on_or_after: Optional[str]
    signed_xml: str


def _text(element: etree._Element, path: str) -> Optional[str]:
    found = element.find(path, NS)
    return found.text if found is not None else None


def _attr(element: etree._Element, path: str, name: str) -> Optional[str]:
    found = element.find(path, NS)
    return found.get(name) if found is not None else None


def _b64_strict(value: Optional[str], field: str) -> bytes:
    """Decode base64 text that must be the canonical encoding of its bytes."""
    compact = "".join((value or "").split())
    try:
        decoded = base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise SignatureVerificationError(f"{field} is not valid base64: {e}") from e
    # Non-zero padding bits decode to the same bytes; reject them
    if not decoded or base64.b64encode(decoded).decode("ascii") != compact:
        raise SignatureVerificationError(f"{field} is not canonical base64")
    return decoded


def _b64_int(value: str, field: str) -> int:
    return int.from_bytes(_b64_strict(value, field), "big")


class ResponseVerifier:
    """Verify XML signatures on signed SAML responses.

    Attributes:
        key_pair: Key pair whose public half the signature must match

    Example:
        >>> verifier = ResponseVerifier(key_pair)
        >>> verified = verifier.verify(signed_xml)
        >>> verified.name_id
        'alice@example.org'
    """

    def __init__(self, key_pair: KeyPair) -> None:
        self.key_pair = key_pair

    def _check_key_value(self, signature: etree._Element) -> None:
        """Ensure an embedded RSA KeyValue is our public key."""
        modulus = _text(signature, ".//ds:KeyValue/ds:RSAKeyValue/ds:Modulus")
        exponent = _text(signature, ".//ds:KeyValue/ds:RSAKeyValue/ds:Exponent")
        if modulus is None or exponent is None:
            raise SignatureVerificationError(
                "Signature carries no RSA KeyValue to check against the public key."
            )

        numbers = self.key_pair.public_key.public_numbers()
        if _b64_int(modulus, "Modulus") != numbers.n or _b64_int(exponent, "Exponent") != numbers.e:
            raise SignatureVerificationError(
                "Signature was made with a different key than the expected public key."
            )

    def _check_certificate(self, signature: etree._Element) -> None:
        """Ensure the embedded X509Certificate is byte-for-byte our certificate.

        signxml checks the signature against the configured certificate only,
        so the copy carried in KeyInfo is compared here.
        """
        embedded = signature.findall("ds:KeyInfo/ds:X509Data/ds:X509Certificate", NS)
        if len(embedded) != 1:
            raise SignatureVerificationError(
                f"Signature must carry exactly one X509Certificate, found {len(embedded)}"
            )

        expected = self.key_pair.certificate.public_bytes(serialization.Encoding.DER)
        if _b64_strict(embedded[0].text, "X509Certificate") != expected:
            raise SignatureVerificationError(
                "Embedded certificate does not match the expected signing certificate."
            )

    def verify(self, signed_xml: str) -> VerifiedResponse:
        """Verify the enveloped signature of a signed response.

        Args:
            signed_xml: Signed samlp:Response XML

        Returns:
            VerifiedResponse with the fields of the signed content

        Raises:
            SignatureVerificationError: Missing signature, tampered content,
                wrong key, or unparseable XML
        """
        try:
            signed_element = etree.fromstring(signed_xml.encode("utf-8"))

            signature = signed_element.find("ds:Signature", NS)
            if signature is None:
                raise SignatureVerificationError("No Signature element found in SAML response")
            _b64_strict(_text(signature, "ds:SignatureValue"), "SignatureValue")

            verifier = XMLVerifier()
            if self.key_pair.certificate is not None:
                self._check_certificate(signature)
                cert_pem = self.key_pair.certificate.public_bytes(
                    encoding=serialization.Encoding.PEM
                )
                result = verifier.verify(signed_element, x509_cert=cert_pem)
            else:
                self._check_key_value(signature)
                result = verifier.verify(signed_element, require_x509=False)

        except SignatureVerificationError:
            raise

        except (InvalidSignature, InvalidDigest, InvalidCertificate) as e:
            logger.warning(
                f"SAML response signature verification failed: {e}. "
                f"Response may be tampered or signed with a different key."
            )
            raise SignatureVerificationError(
                f"SAML response signature verification failed: {e}"
            ) from e

        except etree.XMLSyntaxError as e:
            logger.warning(f"Invalid XML in signed SAML response: {e}")
            raise SignatureVerificationError(
                f"Invalid XML in signed SAML response: {e}. XML may be corrupted."
            ) from e

        except (InvalidInput, ValueError) as e:
            logger.warning(f"Malformed signature in SAML response: {e}")
            raise SignatureVerificationError(
                f"Malformed signature in SAML response: {e}"
            ) from e

        except Exception as e:
            logger.warning(f"Unexpected error during signature verification: {e}")
            raise SignatureVerificationError(
                f"Unexpected error during signature verification: {e}"
            ) from e

        # Read fields only from what the signature actually covers
        signed = result.signed_xml
        if signed is None:
            raise SignatureVerificationError("Signature does not cover the SAML response")

        verified = VerifiedResponse(
            response_id=signed.get("ID"),
            in_response_to=signed.get("InResponseTo"),
            name_id=_text(signed, "saml:Assertion/saml:Subject/saml:NameID"),
            audience=_text(
                signed, "saml:Assertion/saml:Conditions/saml:AudienceRestriction/saml:Audience"
            ),
            subject_in_response_to=_attr(
                signed,
                "saml:Assertion/saml:Subject/saml:SubjectConfirmation/saml:SubjectConfirmationData",
                "InResponseTo",
            ),
            not_on_or_after=_attr(signed, "saml:Assertion/saml:Conditions", "NotOnOrAfter"),
            signed_xml=etree.tostring(signed, encoding="unicode"),
        )
        logger.info(f"Signature verification successful: {verified.response_id}")
        return verified
