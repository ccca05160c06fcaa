"""XML signing module using signxml library.

This module signs serialized SAML responses with an enveloped XML Signature
(XMLDSig) over the samlp:Response root, using RSA-SHA256 by default. The
signing certificate, or the bare public key when no certificate is
available, is embedded in KeyInfo so the recipient can verify the response.
"""

import logging

from cryptography.hazmat.primitives import serialization
from lxml import etree
from signxml import DigestAlgorithm, SignatureMethod, XMLSigner
from signxml.exceptions import InvalidInput

from ..models.assertion import SAML_NS
from ..models.binding import KeyPair
from ..utils.exceptions import SigningError, ValidationError

logger = logging.getLogger(__name__)

# XML Signature namespace
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

ALGORITHM_MAP = {
    "RSA-SHA256": (SignatureMethod.RSA_SHA256, DigestAlgorithm.SHA256),
    "RSA-SHA512": (SignatureMethod.RSA_SHA512, DigestAlgorithm.SHA512),
}


class ResponseSigner:
    """Sign SAML responses with XML digital signatures.

    Attributes:
        key_pair: Key pair used for signing
        signature_algorithm: Signature algorithm (RSA-SHA256, RSA-SHA512)
        signer: XMLSigner instance configured with signature algorithm

    Example:
        >>> signer = ResponseSigner(key_pair)
        >>> signed_xml = signer.sign(serialize_assertion(document))
        >>> assert "<ds:Signature" in signed_xml
    """

    def __init__(self, key_pair: KeyPair, signature_algorithm: str = "RSA-SHA256") -> None:
        """Initialize response signer.

        Args:
            key_pair: Key pair holding the private signing key
            signature_algorithm: Signature algorithm (RSA-SHA256, RSA-SHA512)

        Raises:
            ValidationError: If signature algorithm is unsupported
        """
        if signature_algorithm not in ALGORITHM_MAP:
            raise ValidationError(
                f"Unsupported signature algorithm: {signature_algorithm}. "
                f"Supported algorithms: {', '.join(ALGORITHM_MAP.keys())}"
            )

        self.key_pair = key_pair
        self.signature_algorithm = signature_algorithm

        signature_method, digest_algorithm = ALGORITHM_MAP[signature_algorithm]
        self.signer = XMLSigner(
            signature_algorithm=signature_method,
            digest_algorithm=digest_algorithm,
        )

        logger.debug(
            f"ResponseSigner initialized: algorithm={signature_algorithm}, "
            f"certificate={key_pair.certificate_subject or 'none (KeyValue)'}"
        )

    def _key_material(self) -> tuple:
        key_pem = self.key_pair.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        cert_pem = None
        if self.key_pair.certificate is not None:
            cert_pem = self.key_pair.certificate.public_bytes(
                encoding=serialization.Encoding.PEM
            )
        return key_pem, cert_pem

    @staticmethod
    def _insert_placeholder(response_element: etree._Element) -> None:
        """Reserve the schema position of ds:Signature: after Issuer, before Status.

        signxml fills an empty Signature carrying Id="placeholder" in place
        instead of appending the signature as the last child.
        """
        placeholder = etree.Element(
            f"{{{DS_NS}}}Signature", nsmap={"ds": DS_NS}, attrib={"Id": "placeholder"}
        )
        issuer = response_element.find(f"{{{SAML_NS}}}Issuer")
        position = response_element.index(issuer) + 1 if issuer is not None else 0
        response_element.insert(position, placeholder)

    def sign(self, response_xml: str) -> str:
        """Sign a serialized SAML response.

        Args:
            response_xml: Unsigned samlp:Response XML

        Returns:
            Signed XML with the ds:Signature enveloped in the Response root,
            ahead of samlp:Status

        Raises:
            SigningError: If the XML cannot be parsed, the key material is
                unusable, or the signature cannot be produced. Nothing is
                returned in that case.
        """
        try:
            response_element = etree.fromstring(response_xml.encode("utf-8"))
            self._insert_placeholder(response_element)
            key_pem, cert_pem = self._key_material()

            if cert_pem is not None:
                signed_element = self.signer.sign(response_element, key=key_pem, cert=cert_pem)
            else:
                # No certificate: signxml embeds the RSA KeyValue instead
                signed_element = self.signer.sign(response_element, key=key_pem)

            sig_value_elem = signed_element.find(".//ds:SignatureValue", {"ds": DS_NS})
            if sig_value_elem is None or not sig_value_elem.text:
                raise SigningError(
                    "Failed to extract SignatureValue from signed response. "
                    "This indicates a signing operation error."
                )

            signed_xml = etree.tostring(signed_element, encoding="unicode")

        except SigningError:
            logger.error("Signing produced no SignatureValue")
            raise

        except etree.XMLSyntaxError as e:
            logger.error(f"Invalid XML structure in SAML response: {e}")
            raise SigningError(
                f"Invalid XML structure in SAML response: {e}. "
                f"Ensure the response is well-formed XML."
            ) from e

        except InvalidInput as e:
            logger.error(f"Invalid key material for signing: {e}")
            raise SigningError(
                f"Invalid private key or certificate: {e}. Verify the key pair is correct."
            ) from e

        except Exception as e:
            logger.error(f"Unexpected error during SAML response signing: {e}")
            raise SigningError(
                f"Unexpected error during SAML response signing: {e}. "
                f"Check key material and XML content."
            ) from e

        logger.info(f"SAML response signed with {self.signature_algorithm}")
        return signed_xml
