"""Key material loading for response signing.

This module loads signing key pairs from PEM files or PKCS12 bundles and can
generate a self-signed RSA key pair for testing. Keys are only ever held in
memory; nothing here rotates or stores keys on its own.
"""

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from ..config.schema import KeysConfig
from ..models.binding import KeyPair
from ..utils.exceptions import KeyLoadError

logger = logging.getLogger(__name__)


def _read_file(path: Path, description: str) -> bytes:
    if not path.exists():
        raise KeyLoadError(
            f"{description} file not found: {path}. "
            f"Ensure the file exists and path is correct."
        )
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise KeyLoadError(f"Failed to read {description.lower()} file {path}: {e}") from e


def load_pem_private_key(key_path: Path, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
    """Load an RSA private key from a PEM file.

    Args:
        key_path: Path to PEM private key file
        password: Optional password for encrypted private key

    Returns:
        Loaded RSA private key

    Raises:
        KeyLoadError: If the key cannot be loaded or is not an RSA key
    """
    key_data = _read_file(key_path, "Private key")

    try:
        private_key = serialization.load_pem_private_key(key_data, password=password)
    except TypeError as e:
        raise KeyLoadError(
            f"Failed to load private key from {key_path}: Incorrect password. "
            f"If key is encrypted, provide correct password."
        ) from e
    except ValueError as e:
        raise KeyLoadError(
            f"Failed to load PEM private key from {key_path}: {e}. "
            f"Ensure file is valid PEM format and password is correct if encrypted."
        ) from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyLoadError(
            f"Private key in {key_path} is not an RSA key. "
            f"Only RSA keys are supported for response signing."
        )

    # Never log private key contents
    logger.info(f"Loaded PEM private key from: {key_path.name}")
    return private_key


def load_pem_public_key(key_path: Path) -> rsa.RSAPublicKey:
    """Load an RSA public key from a PEM file.

    Raises:
        KeyLoadError: If the key cannot be loaded or is not an RSA key
    """
    key_data = _read_file(key_path, "Public key")
    try:
        public_key = serialization.load_pem_public_key(key_data)
    except ValueError as e:
        raise KeyLoadError(f"Failed to load PEM public key from {key_path}: {e}") from e

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyLoadError(f"Public key in {key_path} is not an RSA key.")
    return public_key


def load_pem_certificate(cert_path: Path) -> x509.Certificate:
    """Load an X.509 certificate from a PEM file.

    Raises:
        KeyLoadError: If the certificate cannot be loaded
    """
    cert_data = _read_file(cert_path, "Certificate")
    try:
        cert = x509.load_pem_x509_certificate(cert_data)
    except ValueError as e:
        raise KeyLoadError(
            f"Failed to load PEM certificate from {cert_path}: {e}. "
            f"Ensure file is valid PEM format."
        ) from e

    logger.info(f"Loaded PEM certificate: {cert.subject.rfc4514_string()}")
    return cert


def load_key_pair(
    private_key_path: Path,
    public_key_path: Optional[Path] = None,
    certificate_path: Optional[Path] = None,
    password: Optional[bytes] = None,
) -> KeyPair:
    """Load a signing key pair from PEM files.

    The public key is taken from the certificate when one is given, else
    from public_key_path, else derived from the private key.

    Args:
        private_key_path: PEM private key
        public_key_path: Optional PEM public key
        certificate_path: Optional PEM certificate
        password: Optional private key password

    Returns:
        KeyPair

    Raises:
        KeyLoadError: If any file cannot be loaded
    """
    private_key = load_pem_private_key(private_key_path, password)

    certificate = None
    if certificate_path is not None:
        certificate = load_pem_certificate(certificate_path)
        public_key = certificate.public_key()
    elif public_key_path is not None:
        public_key = load_pem_public_key(public_key_path)
    else:
        public_key = private_key.public_key()

    return KeyPair(private_key=private_key, public_key=public_key, certificate=certificate)


def load_pkcs12_key_pair(bundle_path: Path, password: Optional[bytes] = None) -> KeyPair:
    """Load a signing key pair from a PKCS12 (.p12/.pfx) bundle.

    Raises:
        KeyLoadError: If the bundle cannot be opened or holds no key/certificate
    """
    bundle_data = _read_file(bundle_path, "PKCS12")
    try:
        private_key, certificate, _ = pkcs12.load_key_and_certificates(bundle_data, password)
    except ValueError as e:
        raise KeyLoadError(
            f"Failed to load PKCS12 bundle from {bundle_path}: {e}. "
            f"Check the password and file format."
        ) from e

    if private_key is None or certificate is None:
        raise KeyLoadError(
            f"PKCS12 bundle {bundle_path} must contain both a private key and a certificate."
        )

    logger.info(f"Loaded PKCS12 bundle: {certificate.subject.rfc4514_string()}")
    return KeyPair(
        private_key=private_key,
        public_key=certificate.public_key(),
        certificate=certificate,
    )


def load_key_pair_from_config(keys_config: KeysConfig) -> KeyPair:
    """Load the configured key pair.

    The password, if any, is read from the environment variable named by
    ``keys_config.password_env_var``.

    Raises:
        KeyLoadError: If no private key is configured or loading fails
    """
    if keys_config.private_key_path is None:
        raise KeyLoadError(
            "No signing key configured. Set keys.private_key_path in config.json "
            "or the SAML_IDP_PRIVATE_KEY_PATH environment variable."
        )

    password = None
    if keys_config.password_env_var:
        env_password = os.environ.get(keys_config.password_env_var)
        if env_password:
            password = env_password.encode("utf-8")

    if keys_config.key_format == "pkcs12":
        return load_pkcs12_key_pair(keys_config.private_key_path, password)

    return load_key_pair(
        keys_config.private_key_path,
        public_key_path=keys_config.public_key_path,
        certificate_path=keys_config.certificate_path,
        password=password,
    )


def generate_key_pair(
    common_name: str = "saml-post-idp test signing",
    key_size: int = 2048,
    valid_days: int = 365,
    with_certificate: bool = True,
) -> KeyPair:
    """Generate an RSA key pair with an optional self-signed certificate.

    Intended for development and tests, not production key management.
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    public_key = private_key.public_key()

    certificate = None
    if with_certificate:
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        now = datetime.now(timezone.utc)
        certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=5))
            .not_valid_after(now + timedelta(days=valid_days))
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(public_key),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key),
                critical=False,
            )
            .sign(private_key, hashes.SHA256())
        )

    logger.info(f"Generated {key_size}-bit RSA signing key ({common_name})")
    return KeyPair(private_key=private_key, public_key=public_key, certificate=certificate)


def write_key_pair(key_pair: KeyPair, output_dir: Path) -> dict:
    """Write a key pair as PEM files (signing_key.pem, signing_pub.pem, signing_cert.pem).

    Returns:
        Mapping of file role to written path
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written = {}

    key_path = output_dir / "signing_key.pem"
    key_path.write_bytes(
        key_pair.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    written["private_key"] = key_path

    public_path = output_dir / "signing_pub.pem"
    public_path.write_bytes(
        key_pair.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    written["public_key"] = public_path

    if key_pair.certificate is not None:
        cert_path = output_dir / "signing_cert.pem"
        cert_path.write_bytes(key_pair.certificate.public_bytes(serialization.Encoding.PEM))
        written["certificate"] = cert_path

    logger.info(f"Wrote signing key pair to {output_dir}")
    return written
