"""Certificate utility functions for key generation, serialization and verification."""

import ipaddress
import uuid

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


def generate_private_key(key_size: int = 2048) -> RSAPrivateKey:
    """Generate RSA private key with specified size."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def serialize_private_key(key: RSAPrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS8, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> RSAPrivateKey:
    """Deserialize an unencrypted private key from PEM bytes.

    Raises:
        ValueError: If the PEM is unreadable, encrypted, or not an RSA key
    """
    try:
        key = serialization.load_pem_private_key(pem_data, password=None)
    except (TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(str(e)) from e
    if not isinstance(key, RSAPrivateKey):
        raise ValueError("expected RSA private key")
    return key


def serialize_public_key(key: RSAPublicKey) -> bytes:
    """Serialize public key to PEM SubjectPublicKeyInfo."""
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def deserialize_public_key(pem_data: bytes) -> RSAPublicKey:
    """Deserialize public key from PEM bytes."""
    key = serialization.load_pem_public_key(pem_data)
    if not isinstance(key, RSAPublicKey):
        raise ValueError("expected RSA public key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def generate_serial_number() -> int:
    """Generate certificate serial number from UUID4 (128 bits, ~122 random)."""
    return uuid.uuid4().int


def build_general_names(names: tuple[str, ...] | list[str]) -> list[x509.GeneralName]:
    """Map SAN strings to IPAddress entries when they parse as IPs, DNSName otherwise."""
    general_names: list[x509.GeneralName] = []
    for name in names:
        try:
            general_names.append(x509.IPAddress(ipaddress.ip_address(name)))
        except ValueError:
            general_names.append(x509.DNSName(name))
    return general_names


def get_subject_alt_names(cert: x509.Certificate) -> list[str]:
    """Return DNS and IP SANs of a certificate as strings, in certificate order."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []
    return [str(general_name.value) for general_name in san]


def is_issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    """Return True if cert's signature verifies against issuer's public key."""
    try:
        cert.verify_directly_issued_by(issuer)
        return True
    except (ValueError, TypeError, InvalidSignature):
        return False


def is_ca_certificate(cert: x509.Certificate) -> bool:
    """Return True if BasicConstraints marks cert as a CA."""
    try:
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return constraints.ca


def key_matches_certificate(key: RSAPrivateKey, cert: x509.Certificate) -> bool:
    """Return True if key is the private half of cert's public key."""
    return public_keys_equal(key.public_key(), cert.public_key())


def public_keys_equal(first: object, second: object) -> bool:
    """Compare two public keys by their SubjectPublicKeyInfo encoding."""
    if not isinstance(first, RSAPublicKey) or not isinstance(second, RSAPublicKey):
        return False
    return serialize_public_key(first) == serialize_public_key(second)


def extract_csr_public_key(
    csr: x509.CertificateSigningRequest,
) -> RSAPublicKey:
    """Extract public key from CSR.

    Raises:
        ValueError: If public key is not RSA type
    """
    public_key = csr.public_key()
    if not isinstance(public_key, RSAPublicKey):
        raise ValueError("CSR public key must be RSA type")
    return public_key


def validate_csr_signature(csr: x509.CertificateSigningRequest) -> bool:
    """Verify CSR self-signature to prove private key possession."""
    return csr.is_signature_valid
