"""Certificate builder for X.509 certificate construction."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.x509.oid import ExtendedKeyUsageOID

from .cert_utils import (
    build_general_names,
    extract_csr_public_key,
    generate_serial_number,
    validate_csr_signature,
)
from .config import SubjectName
from .models import CertificateProfile, CertificateUsage

EXTENDED_KEY_USAGES = {
    CertificateUsage.SERVER_AUTH: [ExtendedKeyUsageOID.SERVER_AUTH],
    CertificateUsage.CLIENT_AUTH: [ExtendedKeyUsageOID.CLIENT_AUTH],
    CertificateUsage.PEER_AUTH: [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH],
}


def _key_usage(is_ca: bool) -> x509.KeyUsage:
    """Signing keys get keyCertSign and cRLSign on top of the leaf bits."""
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=False,
        key_encipherment=True,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=is_ca,
        crl_sign=is_ca,
        encipher_only=False,
        decipher_only=False,
    )


class CertificateBuilder:
    """Builds the root CA certificate and the leaf certificates it signs."""

    @staticmethod
    def build_root_ca(
        subject: SubjectName,
        private_key: RSAPrivateKey,
        validity_years: int,
    ) -> x509.Certificate:
        """Build self-signed root CA certificate.

        Args:
            subject: Subject (and issuer) name
            private_key: RSA private key for signing
            validity_years: Certificate validity period in years

        Returns:
            Self-signed X.509 certificate with CA extensions
        """
        name = subject.to_x509_name()
        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_years * 365)

        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=None),
                critical=True,
            )
            .add_extension(_key_usage(is_ca=True), critical=True)
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_csr(profile: CertificateProfile, private_key: RSAPrivateKey) -> x509.CertificateSigningRequest:
        """Build a CSR carrying the profile's subject and SAN list."""
        builder = x509.CertificateSigningRequestBuilder().subject_name(profile.subject.to_x509_name())
        if profile.subject_alt_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName(build_general_names(profile.subject_alt_names)),
                critical=False,
            )
        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_leaf_certificate(
        csr: x509.CertificateSigningRequest,
        usage: CertificateUsage,
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build end-entity certificate from CSR, signed by the CA.

        Subject and SANs come from the CSR; key usage bits come from usage.

        Args:
            csr: Certificate signing request
            usage: Serving, client or peer profile
            issuer_cert: CA certificate (issuer)
            issuer_key: CA private key for signing
            validity_days: Certificate validity period in days

        Returns:
            X.509 end-entity certificate signed by the CA

        Raises:
            ValueError: If CSR signature is invalid
        """
        if not validate_csr_signature(csr):
            raise ValueError("CSR signature validation failed")

        public_key = extract_csr_public_key(csr)

        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(issuer_cert.subject)
            .public_key(public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(_key_usage(is_ca=False), critical=True)
            .add_extension(
                x509.ExtendedKeyUsage(EXTENDED_KEY_USAGES[usage]),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
                critical=False,
            )
        )

        try:
            san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
            builder = builder.add_extension(san.value, critical=san.critical)
        except x509.ExtensionNotFound:
            pass

        return builder.sign(issuer_key, hashes.SHA256())
