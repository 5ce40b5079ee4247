"""Value types for CA, leaf credentials, key pairs and kubeconfigs."""

import enum
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.x509.oid import NameOID

from .config import SubjectName


class CertificateUsage(enum.Enum):
    """Extended key usage profile of a leaf certificate."""

    SERVER_AUTH = "server"
    CLIENT_AUTH = "client"
    PEER_AUTH = "peer"

    @property
    def serves(self) -> bool:
        return self in (CertificateUsage.SERVER_AUTH, CertificateUsage.PEER_AUTH)


@dataclass(frozen=True)
class CertificateProfile:
    """Everything that determines a leaf certificate's content.

    Pure value: re-derivable from NodeIdentity at any time.
    """

    name: str
    common_name: str
    usage: CertificateUsage
    organizations: tuple[str, ...] = ()
    subject_alt_names: tuple[str, ...] = ()
    validity_days: int | None = None

    def __post_init__(self) -> None:
        # Keep first occurrence order, drop duplicates
        object.__setattr__(self, "organizations", tuple(dict.fromkeys(self.organizations)))
        object.__setattr__(self, "subject_alt_names", tuple(dict.fromkeys(self.subject_alt_names)))

    @property
    def subject(self) -> SubjectName:
        return SubjectName(common_name=self.common_name, organizations=self.organizations)


@dataclass
class CertificateAuthority:
    """Root signing key and self-signed certificate for one data directory."""

    private_key: RSAPrivateKey
    certificate: x509.Certificate
    cert_path: Path
    key_path: Path


@dataclass
class LeafCredential:
    """Certificate and key signed by the CA."""

    certificate: x509.Certificate
    private_key: RSAPrivateKey
    cert_path: Path | None = None
    key_path: Path | None = None


@dataclass
class BareKeyPair:
    """Signing key pair with no certificate (service-account tokens)."""

    private_key: RSAPrivateKey
    public_key: RSAPublicKey
    public_path: Path
    private_path: Path


@dataclass
class Kubeconfig:
    """Parsed kubeconfig credential bundle."""

    cluster_url: str
    ca_bundle: x509.Certificate
    client_certificate: x509.Certificate
    client_key: RSAPrivateKey
    context_name: str
    path: Path

    @property
    def username(self) -> str:
        """Common name of the embedded client certificate."""
        attributes = self.client_certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        return str(attributes[0].value) if attributes else ""

    @property
    def groups(self) -> list[str]:
        """Organization claims of the embedded client certificate."""
        return [
            str(attribute.value)
            for attribute in self.client_certificate.subject.get_attributes_for_oid(
                NameOID.ORGANIZATION_NAME
            )
        ]


@dataclass(frozen=True)
class KubeconfigPrincipal:
    """Catalog entry for one kubeconfig: who it authenticates as and where it lives."""

    name: str
    username: str
    groups: tuple[str, ...]
    path: Path


@dataclass(frozen=True)
class LeafLocation:
    """Catalog entry pairing a profile with its on-disk location."""

    profile: CertificateProfile
    cert_path: Path
    key_path: Path


@dataclass(frozen=True)
class KeyPairLocation:
    """Catalog entry for a bare key pair."""

    name: str
    public_path: Path
    private_path: Path


@dataclass
class BootstrapResult:
    """Paths produced by a bootstrap run, keyed by logical component name."""

    ca_cert_path: Path
    ca_key_path: Path
    service_ip: IPv4Address | IPv6Address
    certificates: dict[str, LeafCredential] = field(default_factory=dict)
    key_pairs: dict[str, BareKeyPair] = field(default_factory=dict)
    kubeconfigs: dict[str, Kubeconfig] = field(default_factory=dict)
