"""Node identity and PKI configuration dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

from cryptography import x509
from cryptography.x509 import oid

DEFAULT_API_SERVER_PORT = 6443
MIN_KEY_SIZE = 2048


@dataclass(frozen=True)
class NodeIdentity:
    """Identity of the local node and the cluster network it serves.

    Supplied by the caller; every catalog entry is derived from it.
    """

    node_name: str
    node_ip: str
    data_dir: Path
    cluster_cidr: str = "10.42.0.0/16"
    service_cidr: str = "10.43.0.0/16"
    cluster_url: str = "https://127.0.0.1:6443"
    cluster_domain: str = "cluster.local"

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        self.api_server_port()

    def api_server_port(self) -> int:
        """Return the API server port from cluster_url (6443 when absent).

        Raises:
            ValueError: If cluster_url is not an https URL with a host and a valid port
        """
        url = urlsplit(self.cluster_url)
        if url.scheme != "https" or not url.hostname:
            raise ValueError(f"cluster_url must be an https URL with a host, got {self.cluster_url!r}")
        port = url.port
        return port if port is not None else DEFAULT_API_SERVER_PORT

    def local_sans(self) -> list[str]:
        """SANs every serving certificate for a component on this node carries."""
        return ["localhost", self.node_ip, "127.0.0.1", self.node_name]


@dataclass
class PKIConfig:
    """Issuance settings shared by every artifact."""

    ca_common_name: str = "kubernetes-ca"
    ca_validity_years: int = 10
    leaf_validity_days: int = 365
    key_size: int = MIN_KEY_SIZE
    cluster_name: str = "local-cluster"

    def __post_init__(self) -> None:
        if self.key_size < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE} bits, got {self.key_size}")


@dataclass
class SubjectName:
    """X.509 subject: common name plus organization (RBAC group) claims."""

    common_name: str
    organizations: tuple[str, ...] = field(default_factory=tuple)

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for CSR and certificate generation."""
        attributes = [
            x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, organization)
            for organization in self.organizations
        ]
        attributes.append(x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name))
        return x509.Name(attributes)
