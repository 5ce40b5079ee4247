"""Test fixtures for cluster_pki tests."""

from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from cluster_pki.lib.ca_manager import CAManager
from cluster_pki.lib.cert_utils import generate_private_key
from cluster_pki.lib.certificate_builder import CertificateBuilder
from cluster_pki.lib.config import NodeIdentity, PKIConfig, SubjectName
from cluster_pki.lib.models import CertificateAuthority, CertificateProfile, CertificateUsage


@pytest.fixture
def pki_config() -> PKIConfig:
    """Return test PKI configuration with short validity periods."""
    return PKIConfig(
        ca_common_name="Test Cluster CA",
        ca_validity_years=1,
        leaf_validity_days=30,
        key_size=2048,
        cluster_name="test-cluster",
    )


@pytest.fixture
def ca_manager(pki_config: PKIConfig) -> CAManager:
    return CAManager(pki_config)


@pytest.fixture
def node_identity(tmp_path: Path) -> NodeIdentity:
    """Return identity of a test node whose data directory is a temp dir."""
    return NodeIdentity(
        node_name="node-1",
        node_ip="192.168.122.10",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def root_key() -> RSAPrivateKey:
    return generate_private_key(key_size=2048)


@pytest.fixture
def root_cert(root_key: RSAPrivateKey) -> x509.Certificate:
    """Generate self-signed root CA certificate."""
    return CertificateBuilder.build_root_ca(
        subject=SubjectName(common_name="Test Cluster CA"),
        private_key=root_key,
        validity_years=1,
    )


@pytest.fixture
def ca(ca_manager: CAManager, tmp_path: Path) -> CertificateAuthority:
    """Create a root CA on disk under tmp_path/ca."""
    return ca_manager.load_or_create_ca(tmp_path / "ca" / "ca.crt", tmp_path / "ca" / "ca.key")


@pytest.fixture
def other_ca(ca_manager: CAManager, tmp_path: Path) -> CertificateAuthority:
    """Create an unrelated root CA with the same subject as ca."""
    return ca_manager.load_or_create_ca(tmp_path / "other" / "ca.crt", tmp_path / "other" / "ca.key")


@pytest.fixture
def server_profile() -> CertificateProfile:
    return CertificateProfile(
        name="test-serving",
        common_name="test-server",
        usage=CertificateUsage.SERVER_AUTH,
        subject_alt_names=("localhost", "127.0.0.1", "node-1"),
    )


@pytest.fixture
def client_profile() -> CertificateProfile:
    return CertificateProfile(
        name="test-client",
        common_name="system:admin",
        organizations=("system:masters",),
        usage=CertificateUsage.CLIENT_AUTH,
    )
