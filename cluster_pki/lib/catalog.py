"""Fixed catalog of certificates, key pairs and kubeconfigs for one node.

Each table is plain data derived from NodeIdentity; adding a component means
adding an entry here, not new control flow.
"""

from ipaddress import IPv4Address, IPv6Address
from pathlib import Path

from .config import NodeIdentity
from .models import (
    CertificateProfile,
    CertificateUsage,
    KeyPairLocation,
    KubeconfigPrincipal,
    LeafLocation,
)

CA_CERT_FILE = "ca-bundle.crt"
CA_KEY_FILE = "ca-bundle.key"


def ca_paths(identity: NodeIdentity) -> tuple[Path, Path]:
    """Return (cert_path, key_path) of the root CA bundle."""
    ca_dir = identity.data_dir / "certs" / "ca-bundle"
    return ca_dir / CA_CERT_FILE, ca_dir / CA_KEY_FILE


def _tls_pair(directory: Path) -> tuple[Path, Path]:
    return directory / "tls.crt", directory / "tls.key"


def kubernetes_service_names(identity: NodeIdentity) -> list[str]:
    """DNS names the in-cluster ``kubernetes`` service resolves under."""
    return [
        "kubernetes",
        "kubernetes.default",
        "kubernetes.default.svc",
        f"kubernetes.default.svc.{identity.cluster_domain}",
    ]


def certificate_catalog(
    identity: NodeIdentity,
    service_ip: IPv4Address | IPv6Address,
) -> list[LeafLocation]:
    """Leaf certificates issued at bootstrap, in issuance order."""
    certs_dir = identity.data_dir / "certs"
    resources_dir = identity.data_dir / "resources"
    node_sans = identity.local_sans()
    entries: list[tuple[CertificateProfile, tuple[Path, Path]]] = [
        (
            CertificateProfile(
                name="etcd-serving",
                common_name="etcd-server",
                usage=CertificateUsage.SERVER_AUTH,
                subject_alt_names=tuple(node_sans),
            ),
            (certs_dir / "etcd" / "etcd-serving.crt", certs_dir / "etcd" / "etcd-serving.key"),
        ),
        (
            CertificateProfile(
                name="etcd-peer",
                common_name="etcd-peer",
                usage=CertificateUsage.PEER_AUTH,
                subject_alt_names=tuple(node_sans),
            ),
            (certs_dir / "etcd" / "etcd-peer.crt", certs_dir / "etcd" / "etcd-peer.key"),
        ),
        (
            CertificateProfile(
                name="etcd-client",
                common_name="etcd-client",
                usage=CertificateUsage.CLIENT_AUTH,
                subject_alt_names=tuple(node_sans),
            ),
            _tls_pair(resources_dir / "kube-apiserver" / "secrets" / "etcd-client"),
        ),
        (
            CertificateProfile(
                name="kube-apiserver-serving",
                common_name="kube-apiserver",
                usage=CertificateUsage.SERVER_AUTH,
                subject_alt_names=(
                    "kube-apiserver",
                    *node_sans,
                    *kubernetes_service_names(identity),
                    str(service_ip),
                ),
            ),
            _tls_pair(certs_dir / "kube-apiserver" / "secrets" / "service-network-serving-certkey"),
        ),
        (
            # CN must be listed in the aggregated API servers' requestheader-allowed-names
            CertificateProfile(
                name="aggregator-client",
                common_name="system:openshift-aggregator",
                organizations=("system:masters",),
                usage=CertificateUsage.CLIENT_AUTH,
            ),
            _tls_pair(certs_dir / "kube-apiserver" / "secrets" / "aggregator-client"),
        ),
        (
            CertificateProfile(
                name="kubelet-client",
                common_name="kube-apiserver",
                organizations=("kube-apiserver", "system:kube-apiserver", "system:masters"),
                usage=CertificateUsage.CLIENT_AUTH,
            ),
            _tls_pair(resources_dir / "kube-apiserver" / "secrets" / "kubelet-client"),
        ),
        (
            CertificateProfile(
                name="kubelet-serving",
                common_name=f"system:node:{identity.node_name}",
                organizations=("system:nodes",),
                usage=CertificateUsage.SERVER_AUTH,
                subject_alt_names=tuple(node_sans),
            ),
            _tls_pair(resources_dir / "kubelet" / "secrets" / "kubelet-client"),
        ),
        (
            CertificateProfile(
                name="openshift-controller-manager-serving",
                common_name="openshift-controller-manager",
                usage=CertificateUsage.SERVER_AUTH,
                subject_alt_names=(
                    "openshift-controller-manager",
                    *node_sans,
                    *kubernetes_service_names(identity),
                ),
            ),
            _tls_pair(resources_dir / "openshift-controller-manager" / "secrets"),
        ),
        (
            CertificateProfile(
                name="service-ca-serving",
                common_name="service-ca",
                usage=CertificateUsage.SERVER_AUTH,
                subject_alt_names=("service-ca", *node_sans, str(service_ip)),
            ),
            _tls_pair(resources_dir / "service-ca" / "secrets" / "service-ca"),
        ),
    ]
    return [
        LeafLocation(profile=profile, cert_path=cert_path, key_path=key_path)
        for profile, (cert_path, key_path) in entries
    ]


def key_pair_catalog(identity: NodeIdentity) -> list[KeyPairLocation]:
    """Bare key pairs issued at bootstrap."""
    apiserver_dir = identity.data_dir / "resources" / "kube-apiserver"
    service_account_dir = apiserver_dir / "secrets" / "service-account-key"
    sa_public_dir = apiserver_dir / "sa-public-key"
    return [
        KeyPairLocation(
            name="service-account-key",
            public_path=service_account_dir / "service-account.crt",
            private_path=service_account_dir / "service-account.key",
        ),
        KeyPairLocation(
            name="sa-public-key",
            public_path=sa_public_dir / "serving-ca.pub",
            private_path=sa_public_dir / "serving-ca.key",
        ),
    ]


def kubeconfig_catalog(identity: NodeIdentity) -> list[KubeconfigPrincipal]:
    """Kubeconfigs issued at bootstrap, one per principal."""
    resources_dir = identity.data_dir / "resources"
    return [
        KubeconfigPrincipal(
            name="kubeadmin",
            username="system:admin",
            groups=("system:masters",),
            path=resources_dir / "kubeadmin" / "kubeconfig",
        ),
        KubeconfigPrincipal(
            name="kube-apiserver",
            username="system:kube-apiserver",
            groups=("kube-apiserver", "system:kube-apiserver", "system:masters"),
            path=resources_dir / "kube-apiserver" / "kubeconfig",
        ),
        KubeconfigPrincipal(
            name="kube-controller-manager",
            username="system:kube-controller-manager",
            groups=("system:kube-controller-manager",),
            path=resources_dir / "kube-controller-manager" / "kubeconfig",
        ),
        KubeconfigPrincipal(
            name="kube-scheduler",
            username="system:kube-scheduler",
            groups=("system:kube-scheduler",),
            path=resources_dir / "kube-scheduler" / "kubeconfig",
        ),
        # Node authorizer identity convention
        KubeconfigPrincipal(
            name="kubelet",
            username=f"system:node:{identity.node_name}",
            groups=("system:nodes",),
            path=resources_dir / "kubelet" / "kubeconfig",
        ),
    ]
