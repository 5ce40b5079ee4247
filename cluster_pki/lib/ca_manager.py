"""CA manager: load-or-create for the root CA and everything it signs."""

from pathlib import Path

from cryptography import x509

from .cert_utils import (
    deserialize_certificate,
    deserialize_private_key,
    deserialize_public_key,
    generate_private_key,
    is_ca_certificate,
    is_issued_by,
    key_matches_certificate,
    public_keys_equal,
    serialize_certificate,
    serialize_private_key,
    serialize_public_key,
)
from .certificate_builder import CertificateBuilder
from .config import PKIConfig, SubjectName
from .errors import (
    MalformedCAError,
    MalformedCertificateError,
    MalformedKeyPairError,
    UntrustedExistingCertError,
)
from .file_utils import PRIVATE_MODE, PUBLIC_MODE, atomic_write, read_artifact
from .kubeconfig import build_kubeconfig_document, dump_kubeconfig, parse_kubeconfig
from .logging_config import log_artifact
from .models import (
    BareKeyPair,
    CertificateAuthority,
    CertificateProfile,
    CertificateUsage,
    Kubeconfig,
    LeafCredential,
)


class CAManager:
    """Certificate authority manager for cluster bootstrap.

    Every method is load-or-create: existing material is parsed, checked
    against the CA and returned untouched; missing material is generated and
    written atomically, private key first. A certificate found without its key
    is treated as corrupt, while a key found without its certificate is the
    trace of an interrupted write and gets regenerated.
    """

    def __init__(self, config: PKIConfig) -> None:
        """Initialize CA manager with configuration.

        Args:
            config: Key size, validity periods and naming defaults
        """
        self.config = config

    def load_or_create_ca(self, cert_path: Path, key_path: Path) -> CertificateAuthority:
        """Load the root CA from disk or create it.

        Args:
            cert_path: PEM certificate location
            key_path: PEM private key location

        Returns:
            CertificateAuthority backed by the files at cert_path/key_path

        Raises:
            MalformedCAError: If existing material is unreadable or not a self-signed CA
            ArtifactIOError: If reading or writing fails
        """
        if cert_path.exists():
            return self._load_ca(cert_path, key_path)

        private_key = generate_private_key(self.config.key_size)
        certificate = CertificateBuilder.build_root_ca(
            subject=SubjectName(common_name=self.config.ca_common_name),
            private_key=private_key,
            validity_years=self.config.ca_validity_years,
        )

        atomic_write(key_path, serialize_private_key(private_key), PRIVATE_MODE)
        atomic_write(cert_path, serialize_certificate(certificate), PUBLIC_MODE)
        log_artifact("created", cert_path, "Created root CA")

        return CertificateAuthority(
            private_key=private_key,
            certificate=certificate,
            cert_path=cert_path,
            key_path=key_path,
        )

    def _load_ca(self, cert_path: Path, key_path: Path) -> CertificateAuthority:
        if not key_path.exists():
            raise MalformedCAError("CA certificate exists but its private key is missing", key_path)

        try:
            certificate = deserialize_certificate(read_artifact(cert_path))
        except ValueError as e:
            raise MalformedCAError(f"unreadable CA certificate: {e}", cert_path) from e
        try:
            private_key = deserialize_private_key(read_artifact(key_path))
        except ValueError as e:
            raise MalformedCAError(f"unreadable CA private key: {e}", key_path) from e

        if not is_ca_certificate(certificate):
            raise MalformedCAError("certificate is not marked as a CA", cert_path)
        if not is_issued_by(certificate, certificate):
            raise MalformedCAError("CA certificate is not self-signed", cert_path)
        if not key_matches_certificate(private_key, certificate):
            raise MalformedCAError("CA private key does not match certificate", key_path)

        log_artifact("reusing", cert_path, "Reusing root CA")
        return CertificateAuthority(
            private_key=private_key,
            certificate=certificate,
            cert_path=cert_path,
            key_path=key_path,
        )

    def issue_leaf(self, ca: CertificateAuthority, profile: CertificateProfile) -> LeafCredential:
        """Generate a key and a CA-signed certificate for profile, in memory only."""
        private_key = generate_private_key(self.config.key_size)
        csr = CertificateBuilder.build_csr(profile, private_key)
        certificate = CertificateBuilder.build_leaf_certificate(
            csr=csr,
            usage=profile.usage,
            issuer_cert=ca.certificate,
            issuer_key=ca.private_key,
            validity_days=profile.validity_days or self.config.leaf_validity_days,
        )
        return LeafCredential(certificate=certificate, private_key=private_key)

    def load_or_create_leaf(
        self,
        ca: CertificateAuthority,
        profile: CertificateProfile,
        cert_path: Path,
        key_path: Path,
    ) -> LeafCredential:
        """Load a leaf certificate issued by ca, or issue and persist a new one.

        Existing certificates are only checked for chain of trust, not against
        the current profile content.

        Args:
            ca: Issuing CA
            profile: Content of the certificate when it has to be created
            cert_path: PEM certificate location
            key_path: PEM private key location

        Returns:
            LeafCredential backed by the files at cert_path/key_path

        Raises:
            MalformedCertificateError: If existing material cannot be parsed
            UntrustedExistingCertError: If existing certificate does not chain to ca
            ArtifactIOError: If reading or writing fails
        """
        if cert_path.exists():
            return self._load_leaf(ca, profile, cert_path, key_path)

        credential = self.issue_leaf(ca, profile)
        atomic_write(key_path, serialize_private_key(credential.private_key), PRIVATE_MODE)
        atomic_write(cert_path, serialize_certificate(credential.certificate), PUBLIC_MODE)
        credential.cert_path = cert_path
        credential.key_path = key_path
        log_artifact("issued", cert_path, "Issued %s certificate", profile.name)
        return credential

    def _load_leaf(
        self,
        ca: CertificateAuthority,
        profile: CertificateProfile,
        cert_path: Path,
        key_path: Path,
    ) -> LeafCredential:
        if not key_path.exists():
            raise MalformedCertificateError("certificate exists but its private key is missing", key_path)

        try:
            certificate = deserialize_certificate(read_artifact(cert_path))
        except ValueError as e:
            raise MalformedCertificateError(f"unreadable certificate: {e}", cert_path) from e
        try:
            private_key = deserialize_private_key(read_artifact(key_path))
        except ValueError as e:
            raise MalformedCertificateError(f"unreadable private key: {e}", key_path) from e

        self._verify_trusted(ca, certificate, cert_path)
        if not key_matches_certificate(private_key, certificate):
            raise UntrustedExistingCertError("private key does not match certificate", key_path)

        log_artifact("reusing", cert_path, "Reusing %s certificate", profile.name)
        return LeafCredential(
            certificate=certificate,
            private_key=private_key,
            cert_path=cert_path,
            key_path=key_path,
        )

    @staticmethod
    def _verify_trusted(ca: CertificateAuthority, certificate: x509.Certificate, path: Path) -> None:
        if not is_issued_by(certificate, ca.certificate):
            raise UntrustedExistingCertError(
                f"certificate is not signed by the CA at {ca.cert_path}", path
            )

    def load_or_create_key_pair(self, public_path: Path, private_path: Path) -> BareKeyPair:
        """Load or create a bare RSA key pair (no certificate).

        Args:
            public_path: PEM SubjectPublicKeyInfo location
            private_path: PEM PKCS8 private key location

        Returns:
            BareKeyPair backed by the two files

        Raises:
            MalformedKeyPairError: If existing keys are unreadable or do not belong together
            ArtifactIOError: If reading or writing fails
        """
        if public_path.exists():
            if not private_path.exists():
                raise MalformedKeyPairError("public key exists but private key is missing", private_path)
            try:
                public_key = deserialize_public_key(read_artifact(public_path))
            except ValueError as e:
                raise MalformedKeyPairError(f"unreadable public key: {e}", public_path) from e
            try:
                private_key = deserialize_private_key(read_artifact(private_path))
            except ValueError as e:
                raise MalformedKeyPairError(f"unreadable private key: {e}", private_path) from e
            if not public_keys_equal(private_key.public_key(), public_key):
                raise MalformedKeyPairError("public key does not match private key", public_path)

            log_artifact("reusing", private_path, "Reusing key pair")
            return BareKeyPair(
                private_key=private_key,
                public_key=public_key,
                public_path=public_path,
                private_path=private_path,
            )

        private_key = generate_private_key(self.config.key_size)
        public_key = private_key.public_key()
        atomic_write(private_path, serialize_private_key(private_key), PRIVATE_MODE)
        atomic_write(public_path, serialize_public_key(public_key), PUBLIC_MODE)
        log_artifact("created", private_path, "Created key pair")

        return BareKeyPair(
            private_key=private_key,
            public_key=public_key,
            public_path=public_path,
            private_path=private_path,
        )

    def load_or_create_kubeconfig(
        self,
        ca: CertificateAuthority,
        path: Path,
        username: str,
        groups: tuple[str, ...] | list[str],
        cluster_url: str,
    ) -> Kubeconfig:
        """Load a kubeconfig or build one with a fresh client certificate.

        Args:
            ca: CA embedded as the cluster's CA bundle and used to sign the client cert
            path: Kubeconfig location
            username: Client certificate CN
            groups: Client certificate O claims (RBAC groups)
            cluster_url: API server URL

        Returns:
            Parsed Kubeconfig

        Raises:
            MalformedKubeconfigError: If an existing document cannot be parsed
            UntrustedExistingCertError: If its client certificate does not chain to ca
            ArtifactIOError: If reading or writing fails
        """
        if path.exists():
            kubeconfig = parse_kubeconfig(read_artifact(path), path)
            self._verify_trusted(ca, kubeconfig.client_certificate, path)
            log_artifact("reusing", path, "Reusing kubeconfig for %s", username)
            return kubeconfig

        profile = CertificateProfile(
            name=f"{username} client",
            common_name=username,
            organizations=tuple(groups),
            usage=CertificateUsage.CLIENT_AUTH,
        )
        credential = self.issue_leaf(ca, profile)
        document = build_kubeconfig_document(
            cluster_name=self.config.cluster_name,
            cluster_url=cluster_url,
            ca_cert=ca.certificate,
            username=username,
            client_cert=credential.certificate,
            client_key=credential.private_key,
        )
        atomic_write(path, dump_kubeconfig(document), PRIVATE_MODE)
        log_artifact("created", path, "Created kubeconfig for %s", username)

        return Kubeconfig(
            cluster_url=cluster_url,
            ca_bundle=ca.certificate,
            client_certificate=credential.certificate,
            client_key=credential.private_key,
            context_name=self.config.cluster_name,
            path=path,
        )
