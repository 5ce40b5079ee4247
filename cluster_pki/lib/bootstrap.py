"""Bootstrap orchestrator: CA, service IP, certificates, key pairs, kubeconfigs."""

import enum

from .ca_manager import CAManager
from .catalog import ca_paths, certificate_catalog, key_pair_catalog, kubeconfig_catalog
from .config import NodeIdentity, PKIConfig
from .logging_config import LOGGER
from .models import BootstrapResult
from .network import derive_api_server_service_ip


class BootstrapStage(enum.Enum):
    """Linear bootstrap progress; ABORTED is terminal on any failure."""

    START = "start"
    CA_READY = "ca-ready"
    SERVICE_IP_READY = "service-ip-ready"
    CERTS_ISSUED = "certs-issued"
    KEYPAIRS_ISSUED = "keypairs-issued"
    KUBECONFIGS_ISSUED = "kubeconfigs-issued"
    DONE = "done"
    ABORTED = "aborted"


class BootstrapOrchestrator:
    """Run every load-or-create step for one node, stopping at the first failure.

    There is no cleanup on failure: each step is idempotent, so running the
    whole sequence again resumes where the previous run stopped.
    """

    def __init__(self, identity: NodeIdentity, config: PKIConfig | None = None) -> None:
        self.identity = identity
        self.config = config or PKIConfig()
        self.ca_manager = CAManager(self.config)
        self.stage = BootstrapStage.START

    def run(self) -> BootstrapResult:
        """Bootstrap all PKI material under identity.data_dir.

        Returns:
            BootstrapResult with every credential keyed by catalog name

        Raises:
            PKIError: Propagated unchanged from the failing step
        """
        self.stage = BootstrapStage.START
        try:
            return self._run()
        except Exception:
            LOGGER.error(
                "Bootstrap aborted after stage %s", self.stage.value, extra={"stage": self.stage.value}
            )
            self.stage = BootstrapStage.ABORTED
            raise

    def _run(self) -> BootstrapResult:
        ca_cert_path, ca_key_path = ca_paths(self.identity)
        ca = self.ca_manager.load_or_create_ca(ca_cert_path, ca_key_path)
        self.stage = BootstrapStage.CA_READY

        service_ip = derive_api_server_service_ip(self.identity.service_cidr)
        LOGGER.info("API server service IP: %s", service_ip)
        self.stage = BootstrapStage.SERVICE_IP_READY

        result = BootstrapResult(
            ca_cert_path=ca_cert_path,
            ca_key_path=ca_key_path,
            service_ip=service_ip,
        )

        for entry in certificate_catalog(self.identity, service_ip):
            result.certificates[entry.profile.name] = self.ca_manager.load_or_create_leaf(
                ca, entry.profile, entry.cert_path, entry.key_path
            )
        self.stage = BootstrapStage.CERTS_ISSUED

        for location in key_pair_catalog(self.identity):
            result.key_pairs[location.name] = self.ca_manager.load_or_create_key_pair(
                location.public_path, location.private_path
            )
        self.stage = BootstrapStage.KEYPAIRS_ISSUED

        for principal in kubeconfig_catalog(self.identity):
            result.kubeconfigs[principal.name] = self.ca_manager.load_or_create_kubeconfig(
                ca,
                principal.path,
                principal.username,
                principal.groups,
                self.identity.cluster_url,
            )
        self.stage = BootstrapStage.KUBECONFIGS_ISSUED

        self.stage = BootstrapStage.DONE
        LOGGER.info("Bootstrap complete: %s", self.identity.data_dir)
        return result
