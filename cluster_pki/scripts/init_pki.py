#!/usr/bin/env python3
"""Bootstrap cluster PKI: root CA, component certificates, key pairs and kubeconfigs."""

import argparse
import socket
import sys
from pathlib import Path

from cluster_pki.lib.bootstrap import BootstrapOrchestrator
from cluster_pki.lib.config import NodeIdentity, PKIConfig
from cluster_pki.lib.errors import PKIError
from cluster_pki.lib.logging_config import LOGGER


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; defaults mirror NodeIdentity and PKIConfig."""
    defaults = NodeIdentity(node_name="", node_ip="", data_dir=Path("."))
    parser = argparse.ArgumentParser(
        description="Create or reuse the PKI for a single-node control plane"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("/var/lib/microshift"),
        help="Data directory root (default: /var/lib/microshift)",
    )
    parser.add_argument(
        "--node-name",
        default=socket.gethostname(),
        help="Node name (default: hostname)",
    )
    parser.add_argument("--node-ip", required=True, help="Node IP address")
    parser.add_argument("--service-cidr", default=defaults.service_cidr)
    parser.add_argument("--cluster-cidr", default=defaults.cluster_cidr)
    parser.add_argument("--cluster-url", default=defaults.cluster_url)
    parser.add_argument("--cluster-domain", default=defaults.cluster_domain)
    parser.add_argument(
        "--key-size",
        type=int,
        default=PKIConfig().key_size,
        help="RSA key size for every generated key (minimum 2048)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the bootstrap sequence.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args(argv)

    try:
        identity = NodeIdentity(
            node_name=args.node_name,
            node_ip=args.node_ip,
            data_dir=args.data_dir,
            cluster_cidr=args.cluster_cidr,
            service_cidr=args.service_cidr,
            cluster_url=args.cluster_url,
            cluster_domain=args.cluster_domain,
        )
        config = PKIConfig(key_size=args.key_size)

        LOGGER.info("Bootstrapping PKI for node %s in %s", identity.node_name, identity.data_dir)
        result = BootstrapOrchestrator(identity, config).run()

        LOGGER.info("CA bundle: %s", result.ca_cert_path)
        for name, credential in result.certificates.items():
            LOGGER.info("  %s: %s", name, credential.cert_path)
        for name, key_pair in result.key_pairs.items():
            LOGGER.info("  %s: %s", name, key_pair.private_path)
        for name, kubeconfig in result.kubeconfigs.items():
            LOGGER.info("  %s kubeconfig: %s", name, kubeconfig.path)
        return 0

    except PKIError as e:
        LOGGER.error("PKI bootstrap failed: %s", e)
        return 1
    except ValueError as e:
        LOGGER.error("Invalid configuration: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
