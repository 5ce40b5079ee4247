"""Cluster network helpers."""

import ipaddress
from ipaddress import IPv4Address, IPv6Address

from .errors import InvalidCIDRError

# Kubernetes refuses service ranges smaller than this
MIN_SERVICE_RANGE_SIZE = 8


def derive_api_server_service_ip(service_cidr: str) -> IPv4Address | IPv6Address:
    """Return the in-cluster IP of the default ``kubernetes`` service.

    This is the first address after the network address of the service range,
    and it must appear on the API server's serving certificate.

    Args:
        service_cidr: Service network, e.g. ``10.43.0.0/16``

    Returns:
        Network address + 1 (``10.43.0.1`` for ``10.43.0.0/16``)

    Raises:
        InvalidCIDRError: If the CIDR is malformed or holds fewer than 8 addresses
    """
    try:
        network = ipaddress.ip_network(service_cidr, strict=False)
    except ValueError as e:
        raise InvalidCIDRError(f"invalid service CIDR {service_cidr!r}: {e}") from e

    if network.num_addresses < MIN_SERVICE_RANGE_SIZE:
        raise InvalidCIDRError(
            f"service CIDR {service_cidr!r} must hold at least "
            f"{MIN_SERVICE_RANGE_SIZE} addresses, has {network.num_addresses}"
        )

    return network.network_address + 1
