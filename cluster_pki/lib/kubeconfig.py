"""Kubeconfig document assembly and parsing."""

import base64
import binascii
from pathlib import Path
from typing import Any

import yaml
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import (
    deserialize_certificate,
    deserialize_private_key,
    serialize_certificate,
    serialize_private_key,
)
from .errors import MalformedKubeconfigError
from .models import Kubeconfig


def _encode(pem: bytes) -> str:
    return base64.b64encode(pem).decode("ascii")


def build_kubeconfig_document(
    cluster_name: str,
    cluster_url: str,
    ca_cert: x509.Certificate,
    username: str,
    client_cert: x509.Certificate,
    client_key: RSAPrivateKey,
) -> dict[str, Any]:
    """Build a kubeconfig with one cluster, one user and the context binding them.

    Certificate and key material is embedded as base64-encoded PEM.

    Args:
        cluster_name: Name of the cluster entry, also used as context name
        cluster_url: API server URL, must match what the server advertises
        ca_cert: CA bundle clients verify the server against
        username: Name of the user entry
        client_cert: Client certificate for username
        client_key: Private key of client_cert

    Returns:
        Kubeconfig as a plain dict, ready for YAML serialization
    """
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "preferences": {},
        "clusters": [
            {
                "name": cluster_name,
                "cluster": {
                    "server": cluster_url,
                    "certificate-authority-data": _encode(serialize_certificate(ca_cert)),
                },
            }
        ],
        "users": [
            {
                "name": username,
                "user": {
                    "client-certificate-data": _encode(serialize_certificate(client_cert)),
                    "client-key-data": _encode(serialize_private_key(client_key)),
                },
            }
        ],
        "contexts": [
            {
                "name": cluster_name,
                "context": {"cluster": cluster_name, "user": username},
            }
        ],
        "current-context": cluster_name,
    }


def dump_kubeconfig(document: dict[str, Any]) -> bytes:
    """Serialize a kubeconfig dict to YAML bytes (stable key order)."""
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False).encode("utf-8")


def _find_named(entries: Any, name: str, section: str, path: Path) -> dict[str, Any]:
    if not isinstance(entries, list):
        raise MalformedKubeconfigError(f"'{section}' must be a list", path)
    for entry in entries:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry
    raise MalformedKubeconfigError(f"no entry named {name!r} in '{section}'", path)


def _decode_field(section: dict[str, Any], key: str, path: Path) -> bytes:
    value = section.get(key)
    if not isinstance(value, str):
        raise MalformedKubeconfigError(f"missing '{key}'", path)
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedKubeconfigError(f"'{key}' is not valid base64: {e}", path) from e


def parse_kubeconfig(data: bytes, path: Path) -> Kubeconfig:
    """Parse kubeconfig bytes, resolving the current context.

    Raises:
        MalformedKubeconfigError: On YAML errors, missing entries or undecodable PEM
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise MalformedKubeconfigError(f"invalid YAML: {e}", path) from e

    if not isinstance(document, dict):
        raise MalformedKubeconfigError("document is not a mapping", path)

    context_name = document.get("current-context")
    if not isinstance(context_name, str) or not context_name:
        raise MalformedKubeconfigError("missing 'current-context'", path)

    context = _find_named(document.get("contexts"), context_name, "contexts", path).get("context")
    if not isinstance(context, dict):
        raise MalformedKubeconfigError(f"context {context_name!r} has no body", path)

    cluster = _find_named(document.get("clusters"), context.get("cluster"), "clusters", path).get("cluster")
    user = _find_named(document.get("users"), context.get("user"), "users", path).get("user")
    if not isinstance(cluster, dict) or not isinstance(user, dict):
        raise MalformedKubeconfigError("cluster or user entry has no body", path)

    server = cluster.get("server")
    if not isinstance(server, str) or not server:
        raise MalformedKubeconfigError("cluster entry has no 'server'", path)

    try:
        ca_cert = deserialize_certificate(_decode_field(cluster, "certificate-authority-data", path))
        client_cert = deserialize_certificate(_decode_field(user, "client-certificate-data", path))
        client_key = deserialize_private_key(_decode_field(user, "client-key-data", path))
    except ValueError as e:
        raise MalformedKubeconfigError(f"embedded PEM is unreadable: {e}", path) from e

    return Kubeconfig(
        cluster_url=server,
        ca_bundle=ca_cert,
        client_certificate=client_cert,
        client_key=client_key,
        context_name=context_name,
        path=path,
    )
