"""Exceptions raised while loading or creating cluster PKI material."""

from pathlib import Path


class PKIError(Exception):
    """Base error for bootstrap failures.

    Carries the path of the artifact that failed so operators can find it.
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{self.path}: {message}"
        super().__init__(message)


class InvalidCIDRError(PKIError):
    """Service CIDR is malformed or too small."""


class MalformedCAError(PKIError):
    """Existing CA material is unreadable or not a self-signed CA."""


class MalformedCertificateError(PKIError):
    """Existing leaf certificate or key cannot be parsed."""


class UntrustedExistingCertError(PKIError):
    """Existing certificate does not chain to the current CA."""


class MalformedKeyPairError(PKIError):
    """Existing bare key pair is unreadable or mismatched."""


class MalformedKubeconfigError(PKIError):
    """Existing kubeconfig cannot be parsed."""


class ArtifactIOError(PKIError):
    """Filesystem failure while reading or writing an artifact."""
