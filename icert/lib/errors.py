"""Error taxonomy for certificate issuance.

Every failure is terminal for the call that raised it. Each error carries the
pipeline stage it came from and, for file operations, the offending path.
"""

from pathlib import Path


class IcertError(Exception):
    """Base class for all certificate issuance errors."""

    stage = "unknown"

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize error with message and optional file path.

        Args:
            message: Human readable description of the failure
            path: File path involved in the failure, if any
        """
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def context(self) -> dict[str, str]:
        """Return logging extra fields (stage, path) for this error."""
        context = {"stage": self.stage}
        if self.path is not None:
            context["path"] = str(self.path)
        return context

    def __str__(self) -> str:
        if self.path is not None:
            return f"[{self.stage}] {self.message} (path: {self.path})"
        return f"[{self.stage}] {self.message}"


class UnsupportedAlgorithm(IcertError):
    """Requested key algorithm is not Ed25519 or RSA."""

    stage = "keygen"


class KeyGenerationFailed(IcertError):
    """Backend failed to produce a key pair."""

    stage = "keygen"


class TemplateBuildFailed(IcertError):
    """Certificate template could not be built (bad subject, ttl, extensions)."""

    stage = "template"


class InvalidSubjectAltNames(IcertError):
    """Endpoint request without any usable DNS name or IP address."""

    stage = "template"


class SigningFailed(IcertError):
    """Signing the certificate template failed."""

    stage = "sign"


class EncodingFailed(IcertError):
    """PEM encoding of the certificate or private key failed."""

    stage = "encode"


class FileWriteFailed(IcertError):
    """Output file could not be written."""

    stage = "write"


class CALoadFailed(IcertError):
    """CA certificate or key could not be loaded or is structurally invalid."""

    stage = "load_ca"
