"""Write PEM bundles to disk with restrictive permissions on key material."""

import logging
import os
from pathlib import Path

from .errors import FileWriteFailed
from .models import CertificateBundle, Combined

logger = logging.getLogger(__name__)


def write_file(path: Path, content: bytes, mode: int) -> None:
    """Create or truncate path, write content, and enforce mode.

    The mode is re-applied with fchmod so a pre-existing file with looser
    permissions is tightened too.

    Raises:
        FileWriteFailed: On any filesystem error
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), mode)
            f.write(content)
    except OSError as e:
        raise FileWriteFailed(f"cannot write file: {e.strerror or e}", path=path) from e


def write_bundle(
    bundle: CertificateBundle,
    cert_mode: int = 0o644,
    key_mode: int = 0o600,
) -> tuple[Path, Path]:
    """Write certificate and key PEM blocks according to the bundle layout.

    Combined: certificate block followed by key block in one file, key_mode.
    Split: certificate file with cert_mode, key file with key_mode.

    Args:
        bundle: PEM bytes and target layout
        cert_mode: Permission bits for a certificate-only file
        key_mode: Permission bits for any file holding the private key

    Returns:
        Tuple of (cert_path, key_path); equal for the combined layout

    Raises:
        FileWriteFailed: If any file cannot be written
    """
    layout = bundle.layout
    if isinstance(layout, Combined):
        write_file(layout.path, bundle.certificate_pem + bundle.private_key_pem, key_mode)
        logger.debug("Wrote combined PEM to %s", layout.path)
        return layout.path, layout.path

    write_file(layout.cert_path, bundle.certificate_pem, cert_mode)
    write_file(layout.key_path, bundle.private_key_pem, key_mode)
    logger.debug("Wrote certificate to %s and key to %s", layout.cert_path, layout.key_path)
    return layout.cert_path, layout.key_path
