"""Certificate utility functions for PEM serialization, CA loading, and metadata extraction."""

from pathlib import Path

from cryptography import exceptions as crypto_exceptions
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from .errors import CALoadFailed
from .key_generator import PrivateKey
from .models import CertificateMetadata, OutputLayout


def serialize_private_key(key: PrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS8, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> PrivateKey:
    """Deserialize Ed25519 or RSA private key from PEM bytes.

    The data may hold other PEM blocks (e.g. a combined cert+key file); the
    first private key block is used.
    """
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, (ed25519.Ed25519PrivateKey, rsa.RSAPrivateKey)):
        raise ValueError("expected Ed25519 or RSA private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize the first certificate block from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def _read_ca_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise CALoadFailed(f"cannot read CA file: {e.strerror or e}", path=path) from e


def _public_key_der(key: object) -> bytes:
    return key.public_bytes(  # type: ignore[attr-defined]
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_ca(layout: OutputLayout) -> tuple[x509.Certificate, PrivateKey]:
    """Load CA certificate and private key from their PEM file(s).

    Args:
        layout: Combined (both blocks in one file) or Split CA file layout

    Returns:
        Tuple of (ca_certificate, ca_private_key)

    Raises:
        CALoadFailed: If a file is unreadable, a block is missing or corrupt,
            the key does not match the certificate, or the cert is not a CA
    """
    cert_path, key_path = layout.cert_path, layout.key_path

    cert_data = _read_ca_file(cert_path)
    key_data = cert_data if key_path == cert_path else _read_ca_file(key_path)

    try:
        ca_cert = deserialize_certificate(cert_data)
    except ValueError as e:
        raise CALoadFailed(f"cannot load CA certificate: {e}", path=cert_path) from e

    try:
        ca_key = deserialize_private_key(key_data)
    except (ValueError, TypeError, crypto_exceptions.UnsupportedAlgorithm) as e:
        raise CALoadFailed(f"invalid CA private key: {e}", path=key_path) from e

    if _public_key_der(ca_cert.public_key()) != _public_key_der(ca_key.public_key()):
        raise CALoadFailed("CA private key does not match CA certificate", path=key_path)

    try:
        basic_constraints = ca_cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound as e:
        raise CALoadFailed("CA certificate has no BasicConstraints", path=cert_path) from e
    if not basic_constraints.value.ca:
        raise CALoadFailed("certificate is not a CA (CA:FALSE)", path=cert_path)

    return ca_cert, ca_key


def get_certificate_serial_hex(cert: x509.Certificate) -> str:
    """Return certificate serial number as hex with colons (e.g., 3A:F2:B1:...)."""
    serial_hex = f"{cert.serial_number:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return ":".join(serial_hex[i : i + 2] for i in range(0, len(serial_hex), 2))


def get_subject_alt_names(cert: x509.Certificate) -> tuple[list[str], list[str]]:
    """Return (dns_names, ip_addresses) from the SAN extension, empty if absent."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return [], []
    dns_names = san.get_values_for_type(x509.DNSName)
    ip_addresses = [str(ip) for ip in san.get_values_for_type(x509.IPAddress)]
    return dns_names, ip_addresses


def is_ca_certificate(cert: x509.Certificate) -> bool:
    """Return True if BasicConstraints marks the certificate as a CA."""
    try:
        return cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca
    except x509.ExtensionNotFound:
        return False


def extract_certificate_metadata(cert: x509.Certificate) -> CertificateMetadata:
    """Extract certificate metadata for logging and issue results.

    Args:
        cert: X.509 certificate to extract metadata from

    Returns:
        CertificateMetadata with serialNumber, subject/issuer, validity, CA flag, SANs
    """
    dns_names, ip_addresses = get_subject_alt_names(cert)
    return CertificateMetadata(
        serialNumber=get_certificate_serial_hex(cert),
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        notBefore=cert.not_valid_before_utc.isoformat(),
        expiry=cert.not_valid_after_utc.isoformat(),
        isCA=is_ca_certificate(cert),
        dnsNames=dns_names,
        ipAddresses=ip_addresses,
    )


def verify_issued_by(cert: x509.Certificate, issuer_cert: x509.Certificate) -> bool:
    """Verify cert signature and issuer name against issuer_cert.

    Returns True if cert was directly issued by issuer_cert, False otherwise.
    """
    try:
        cert.verify_directly_issued_by(issuer_cert)
        return True
    except (ValueError, TypeError, InvalidSignature):
        return False
