"""Issuer configuration dataclasses."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from cryptography import x509
from cryptography.x509 import oid

from .errors import UnsupportedAlgorithm

MIN_RSA_KEY_SIZE = 2048


class KeyAlgorithm(Enum):
    """Supported key-pair algorithms."""

    ED25519 = "ed25519"
    RSA = "rsa"

    @classmethod
    def parse(cls, value: "KeyAlgorithm | str") -> "KeyAlgorithm":
        """Resolve an enum member or case-insensitive tag to a KeyAlgorithm.

        Raises:
            UnsupportedAlgorithm: If value names no supported algorithm
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedAlgorithm(f"unsupported key algorithm: {value!r}")


@dataclass
class IssuerConfig:
    """Certificate issuer configuration."""

    rsa_key_size: int = 4096
    cert_file_mode: int = 0o644
    key_file_mode: int = 0o600
    clamp_to_ca_expiry: bool = False
    default_ttl: timedelta = field(default_factory=lambda: timedelta(days=365))

    def __post_init__(self) -> None:
        if self.rsa_key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"rsa_key_size must be at least {MIN_RSA_KEY_SIZE} bits")
        if self.key_file_mode & 0o077:
            raise ValueError("key_file_mode must not grant group or world access")


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name.

    All fields are optional; only non-empty ones end up in the certificate.
    """

    common_name: str | None = None
    organization: str | None = None
    organizational_unit: str | None = None
    country: str | None = None
    state: str | None = None
    locality: str | None = None
    street_address: str | None = None
    postal_code: str | None = None

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        fields = [
            (oid.NameOID.COUNTRY_NAME, self.country),
            (oid.NameOID.STATE_OR_PROVINCE_NAME, self.state),
            (oid.NameOID.LOCALITY_NAME, self.locality),
            (oid.NameOID.STREET_ADDRESS, self.street_address),
            (oid.NameOID.POSTAL_CODE, self.postal_code),
            (oid.NameOID.ORGANIZATION_NAME, self.organization),
            (oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
            (oid.NameOID.COMMON_NAME, self.common_name),
        ]
        return x509.Name(
            [x509.NameAttribute(name_oid, value) for name_oid, value in fields if value]
        )
