"""Request, layout, and result models for certificate issuance."""

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import TypedDict

from .config import DistinguishedName, KeyAlgorithm
from .errors import FileWriteFailed, InvalidSubjectAltNames, TemplateBuildFailed

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class Combined:
    """Certificate and private key concatenated in one file."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    @property
    def cert_path(self) -> Path:
        return self.path

    @property
    def key_path(self) -> Path:
        return self.path


@dataclass(frozen=True)
class Split:
    """Certificate and private key in two distinct files."""

    cert_path: Path
    key_path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "cert_path", Path(self.cert_path))
        object.__setattr__(self, "key_path", Path(self.key_path))
        if self.cert_path == self.key_path:
            raise FileWriteFailed(
                "split layout requires distinct cert and key paths; use Combined",
                path=self.cert_path,
            )


OutputLayout = Combined | Split


def layout_from_paths(cert_path: Path | str, key_path: Path | str | None = None) -> OutputLayout:
    """Map a cert/key path pair onto an OutputLayout.

    Equal paths, or no key path at all, select the combined layout.
    """
    cert_path = Path(cert_path)
    if key_path is None or Path(key_path) == cert_path:
        return Combined(cert_path)
    return Split(cert_path, Path(key_path))


class CertificateRole(Enum):
    """Role of the certificate being issued."""

    CA = "ca"
    ENDPOINT = "endpoint"


@dataclass
class CertificateRequest:
    """Everything needed to build a certificate template."""

    algorithm: KeyAlgorithm
    subject: DistinguishedName
    ttl: timedelta
    role: CertificateRole
    dns_names: list[str] = field(default_factory=list)
    ip_addresses: list[IPAddress] = field(default_factory=list)

    @classmethod
    def for_ca(
        cls,
        algorithm: KeyAlgorithm | str,
        subject: DistinguishedName,
        ttl: timedelta,
    ) -> "CertificateRequest":
        """Build and validate a CA request."""
        request = cls(
            algorithm=KeyAlgorithm.parse(algorithm),
            subject=subject,
            ttl=ttl,
            role=CertificateRole.CA,
        )
        request.validate()
        return request

    @classmethod
    def for_endpoint(
        cls,
        algorithm: KeyAlgorithm | str,
        subject: DistinguishedName,
        dns_names: list[str] | None,
        ip_addresses: list[IPAddress | str] | None,
        ttl: timedelta,
    ) -> "CertificateRequest":
        """Build and validate an endpoint request.

        Raises:
            UnsupportedAlgorithm: If algorithm is not supported
            InvalidSubjectAltNames: If no SAN is given or an IP is malformed
            TemplateBuildFailed: If ttl is not a positive duration
        """
        parsed_ips: list[IPAddress] = []
        for address in ip_addresses or []:
            try:
                parsed_ips.append(ipaddress.ip_address(address))
            except ValueError as e:
                raise InvalidSubjectAltNames(f"invalid IP address: {address!r}") from e

        request = cls(
            algorithm=KeyAlgorithm.parse(algorithm),
            subject=subject,
            ttl=ttl,
            role=CertificateRole.ENDPOINT,
            dns_names=list(dns_names or []),
            ip_addresses=parsed_ips,
        )
        request.validate()
        return request

    def validate(self) -> None:
        """Check role-specific invariants.

        Raises:
            TemplateBuildFailed: For bad ttl or SANs on a CA request
            InvalidSubjectAltNames: For endpoint requests without SANs, or
                with blank or non-ASCII DNS names
        """
        if not isinstance(self.ttl, timedelta) or self.ttl <= timedelta(0):
            raise TemplateBuildFailed(f"ttl must be a positive duration, got {self.ttl!r}")
        try:
            datetime.now(timezone.utc) + self.ttl
        except OverflowError as e:
            raise TemplateBuildFailed(f"ttl {self.ttl!r} overflows the validity window") from e

        if self.role is CertificateRole.CA:
            if self.dns_names or self.ip_addresses:
                raise TemplateBuildFailed("CA requests must not carry subject alternative names")
            return

        if not self.dns_names and not self.ip_addresses:
            raise InvalidSubjectAltNames("endpoint requires at least one DNS name or IP address")
        for name in self.dns_names:
            if not isinstance(name, str) or not name.strip():
                raise InvalidSubjectAltNames(f"invalid DNS name: {name!r}")
            if not name.isascii():
                raise InvalidSubjectAltNames(
                    f"invalid DNS name: {name!r} is not ASCII; use its IDNA (xn--) form"
                )


@dataclass
class CertificateBundle:
    """PEM-encoded certificate and private key, plus where they go."""

    certificate_pem: bytes
    private_key_pem: bytes
    layout: OutputLayout


class CertificateMetadata(TypedDict):
    """Summary of an issued certificate for logs and results."""

    serialNumber: str
    subject: str
    issuer: str
    notBefore: str
    expiry: str
    isCA: bool
    dnsNames: list[str]
    ipAddresses: list[str]


@dataclass
class IssueResult:
    """Result from a certificate generation call.

    Contains output paths, serial number, and validity window of the issued
    certificate.
    """

    cert_path: Path
    key_path: Path
    serial_number: str
    not_valid_before: datetime
    not_valid_after: datetime
    metadata: CertificateMetadata

