"""Tests for request, layout, and subject models."""

import ipaddress
from datetime import timedelta
from pathlib import Path

import pytest
from cryptography import x509

from icert.lib.config import DistinguishedName, KeyAlgorithm
from icert.lib.errors import (
    FileWriteFailed,
    InvalidSubjectAltNames,
    TemplateBuildFailed,
    UnsupportedAlgorithm,
)
from icert.lib.models import (
    CertificateRequest,
    CertificateRole,
    Combined,
    Split,
    layout_from_paths,
)


class TestOutputLayout:
    """Tests for Combined/Split layouts."""

    def test_equal_paths_select_combined(self, tmp_path: Path) -> None:
        """Same cert and key path maps to Combined."""
        layout = layout_from_paths(tmp_path / "a.pem", tmp_path / "a.pem")
        assert layout == Combined(tmp_path / "a.pem")

    def test_missing_key_path_selects_combined(self, tmp_path: Path) -> None:
        """Omitted key path maps to Combined."""
        assert isinstance(layout_from_paths(tmp_path / "a.pem"), Combined)

    def test_distinct_paths_select_split(self, tmp_path: Path) -> None:
        """Distinct paths map to Split."""
        layout = layout_from_paths(str(tmp_path / "c.pem"), str(tmp_path / "k.pem"))
        assert layout == Split(tmp_path / "c.pem", tmp_path / "k.pem")
        assert isinstance(layout.cert_path, Path)

    def test_split_with_equal_paths_rejected(self, tmp_path: Path) -> None:
        """Split refuses identical paths; Combined must be used instead."""
        with pytest.raises(FileWriteFailed, match="distinct"):
            Split(tmp_path / "same.pem", tmp_path / "same.pem")

    def test_combined_exposes_single_path(self, tmp_path: Path) -> None:
        """Combined cert_path and key_path are the same file."""
        layout = Combined(str(tmp_path / "both.pem"))  # type: ignore[arg-type]
        assert layout.cert_path == layout.key_path == tmp_path / "both.pem"


class TestCertificateRequest:
    """Tests for CertificateRequest validation."""

    def test_ca_request(self) -> None:
        """CA request carries no SANs and the CA role."""
        request = CertificateRequest.for_ca("ed25519", DistinguishedName(), timedelta(hours=1))
        assert request.role is CertificateRole.CA
        assert request.algorithm is KeyAlgorithm.ED25519
        assert request.dns_names == []
        assert request.ip_addresses == []

    def test_ca_request_with_sans_rejected(self) -> None:
        """SANs on a CA request are a template error."""
        request = CertificateRequest(
            algorithm=KeyAlgorithm.RSA,
            subject=DistinguishedName(),
            ttl=timedelta(hours=1),
            role=CertificateRole.CA,
            dns_names=["localhost"],
        )
        with pytest.raises(TemplateBuildFailed, match="must not carry"):
            request.validate()

    @pytest.mark.parametrize("ttl", [timedelta(0), timedelta(seconds=-1), 3600])
    def test_non_positive_ttl_rejected(self, ttl: object) -> None:
        """TTL must be a positive timedelta."""
        with pytest.raises(TemplateBuildFailed, match="positive duration"):
            CertificateRequest.for_ca("rsa", DistinguishedName(), ttl)  # type: ignore[arg-type]

    def test_ttl_past_datetime_range_rejected(self) -> None:
        """TTL that overflows the validity window is a template error."""
        with pytest.raises(TemplateBuildFailed, match="overflows"):
            CertificateRequest.for_ca("ed25519", DistinguishedName(), timedelta(days=4_000_000))

    def test_endpoint_request_parses_ips(self) -> None:
        """IP strings become ipaddress objects, order preserved."""
        request = CertificateRequest.for_endpoint(
            "rsa",
            DistinguishedName(),
            ["localhost"],
            ["127.0.0.1", ipaddress.ip_address("::1")],
            timedelta(hours=1),
        )
        assert request.role is CertificateRole.ENDPOINT
        assert request.ip_addresses == [
            ipaddress.IPv4Address("127.0.0.1"),
            ipaddress.IPv6Address("::1"),
        ]

    @pytest.mark.parametrize(("dns_names", "ip_addresses"), [([], []), (None, None), ([], None)])
    def test_endpoint_without_sans_rejected(
        self, dns_names: list[str] | None, ip_addresses: list[str] | None
    ) -> None:
        """Endpoint needs at least one DNS name or IP address."""
        with pytest.raises(InvalidSubjectAltNames, match="at least one"):
            CertificateRequest.for_endpoint(
                "ed25519", DistinguishedName(), dns_names, ip_addresses, timedelta(hours=1)
            )

    def test_endpoint_ip_only_accepted(self) -> None:
        """IP addresses alone satisfy the SAN requirement."""
        request = CertificateRequest.for_endpoint(
            "ed25519", DistinguishedName(), [], ["10.0.0.1"], timedelta(hours=1)
        )
        assert request.dns_names == []

    def test_endpoint_malformed_ip_rejected(self) -> None:
        """Unparseable IP address is an InvalidSubjectAltNames error."""
        with pytest.raises(InvalidSubjectAltNames, match="invalid IP address"):
            CertificateRequest.for_endpoint(
                "ed25519", DistinguishedName(), [], ["300.1.1.1"], timedelta(hours=1)
            )

    def test_endpoint_blank_dns_rejected(self) -> None:
        """Blank DNS names are rejected."""
        with pytest.raises(InvalidSubjectAltNames, match="invalid DNS name"):
            CertificateRequest.for_endpoint(
                "ed25519", DistinguishedName(), ["  "], [], timedelta(hours=1)
            )

    def test_endpoint_non_ascii_dns_rejected(self) -> None:
        """Unicode DNS names must be given in their IDNA form."""
        with pytest.raises(InvalidSubjectAltNames, match="not ASCII"):
            CertificateRequest.for_endpoint(
                "ed25519", DistinguishedName(), ["bücher.example"], [], timedelta(hours=1)
            )

    def test_endpoint_idna_dns_accepted(self) -> None:
        """IDNA A-labels pass validation unchanged."""
        request = CertificateRequest.for_endpoint(
            "ed25519", DistinguishedName(), ["xn--bcher-kva.example"], [], timedelta(hours=1)
        )
        assert request.dns_names == ["xn--bcher-kva.example"]

    def test_unsupported_algorithm(self) -> None:
        """Unsupported tag is rejected when the request is built."""
        with pytest.raises(UnsupportedAlgorithm):
            CertificateRequest.for_endpoint(
                "ecdsa", DistinguishedName(), ["localhost"], [], timedelta(hours=1)
            )


class TestDistinguishedName:
    """Tests for DistinguishedName.to_x509_name."""

    def test_only_set_fields_emitted(self) -> None:
        """Empty fields are skipped."""
        name = DistinguishedName(organization="Test Organization CA").to_x509_name()
        assert len(name) == 1
        assert name.get_attributes_for_oid(x509.NameOID.ORGANIZATION_NAME)[0].value == (
            "Test Organization CA"
        )

    def test_empty_dn_gives_empty_name(self) -> None:
        """No fields means an empty x509.Name."""
        assert len(DistinguishedName().to_x509_name()) == 0

    def test_all_fields(self) -> None:
        """Every field maps to its OID."""
        name = DistinguishedName(
            common_name="host",
            organization="Org",
            organizational_unit="Unit",
            country="GB",
            state="London",
            locality="London",
            street_address="1 Road",
            postal_code="E1",
        ).to_x509_name()
        assert len(name) == 8
        assert name.get_attributes_for_oid(x509.NameOID.COUNTRY_NAME)[0].value == "GB"
        assert name.get_attributes_for_oid(x509.NameOID.POSTAL_CODE)[0].value == "E1"

    def test_invalid_country_raises(self) -> None:
        """Country code must be two characters."""
        with pytest.raises(ValueError):
            DistinguishedName(country="GBR").to_x509_name()
