"""Test fixtures for icert tests."""

from datetime import timedelta
from pathlib import Path

import pytest
from cryptography import x509

from icert.lib.cert_utils import deserialize_certificate
from icert.lib.config import DistinguishedName, IssuerConfig, KeyAlgorithm
from icert.lib.issuer import CertificateIssuer
from icert.lib.key_generator import KeyGenerator
from icert.lib.models import Combined, Split

TEST_TTL = timedelta(hours=1)
TEST_DNS_NAMES = ["localhost", "localhost6"]
TEST_IP_ADDRESSES = ["127.0.0.1", "::1"]


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Return temporary directory for test output artifacts."""
    return tmp_path


@pytest.fixture
def issuer_config() -> IssuerConfig:
    """Return test issuer configuration with a smaller RSA modulus."""
    return IssuerConfig(rsa_key_size=2048)  # Faster for tests


@pytest.fixture
def issuer(issuer_config: IssuerConfig) -> CertificateIssuer:
    """Return issuer using the test configuration."""
    return CertificateIssuer(issuer_config)


@pytest.fixture
def key_generator() -> KeyGenerator:
    """Return key generator with a 2048-bit RSA modulus."""
    return KeyGenerator(rsa_key_size=2048)


@pytest.fixture(params=[KeyAlgorithm.ED25519, KeyAlgorithm.RSA], ids=["ed25519", "rsa"])
def algorithm(request: pytest.FixtureRequest) -> KeyAlgorithm:
    """Parametrize over every supported key algorithm."""
    return request.param


@pytest.fixture(params=["combined", "split"])
def layout_mode(request: pytest.FixtureRequest) -> str:
    """Parametrize over combined and split output layouts."""
    return request.param


@pytest.fixture
def ca_dn() -> DistinguishedName:
    """Return test CA distinguished name."""
    return DistinguishedName(organization="Test Organization CA", common_name="Test CA")


@pytest.fixture
def endpoint_dn() -> DistinguishedName:
    """Return test endpoint distinguished name."""
    return DistinguishedName(organization="Test Organization Endpoint")


def make_layout(directory: Path, stem: str, mode: str) -> Combined | Split:
    """Return combined or split layout for files named after stem."""
    if mode == "combined":
        return Combined(directory / f"{stem}_combined.pem")
    return Split(directory / f"{stem}_cert.pem", directory / f"{stem}_key.pem")


def read_certificate(path: Path) -> x509.Certificate:
    """Load the first certificate from a PEM file."""
    return deserialize_certificate(path.read_bytes())


@pytest.fixture
def ca_layout(
    temp_output_dir: Path,
    issuer: CertificateIssuer,
    algorithm: KeyAlgorithm,
    ca_dn: DistinguishedName,
    layout_mode: str,
) -> Combined | Split:
    """Generate a CA on disk for every algorithm/layout pair and return its layout."""
    layout = make_layout(temp_output_dir, "ca", layout_mode)
    issuer.generate_ca_certificate(
        algorithm=algorithm,
        subject=ca_dn,
        ttl=TEST_TTL,
        layout=layout,
    )
    return layout


@pytest.fixture
def ed25519_ca_layout(
    temp_output_dir: Path,
    issuer: CertificateIssuer,
    ca_dn: DistinguishedName,
) -> Combined:
    """Generate a single Ed25519 CA in a combined file."""
    layout = Combined(temp_output_dir / "ed25519_ca.pem")
    issuer.generate_ca_certificate(
        algorithm=KeyAlgorithm.ED25519,
        subject=ca_dn,
        ttl=TEST_TTL,
        layout=layout,
    )
    return layout


@pytest.fixture
def ca_cert(ed25519_ca_layout: Combined) -> x509.Certificate:
    """Return the Ed25519 test CA certificate."""
    return read_certificate(ed25519_ca_layout.path)
