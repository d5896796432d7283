"""Certificate issuer: CA and endpoint generation pipelines."""

import logging
import secrets
from datetime import timedelta

from cryptography import x509

from .cert_utils import (
    extract_certificate_metadata,
    load_ca,
    serialize_certificate,
    serialize_private_key,
)
from .certificate_builder import CertificateBuilder
from .config import DistinguishedName, IssuerConfig, KeyAlgorithm
from .errors import EncodingFailed, IcertError, TemplateBuildFailed
from .key_generator import KeyGenerator, PrivateKey, RandomBytes, generate_serial_number
from .models import (
    CertificateBundle,
    CertificateRequest,
    IPAddress,
    IssueResult,
    OutputLayout,
)
from .pem_writer import write_bundle

logger = logging.getLogger(__name__)


class CertificateIssuer:
    """Issues a self-signed CA and endpoint certificates signed by it.

    Each call runs one linear pipeline (keygen, optional CA load, template,
    sign, encode, write) and fails fast at the first broken stage. No state
    is kept between calls; the CA key is re-read from disk for every
    endpoint certificate.
    """

    def __init__(
        self,
        config: IssuerConfig | None = None,
        random_bytes: RandomBytes = secrets.token_bytes,
    ) -> None:
        """Initialize issuer with configuration.

        Args:
            config: Issuer configuration (RSA key size, file modes, clamping)
            random_bytes: Random source for serial numbers; key generation
                always uses the backend CSPRNG
        """
        self.config = config or IssuerConfig()
        self.random_bytes = random_bytes
        self.key_generator = KeyGenerator(rsa_key_size=self.config.rsa_key_size)

    def generate_ca_certificate(
        self,
        algorithm: KeyAlgorithm | str,
        subject: DistinguishedName,
        ttl: timedelta,
        layout: OutputLayout,
    ) -> IssueResult:
        """Generate a self-signed CA certificate and key and write them as PEM.

        Args:
            algorithm: Key algorithm for the CA key pair
            subject: CA subject (also used as issuer)
            ttl: Validity period from now
            layout: Combined or Split output files

        Returns:
            IssueResult with output paths, serial number, and validity window

        Raises:
            UnsupportedAlgorithm, KeyGenerationFailed, TemplateBuildFailed,
            SigningFailed, EncodingFailed, FileWriteFailed
        """
        try:
            request = CertificateRequest.for_ca(algorithm, subject, ttl)
            key_pair = self.key_generator.generate_key_pair(request.algorithm)

            template = CertificateBuilder.ca_template(
                subject_dn=request.subject,
                public_key=key_pair.public_key,
                ttl=request.ttl,
                serial_number=self._serial_number(),
            )
            strategy = self.key_generator.strategy(key_pair.algorithm)
            cert = CertificateBuilder.sign(
                template, key_pair.private_key, strategy.signature_hash()
            )

            return self._write(cert, key_pair.private_key, layout)
        except IcertError as e:
            logger.error("CA certificate generation failed: %s", e, extra=e.context())
            raise

    def generate_endpoint_certificate(
        self,
        algorithm: KeyAlgorithm | str,
        subject: DistinguishedName,
        dns_names: list[str] | None,
        ip_addresses: list[IPAddress | str] | None,
        ttl: timedelta,
        ca_layout: OutputLayout,
        layout: OutputLayout,
    ) -> IssueResult:
        """Generate an endpoint certificate signed by the CA on disk.

        The endpoint algorithm is independent of the CA's. Validity is not
        clamped to the CA's expiry unless IssuerConfig.clamp_to_ca_expiry is
        set; a warning is logged when the endpoint would outlive its CA.

        Args:
            algorithm: Key algorithm for the endpoint key pair
            subject: Endpoint subject
            dns_names: DNS names for the SAN extension
            ip_addresses: IP addresses (strings or ipaddress objects) for the SAN extension
            ttl: Validity period from now
            ca_layout: Where the CA certificate and key are stored
            layout: Combined or Split output files

        Returns:
            IssueResult with output paths, serial number, and validity window

        Raises:
            UnsupportedAlgorithm, InvalidSubjectAltNames, KeyGenerationFailed,
            CALoadFailed, TemplateBuildFailed, SigningFailed, EncodingFailed,
            FileWriteFailed
        """
        try:
            request = CertificateRequest.for_endpoint(
                algorithm, subject, dns_names, ip_addresses, ttl
            )
            key_pair = self.key_generator.generate_key_pair(request.algorithm)
            ca_cert, ca_key = load_ca(ca_layout)

            ca_not_after = ca_cert.not_valid_after_utc
            template = CertificateBuilder.endpoint_template(
                subject_dn=request.subject,
                public_key=key_pair.public_key,
                dns_names=request.dns_names,
                ip_addresses=request.ip_addresses,
                issuer_cert=ca_cert,
                ttl=request.ttl,
                serial_number=self._serial_number(),
                not_after_cap=ca_not_after if self.config.clamp_to_ca_expiry else None,
            )
            ca_strategy = self.key_generator.strategy_for_private_key(ca_key)
            cert = CertificateBuilder.sign(template, ca_key, ca_strategy.signature_hash())

            if cert.not_valid_after_utc > ca_not_after:
                logger.warning(
                    "Endpoint certificate expires %s, after its CA (%s); "
                    "relying parties will reject it past the CA expiry",
                    cert.not_valid_after_utc.isoformat(),
                    ca_not_after.isoformat(),
                )

            return self._write(cert, key_pair.private_key, layout)
        except IcertError as e:
            logger.error("Endpoint certificate generation failed: %s", e, extra=e.context())
            raise

    def _serial_number(self) -> int:
        try:
            return generate_serial_number(self.random_bytes)
        except ValueError as e:
            raise TemplateBuildFailed(f"cannot draw serial number: {e}") from e

    def _write(
        self, cert: x509.Certificate, private_key: PrivateKey, layout: OutputLayout
    ) -> IssueResult:
        try:
            bundle = CertificateBundle(
                certificate_pem=serialize_certificate(cert),
                private_key_pem=serialize_private_key(private_key),
                layout=layout,
            )
        except (ValueError, TypeError) as e:
            raise EncodingFailed(f"PEM encoding failed: {e}") from e

        cert_path, key_path = write_bundle(
            bundle,
            cert_mode=self.config.cert_file_mode,
            key_mode=self.config.key_file_mode,
        )
        metadata = extract_certificate_metadata(cert)
        logger.info(
            "Issued certificate %s for %s (expires %s) -> %s",
            metadata["serialNumber"],
            metadata["subject"] or "<empty subject>",
            metadata["expiry"],
            cert_path if cert_path == key_path else f"{cert_path}, {key_path}",
        )

        return IssueResult(
            cert_path=cert_path,
            key_path=key_path,
            serial_number=metadata["serialNumber"],
            not_valid_before=cert.not_valid_before_utc,
            not_valid_after=cert.not_valid_after_utc,
            metadata=metadata,
        )
