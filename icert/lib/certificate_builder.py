"""Certificate builder for X.509 CA and endpoint certificate construction."""

from datetime import datetime, timedelta, timezone

from cryptography import exceptions as crypto_exceptions
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import ExtendedKeyUsageOID

from .config import DistinguishedName
from .errors import SigningFailed, TemplateBuildFailed
from .key_generator import PrivateKey, PublicKey
from .models import IPAddress


class CertificateBuilder:
    """Builds X.509 certificate templates for a CA and its endpoints, and signs them."""

    @staticmethod
    def ca_template(
        subject_dn: DistinguishedName,
        public_key: PublicKey,
        ttl: timedelta,
        serial_number: int,
    ) -> x509.CertificateBuilder:
        """Build self-issued CA certificate template.

        Args:
            subject_dn: Distinguished name for subject and issuer
            public_key: Public key of the CA key pair
            ttl: Certificate validity period from now
            serial_number: Positive random serial number

        Returns:
            Unsigned builder with CA extensions

        Raises:
            TemplateBuildFailed: If subject, validity, or extensions are invalid
        """
        try:
            subject = subject_dn.to_x509_name()
            not_before = datetime.now(timezone.utc)
            not_after = not_before + ttl

            return (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(subject)
                .public_key(public_key)
                .serial_number(serial_number)
                .not_valid_before(not_before)
                .not_valid_after(not_after)
                .add_extension(
                    x509.BasicConstraints(ca=True, path_length=None),
                    critical=True,
                )
                .add_extension(
                    x509.KeyUsage(
                        digital_signature=True,
                        content_commitment=False,
                        key_encipherment=False,
                        data_encipherment=False,
                        key_agreement=False,
                        key_cert_sign=True,
                        crl_sign=True,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    critical=True,
                )
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(public_key),
                    critical=False,
                )
                .add_extension(
                    x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key),
                    critical=False,
                )
            )
        except (ValueError, TypeError, OverflowError) as e:
            raise TemplateBuildFailed(f"invalid CA template: {e}") from e

    @staticmethod
    def endpoint_template(
        subject_dn: DistinguishedName,
        public_key: PublicKey,
        dns_names: list[str],
        ip_addresses: list[IPAddress],
        issuer_cert: x509.Certificate,
        ttl: timedelta,
        serial_number: int,
        not_after_cap: datetime | None = None,
    ) -> x509.CertificateBuilder:
        """Build endpoint (leaf) certificate template issued by the CA.

        The SAN extension lists exactly the given DNS names followed by the
        given IP addresses. It is marked critical when the subject is empty.

        Args:
            subject_dn: Distinguished name for certificate subject
            public_key: Public key of the endpoint key pair
            dns_names: DNS names for the SAN extension
            ip_addresses: IP addresses for the SAN extension
            issuer_cert: CA certificate (issuer)
            ttl: Certificate validity period from now
            serial_number: Positive random serial number
            not_after_cap: Upper bound for notAfter, if clamping is requested

        Returns:
            Unsigned builder with endpoint extensions

        Raises:
            TemplateBuildFailed: If subject, SANs, validity, or extensions are invalid
        """
        try:
            subject = subject_dn.to_x509_name()
            not_before = datetime.now(timezone.utc)
            not_after = not_before + ttl
            if not_after_cap is not None and not_after > not_after_cap:
                not_after = not_after_cap

            general_names: list[x509.GeneralName] = [x509.DNSName(name) for name in dns_names]
            general_names.extend(x509.IPAddress(address) for address in ip_addresses)

            try:
                issuer_ski = issuer_cert.extensions.get_extension_for_class(
                    x509.SubjectKeyIdentifier
                ).value
                authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(
                    issuer_ski
                )
            except x509.ExtensionNotFound:
                authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_public_key(
                    issuer_cert.public_key()  # type: ignore[arg-type]
                )

            return (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(issuer_cert.subject)
                .public_key(public_key)
                .serial_number(serial_number)
                .not_valid_before(not_before)
                .not_valid_after(not_after)
                .add_extension(
                    x509.BasicConstraints(ca=False, path_length=None),
                    critical=True,
                )
                .add_extension(
                    x509.KeyUsage(
                        digital_signature=True,
                        content_commitment=False,
                        key_encipherment=True,
                        data_encipherment=False,
                        key_agreement=False,
                        key_cert_sign=False,
                        crl_sign=False,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    critical=True,
                )
                .add_extension(
                    x509.ExtendedKeyUsage(
                        [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]
                    ),
                    critical=False,
                )
                .add_extension(
                    x509.SubjectAlternativeName(general_names),
                    critical=len(subject) == 0,
                )
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(public_key),
                    critical=False,
                )
                .add_extension(authority_key_id, critical=False)
            )
        except (ValueError, TypeError, OverflowError) as e:
            raise TemplateBuildFailed(f"invalid endpoint template: {e}") from e

    @staticmethod
    def sign(
        builder: x509.CertificateBuilder,
        signing_key: PrivateKey,
        hash_algorithm: hashes.HashAlgorithm | None,
    ) -> x509.Certificate:
        """Sign a certificate template.

        Args:
            builder: Complete certificate template
            signing_key: Private key of the issuer (the CA's own key when self-signing)
            hash_algorithm: Digest for the signature, None for Ed25519

        Returns:
            Signed X.509 certificate

        Raises:
            SigningFailed: If the backend rejects the key, digest, or template
        """
        try:
            return builder.sign(signing_key, hash_algorithm)
        except (ValueError, TypeError, crypto_exceptions.UnsupportedAlgorithm) as e:
            raise SigningFailed(f"certificate signing failed: {e}") from e
