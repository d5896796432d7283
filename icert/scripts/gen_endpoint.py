#!/usr/bin/env python3
"""Issue an endpoint certificate signed by an existing CA."""

import argparse
import sys
from pathlib import Path

from icert.lib.config import IssuerConfig
from icert.lib.errors import IcertError
from icert.lib.issuer import CertificateIssuer
from icert.lib.logging_config import LOGGER, set_log_level
from icert.lib.models import layout_from_paths
from icert.scripts.common import add_common_arguments, subject_from_args, ttl_from_args


def main(argv: list[str] | None = None) -> int:
    """Issue endpoint certificate for the given DNS names and IP addresses.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Issue an endpoint certificate")
    add_common_arguments(parser)
    parser.add_argument(
        "--dns",
        action="append",
        default=[],
        help="DNS name for the SAN extension (repeatable)",
    )
    parser.add_argument(
        "--ip",
        action="append",
        default=[],
        help="IP address for the SAN extension (repeatable)",
    )
    parser.add_argument(
        "--ca-cert",
        type=Path,
        required=True,
        help="CA certificate PEM (also holds the CA key when --ca-key is omitted)",
    )
    parser.add_argument("--ca-key", type=Path, help="CA private key PEM")
    parser.add_argument(
        "--cert",
        type=Path,
        required=True,
        help="Certificate output path (combined with the key when --key is omitted)",
    )
    parser.add_argument(
        "--key",
        type=Path,
        help="Private key output path (default: same file as --cert)",
    )
    args = parser.parse_args(argv)

    try:
        set_log_level(args.log_level)
        config = IssuerConfig()
        issuer = CertificateIssuer(config)

        LOGGER.info("Issuing %s endpoint certificate for %s", args.algorithm, args.dns + args.ip)
        result = issuer.generate_endpoint_certificate(
            algorithm=args.algorithm,
            subject=subject_from_args(args),
            dns_names=args.dns,
            ip_addresses=args.ip,
            ttl=ttl_from_args(args, config.default_ttl),
            ca_layout=layout_from_paths(args.ca_cert, args.ca_key),
            layout=layout_from_paths(args.cert, args.key),
        )

        LOGGER.info("Endpoint certificate created:")
        LOGGER.info("  Cert: %s", result.cert_path)
        LOGGER.info("  Key: %s", result.key_path)
        LOGGER.info("  Serial: %s", result.serial_number)
        LOGGER.info("  Expires: %s", result.not_valid_after.isoformat())
        return 0

    except IcertError:
        # Already logged with its stage and path by the issuer
        return 1
    except ValueError as e:
        LOGGER.error("Invalid arguments: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
