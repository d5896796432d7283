#!/usr/bin/env python3
"""Generate a self-signed CA certificate and private key."""

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
    """Generate CA certificate and key.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Generate a self-signed CA certificate")
    add_common_arguments(parser)
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

        LOGGER.info("Generating %s CA certificate...", args.algorithm)
        result = issuer.generate_ca_certificate(
            algorithm=args.algorithm,
            subject=subject_from_args(args),
            ttl=ttl_from_args(args, config.default_ttl),
            layout=layout_from_paths(args.cert, args.key),
        )

        LOGGER.info("CA certificate created:")
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
