"""Argument helpers shared by the icert scripts."""

import argparse
from datetime import timedelta

from icert.lib.config import DistinguishedName, KeyAlgorithm


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add algorithm, subject, TTL, and log-level options."""
    parser.add_argument(
        "--algorithm",
        default=KeyAlgorithm.ED25519.value,
        help="Key algorithm: ed25519 or rsa (default: ed25519)",
    )
    parser.add_argument("--common-name", help="Subject CN")
    parser.add_argument("--organization", help="Subject O")
    parser.add_argument("--organizational-unit", help="Subject OU")
    parser.add_argument("--country", help="Subject C (two-letter code)")
    parser.add_argument("--state", help="Subject ST")
    parser.add_argument("--locality", help="Subject L")
    parser.add_argument(
        "--ttl-hours",
        type=float,
        help="Validity period in hours (default: 365 days)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level (default: INFO)",
    )


def subject_from_args(args: argparse.Namespace) -> DistinguishedName:
    """Build the subject DN from parsed arguments."""
    return DistinguishedName(
        common_name=args.common_name,
        organization=args.organization,
        organizational_unit=args.organizational_unit,
        country=args.country,
        state=args.state,
        locality=args.locality,
    )


def ttl_from_args(args: argparse.Namespace, default: timedelta) -> timedelta:
    """Return --ttl-hours as a timedelta, or default when omitted.

    Raises:
        ValueError: If the value does not fit a timedelta
    """
    if args.ttl_hours is None:
        return default
    try:
        return timedelta(hours=args.ttl_hours)
    except OverflowError as e:
        raise ValueError(f"--ttl-hours out of range: {args.ttl_hours}") from e
