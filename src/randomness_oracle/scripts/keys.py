#!/usr/bin/env python3
"""Generate or inspect the oracle's randomness signer key.

Usage:
    python -m randomness_oracle.scripts.keys generate
    python -m randomness_oracle.scripts.keys address [--key 0x...]

The printed address is what the game contract must hold as its randomness
signer.
"""

from __future__ import annotations

import argparse
import secrets
import sys

from randomness_oracle.core.settings import settings
from randomness_oracle.services.signing import RandomnessSigner


def _generate() -> int:
    private_key = "0x" + secrets.token_hex(32)
    signer = RandomnessSigner(private_key)
    print(f"BLACKJACK_RANDOMNESS_SIGNER_KEY={private_key}")
    print(f"Signer address: {signer.address}")
    return 0


def _address(key: str | None) -> int:
    key = key or settings.signer_private_key
    if not key:
        print("BLACKJACK_RANDOMNESS_SIGNER_KEY is not set", file=sys.stderr)
        return 1
    try:
        signer = RandomnessSigner(key.strip())
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(signer.address)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Randomness signer key utilities.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("generate", help="Generate a new signer key.")
    address_parser = subparsers.add_parser(
        "address",
        help="Print the address of the configured (or given) signer key.",
    )
    address_parser.add_argument("--key", help="Hex private key; defaults to the environment.")

    args = parser.parse_args(argv)
    if args.command == "generate":
        return _generate()
    return _address(args.key)


if __name__ == "__main__":
    sys.exit(main())
