############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# cli.py: Command-line interface
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""
hashforge command line

Usage:
    hashforge salt --length 32 --encoding base64
    hashforge salt --algorithm bcrypt --param cost=12
    hashforge hash argon2id --param memory=64 --param iterations=3
    hashforge hash bcrypt --password secret --json
    hashforge verify '$2b$12$...' --password secret
    hashforge detect '$scrypt$ln=17,r=8,p=1$...'
    hashforge info scrypt

Exit codes: 0 on success (or a matching password), 1 when verify finds a
mismatch, 2 on invalid input.
"""

import argparse
import getpass
import json
import sys
from typing import Any, Dict, List, Optional

from hashforge import __version__
from hashforge.app.core import registry
from hashforge.app.core.exceptions import HashingError
from hashforge.app.core.schemas import AlgorithmId
from hashforge.app.core.validators import (
    validate_candidate_password,
    validate_encoded_hash,
    validate_password,
)
from hashforge.app.logging_config import get_logger, setup_logging
from hashforge.app.security import encoded_format
from hashforge.app.services.hashing import HashingService
from hashforge.app.settings import get_settings

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_INVALID = 2

ALGORITHMS = [a.value for a in AlgorithmId]

logger = get_logger(__name__)


def _number(text: str) -> Any:
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, Any]:
    """Turn ``["memory=64", "iterations=3"]`` into a parameter mapping."""
    params: Dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {pair!r}")
        params[name.strip()] = _number(value.strip())
    return params


def _read_password(given: Optional[str], prompt: str) -> str:
    if given is not None:
        return given
    if not sys.stdin.isatty():
        return sys.stdin.readline().rstrip("\n")
    return getpass.getpass(prompt)


def _fail(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return EXIT_INVALID


def cmd_salt(service: HashingService, args: argparse.Namespace) -> int:
    if args.algorithm:
        salt = service.generate_algorithm_salt(
            args.algorithm, _parse_params(args.param), args.encoding
        )
    else:
        salt = service.generate_salt(args.length, args.encoding)
    print(salt)
    return EXIT_OK


def cmd_hash(service: HashingService, args: argparse.Namespace) -> int:
    password = _read_password(args.password, "Password: ")
    valid, message = validate_password(password)
    if not valid:
        return _fail(message)

    result = service.hash_password(
        args.algorithm,
        password,
        _parse_params(args.param),
        salt=args.salt,
        salt_encoding=args.salt_encoding,
        hash_encoding=args.hash_encoding,
    )
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(result.encoded_hash)
        for warning in result.warnings:
            print(f"warning: {warning}", file=sys.stderr)
    return EXIT_OK


def cmd_verify(service: HashingService, args: argparse.Namespace) -> int:
    valid, message = validate_encoded_hash(args.encoded_hash)
    if not valid:
        return _fail(message)
    password = _read_password(args.password, "Password to verify: ")
    valid, message = validate_candidate_password(password)
    if not valid:
        return _fail(message)

    outcome = service.verify(password, args.encoded_hash, args.algorithm)
    if args.json:
        print(outcome.model_dump_json(indent=2))
    else:
        print(outcome.message)
    return EXIT_OK if outcome.is_valid else EXIT_MISMATCH


def cmd_detect(service: HashingService, args: argparse.Namespace) -> int:
    print(encoded_format.detect_algorithm(args.encoded_hash.strip()).value)
    return EXIT_OK


def cmd_info(service: HashingService, args: argparse.Namespace) -> int:
    specs = (
        [registry.get_algorithm_spec(args.algorithm)]
        if args.algorithm
        else registry.supported_algorithms()
    )
    if args.json:
        payload = [
            {
                "algorithm": spec.algorithm.value,
                "label": spec.label,
                "description": spec.description,
                "parameters": {
                    name: {
                        "label": p.label,
                        "default": p.default,
                        "min": p.min,
                        "max": p.max,
                        "step": p.step,
                        "description": registry.parameter_description(name),
                    }
                    for name, p in spec.parameters.items()
                },
            }
            for spec in specs
        ]
        print(json.dumps(payload, indent=2))
        return EXIT_OK

    for spec in specs:
        print(f"{spec.algorithm.value}  {spec.label}: {spec.description}")
        for name, p in spec.parameters.items():
            print(f"  {name:<12} default={p.default} range=[{p.min}, {p.max}]  {p.label}")
            description = registry.parameter_description(name)
            if description:
                print(f"  {'':<12} {description}")
    return EXIT_OK


COMMANDS = {
    "salt": cmd_salt,
    "hash": cmd_hash,
    "verify": cmd_verify,
    "detect": cmd_detect,
    "info": cmd_info,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashforge",
        description="Generate and verify password hashes (Argon2id, scrypt, bcrypt, PBKDF2)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("salt", help="Generate a random salt")
    p.add_argument("--length", type=int, default=16,
                   help="Salt length in bytes (default: 16)")
    p.add_argument("--encoding", choices=["hex", "base64"], default=None,
                   help="Salt encoding (default from settings)")
    p.add_argument("--algorithm", choices=ALGORITHMS, default=None,
                   help="Generate a salt suited to this algorithm")
    p.add_argument("--param", action="append", metavar="NAME=VALUE",
                   help="Algorithm parameter; can be repeated")

    p = sub.add_parser("hash", help="Hash a password")
    p.add_argument("algorithm", choices=ALGORITHMS)
    p.add_argument("--password", default=None,
                   help="Password (prompted for, or read from stdin, when omitted)")
    p.add_argument("--param", action="append", metavar="NAME=VALUE",
                   help="Algorithm parameter; can be repeated")
    p.add_argument("--salt", default=None, help="Salt text (generated when omitted)")
    p.add_argument("--salt-encoding", choices=["hex", "base64"], default=None)
    p.add_argument("--hash-encoding", choices=["hex", "base64"], default=None)
    p.add_argument("--json", action="store_true", help="Print the full result as JSON")

    p = sub.add_parser("verify", help="Verify a password against an encoded hash")
    p.add_argument("encoded_hash")
    p.add_argument("--password", default=None,
                   help="Password (prompted for, or read from stdin, when omitted)")
    p.add_argument("--algorithm", choices=ALGORITHMS, default=None,
                   help="Expected algorithm (detected when omitted)")
    p.add_argument("--json", action="store_true", help="Print the outcome as JSON")

    p = sub.add_parser("detect", help="Identify the algorithm of an encoded hash")
    p.add_argument("encoded_hash")

    p = sub.add_parser("info", help="Show algorithm parameters and defaults")
    p.add_argument("algorithm", nargs="?", choices=ALGORITHMS, default=None)
    p.add_argument("--json", action="store_true", help="Print as JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)
    service = HashingService(settings=settings)

    try:
        return COMMANDS[args.command](service, args)
    except argparse.ArgumentTypeError as e:
        return _fail(str(e))
    except HashingError as e:
        logger.debug("command_failed", command=args.command, error_type=type(e).__name__)
        return _fail(str(e))


if __name__ == "__main__":
    sys.exit(main())
