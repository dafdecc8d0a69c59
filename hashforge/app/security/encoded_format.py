############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# encoded_format.py: Encoded hash string serialization and parsing
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Self-describing hash strings.

Grammars:
- Argon2id: ``$argon2id$v=19$m=<KiB>,t=<iterations>,p=<parallelism>$<salt>$<hash>``
- scrypt:   ``$scrypt$ln=<log2 N>,r=<r>,p=<p>$<salt>$<hash>``
- bcrypt:   ``$2a$<cost>$<22-char salt><31-char hash>`` (also ``$2b$``, ``$2y$``)
- PBKDF2:   ``$pbkdf2-sha256$<iterations>$<salt>$<hash>``

Salts and hashes are standard base64; Argon2id and scrypt drop the padding,
PBKDF2 keeps it. Parsers accept both forms.
"""

import re
from typing import Dict, List, Optional, Tuple, Type, Union

from hashforge.app.core import codec
from hashforge.app.core.exceptions import (
    FormatError,
    HashComputationError,
    MalformedEncodingError,
    UnknownAlgorithm,
)
from hashforge.app.core.schemas import (
    AlgorithmId,
    Argon2idParameters,
    BcryptParameters,
    DecodedHash,
    Pbkdf2Parameters,
    ScryptParameters,
)

_DIGITS_RE = re.compile(r"[0-9]+")


def _split(text: str, count: int, algorithm: AlgorithmId) -> List[str]:
    fields = text.split("$")
    if len(fields) != count or fields[0] != "":
        raise MalformedEncodingError(
            f"Invalid {algorithm.value} hash format: expected {count - 1} '$'-separated fields, "
            f"got {len(fields) - 1}",
            algorithm=algorithm,
        )
    return fields


def _int(value: str, name: str, algorithm: AlgorithmId) -> int:
    if not _DIGITS_RE.fullmatch(value):
        raise MalformedEncodingError(
            f"Invalid {algorithm.value} hash format: {name} must be a non-negative integer, got {value!r}",
            algorithm=algorithm,
        )
    return int(value)


def _assignments(segment: str, keys: Tuple[str, ...], algorithm: AlgorithmId) -> List[int]:
    """Parse ``k1=v1,k2=v2`` with exactly ``keys`` in order."""
    parts = segment.split(",")
    if len(parts) != len(keys):
        raise MalformedEncodingError(
            f"Invalid {algorithm.value} hash format: expected parameters {','.join(keys)}",
            algorithm=algorithm,
        )
    values = []
    for part, key in zip(parts, keys):
        name, sep, value = part.partition("=")
        if not sep or name != key:
            raise MalformedEncodingError(
                f"Invalid {algorithm.value} hash format: expected '{key}=' but found {part!r}",
                algorithm=algorithm,
            )
        values.append(_int(value, key, algorithm))
    return values


def _base64(value: str, what: str, algorithm: AlgorithmId, allow_empty: bool = True) -> bytes:
    if not value and not allow_empty:
        raise MalformedEncodingError(
            f"Invalid {algorithm.value} hash format: {what} is empty",
            algorithm=algorithm,
        )
    try:
        return codec.decode_phc_base64(value)
    except FormatError as e:
        raise MalformedEncodingError(
            f"Invalid {algorithm.value} hash format: {what} is not valid base64",
            algorithm=algorithm,
        ) from e


class Argon2idFormat:
    """PHC string format for Argon2id."""

    PREFIXES = ("$argon2id$",)
    VERSION = 19

    @staticmethod
    def serialize(params: Argon2idParameters, salt: bytes, digest: bytes) -> str:
        """Build the PHC string. Memory is written in KiB."""
        return (
            f"$argon2id$v={Argon2idFormat.VERSION}"
            f"$m={params.memory_kib},t={params.iterations},p={params.parallelism}"
            f"${codec.encode_phc_base64(salt)}${codec.encode_phc_base64(digest)}"
        )

    @staticmethod
    def parse(text: str) -> DecodedHash:
        """Parse an Argon2id PHC string."""
        algorithm = AlgorithmId.ARGON2ID
        _, name, version, settings, salt_b64, hash_b64 = _split(text, 6, algorithm)
        if name != "argon2id":
            raise MalformedEncodingError("Invalid argon2id hash format: wrong identifier", algorithm=algorithm)
        (v,) = _assignments(version, ("v",), algorithm)
        if v != Argon2idFormat.VERSION:
            raise MalformedEncodingError(f"Unsupported argon2id version: {v}", algorithm=algorithm)
        memory_kib, iterations, parallelism = _assignments(settings, ("m", "t", "p"), algorithm)

        salt = _base64(salt_b64, "salt", algorithm)
        digest = _base64(hash_b64, "hash", algorithm, allow_empty=False)
        memory = memory_kib // 1024 if memory_kib % 1024 == 0 else memory_kib / 1024

        return DecodedHash(
            algorithm=algorithm,
            parameters=Argon2idParameters(
                memory=memory,
                iterations=iterations,
                parallelism=parallelism,
                salt_length=len(salt),
                key_length=len(digest),
            ),
            salt=salt,
            hash=digest,
        )


class ScryptFormat:
    """PHC string format for scrypt, with the cost stored as ``ln`` (log2 N)."""

    PREFIXES = ("$scrypt$",)

    @staticmethod
    def log2_cost(n: int) -> int:
        """log2(N), for N a power of two greater than one."""
        ln = n.bit_length() - 1
        if n <= 1 or (1 << ln) != n:
            raise HashComputationError(
                AlgorithmId.SCRYPT,
                message=f"scrypt hashing failed: N must be a power of two greater than 1, got {n}",
            )
        return ln

    @staticmethod
    def serialize(params: ScryptParameters, salt: bytes, digest: bytes) -> str:
        """Build the PHC string."""
        ln = ScryptFormat.log2_cost(params.n)
        return (
            f"$scrypt$ln={ln},r={params.r},p={params.p}"
            f"${codec.encode_phc_base64(salt)}${codec.encode_phc_base64(digest)}"
        )

    @staticmethod
    def parse(text: str) -> DecodedHash:
        """Parse a scrypt PHC string."""
        algorithm = AlgorithmId.SCRYPT
        _, name, settings, salt_b64, hash_b64 = _split(text, 5, algorithm)
        if name != "scrypt":
            raise MalformedEncodingError("Invalid scrypt hash format: wrong identifier", algorithm=algorithm)
        ln, r, p = _assignments(settings, ("ln", "r", "p"), algorithm)
        if not 1 <= ln <= 63:
            raise MalformedEncodingError(f"Invalid scrypt hash format: ln={ln} out of range", algorithm=algorithm)

        salt = _base64(salt_b64, "salt", algorithm)
        digest = _base64(hash_b64, "hash", algorithm, allow_empty=False)

        return DecodedHash(
            algorithm=algorithm,
            parameters=ScryptParameters(
                n=1 << ln,
                r=r,
                p=p,
                salt_length=len(salt),
                key_length=len(digest),
            ),
            salt=salt,
            hash=digest,
        )


class BcryptFormat:
    """bcrypt's native modular crypt format."""

    PREFIXES = ("$2a$", "$2b$", "$2y$")
    SALT_CHARS = 22
    HASH_CHARS = 31
    MIN_COST = 4
    MAX_COST = 31

    _RE = re.compile(r"\$(2[aby])\$([0-9]{2})\$([./A-Za-z0-9]{22})([./A-Za-z0-9]{31})")

    @staticmethod
    def serialize(params: BcryptParameters, salt: bytes, digest: bytes, variant: str = "2a") -> str:
        """Build the bcrypt string from a 16-byte salt and 23-byte digest."""
        return (
            f"${variant}${params.cost:02d}$"
            f"{codec.encode_bcrypt64(salt)}{codec.encode_bcrypt64(digest)}"
        )

    @staticmethod
    def salt_payload(text: str) -> str:
        """The 22-character salt that follows the cost field."""
        return text.split("$")[3][: BcryptFormat.SALT_CHARS]

    @staticmethod
    def parse(text: str) -> DecodedHash:
        """Parse a bcrypt string."""
        algorithm = AlgorithmId.BCRYPT
        match = BcryptFormat._RE.fullmatch(text)
        if not match:
            raise MalformedEncodingError(
                "Invalid bcrypt hash format: expected $2a$<cost>$ followed by 53 radix-64 characters",
                algorithm=algorithm,
            )
        variant, cost_text, salt_text, hash_text = match.groups()
        cost = int(cost_text)
        if not BcryptFormat.MIN_COST <= cost <= BcryptFormat.MAX_COST:
            raise MalformedEncodingError(
                f"Invalid bcrypt hash format: cost {cost_text} outside "
                f"{BcryptFormat.MIN_COST}-{BcryptFormat.MAX_COST}",
                algorithm=algorithm,
            )
        salt = codec.decode_bcrypt64(salt_text)
        # bcrypt rejects a salt whose last character has unused bits set
        if codec.encode_bcrypt64(salt) != salt_text:
            raise MalformedEncodingError(
                "Invalid bcrypt hash format: non-canonical salt",
                algorithm=algorithm,
            )
        return DecodedHash(
            algorithm=algorithm,
            parameters=BcryptParameters(cost=cost),
            salt=salt,
            hash=codec.decode_bcrypt64(hash_text),
            variant=variant,
        )


class Pbkdf2Format:
    """Modular crypt format for PBKDF2-HMAC-SHA256."""

    PREFIXES = ("$pbkdf2-sha256$",)

    @staticmethod
    def serialize(params: Pbkdf2Parameters, salt: bytes, digest: bytes) -> str:
        """Build the PBKDF2 string with padded base64 fields."""
        return (
            f"$pbkdf2-sha256${params.iterations}"
            f"${codec.encode(salt, codec.Encoding.BASE64)}${codec.encode(digest, codec.Encoding.BASE64)}"
        )

    @staticmethod
    def parse(text: str) -> DecodedHash:
        """Parse a PBKDF2 string."""
        algorithm = AlgorithmId.PBKDF2
        _, name, iterations, salt_b64, hash_b64 = _split(text, 5, algorithm)
        if name != "pbkdf2-sha256":
            raise MalformedEncodingError("Invalid PBKDF2 hash format: wrong identifier", algorithm=algorithm)
        rounds = _int(iterations, "iterations", algorithm)

        salt = _base64(salt_b64, "salt", algorithm)
        digest = _base64(hash_b64, "hash", algorithm, allow_empty=False)

        return DecodedHash(
            algorithm=algorithm,
            parameters=Pbkdf2Parameters(
                iterations=rounds,
                salt_length=len(salt),
                key_length=len(digest),
            ),
            salt=salt,
            hash=digest,
        )


FORMATS: Dict[AlgorithmId, Type] = {
    AlgorithmId.ARGON2ID: Argon2idFormat,
    AlgorithmId.SCRYPT: ScryptFormat,
    AlgorithmId.BCRYPT: BcryptFormat,
    AlgorithmId.PBKDF2: Pbkdf2Format,
}

# Evaluated in order; the first matching prefix wins
_DETECTION_ORDER: List[Tuple[Tuple[str, ...], AlgorithmId]] = [
    (Argon2idFormat.PREFIXES, AlgorithmId.ARGON2ID),
    (ScryptFormat.PREFIXES, AlgorithmId.SCRYPT),
    (BcryptFormat.PREFIXES, AlgorithmId.BCRYPT),
    (Pbkdf2Format.PREFIXES, AlgorithmId.PBKDF2),
]


def detect_algorithm(text: str) -> AlgorithmId:
    """
    Identify the algorithm of an encoded hash from its prefix.

    Raises:
        UnknownAlgorithm: If no known prefix matches
    """
    for prefixes, algorithm in _DETECTION_ORDER:
        if text.startswith(prefixes):
            return algorithm
    raise UnknownAlgorithm()


def serialize(params, salt: bytes, digest: bytes, variant: Optional[str] = None) -> str:
    """
    Serialize hash components into the algorithm's encoded string.

    Args:
        params: Typed parameter model (selects the format)
        salt: Raw salt bytes
        digest: Raw hash bytes
        variant: bcrypt prefix variant ("2a", "2b", "2y")

    Returns:
        The encoded hash string
    """
    fmt = FORMATS[params.algorithm_id]
    if fmt is BcryptFormat:
        return fmt.serialize(params, salt, digest, variant or "2a")
    return fmt.serialize(params, salt, digest)


def parse(text: str, algorithm: Optional[Union[AlgorithmId, str]] = None) -> DecodedHash:
    """
    Parse an encoded hash string.

    Args:
        text: Encoded hash string
        algorithm: Expected algorithm; detected from the prefix when omitted

    Returns:
        Algorithm, parameters, salt and hash recovered from the string

    Raises:
        UnknownAlgorithm: If no algorithm was given and none is detected
        MalformedEncodingError: If the string does not fit the grammar
    """
    if algorithm is None:
        algorithm = detect_algorithm(text)
    else:
        try:
            algorithm = AlgorithmId(algorithm)
        except ValueError:
            raise UnknownAlgorithm(f"Unsupported algorithm: {algorithm}") from None
        fmt = FORMATS[algorithm]
        if not text.startswith(fmt.PREFIXES):
            raise MalformedEncodingError(
                f"Invalid {algorithm.value} hash format: expected prefix {' or '.join(fmt.PREFIXES)}",
                algorithm=algorithm,
            )
    return FORMATS[algorithm].parse(text)
