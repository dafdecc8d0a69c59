############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# engine.py: Per-algorithm hash computation around vetted primitives
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Hash computation.

One routine per algorithm. Each takes the password, the algorithm's typed
parameters and a Salt, and returns the raw hash bytes plus the wall-clock
time spent inside the primitive. Primitive failures surface as
HashComputationError with the original exception chained.
"""

import hashlib
import re
import time
import unicodedata
from typing import Any, Callable, Dict, Mapping, Optional, Union

import bcrypt
import structlog
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from hashforge.app.core import codec, registry
from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import FormatError, HashComputationError
from hashforge.app.core.schemas import (
    AlgorithmId,
    Argon2idParameters,
    BcryptParameters,
    ComputedHash,
    Pbkdf2Parameters,
    Salt,
    ScryptParameters,
)
from hashforge.app.logging_config import get_logger
from hashforge.app.security.salts import BCRYPT_SALT_BYTES, BCRYPT_SALT_CHARS

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72

# "$2a$12$" followed by the 22-character salt payload
_BCRYPT_SETTING_RE = re.compile(r"^\$(2[aby])\$([0-9]{2})\$([./A-Za-z0-9]{22})")

_PRIMITIVE_ERRORS = (ValueError, TypeError, OverflowError, MemoryError)


def bcrypt_password(password: str) -> bytes:
    """UTF-8 password bytes truncated to bcrypt's 72-byte input limit."""
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def _bcrypt_payload(raw: bytes) -> str:
    """Exactly 16 salt bytes (zero-padded or truncated) in bcrypt's alphabet."""
    return codec.encode_bcrypt64(raw[:BCRYPT_SALT_BYTES].ljust(BCRYPT_SALT_BYTES, b"\x00"))


def _bcrypt_salt_bytes(salt: Salt) -> bytes:
    """
    Salt bytes for bcrypt.

    The salt is decoded with its declared encoding. A 22-character radix-64
    payload that does not decode that way is read as bcrypt's own alphabet.
    """
    if salt.encoding == Encoding.BCRYPT64:
        return codec.decode_bcrypt64(salt.text)
    try:
        return salt.to_bytes()
    except FormatError:
        if len(salt.text) == BCRYPT_SALT_CHARS and codec.is_bcrypt64(salt.text):
            return codec.decode_bcrypt64(salt.text)
        raise


def bcrypt_setting(cost: int, salt: Salt) -> str:
    """
    Build the ``$2a$<cost>$<salt>`` setting string bcrypt expects.

    - An already bracketed salt (``$2b$12$...``) keeps its prefix and cost.
    - Anything else is decoded, zero-padded or truncated to 16 bytes and
      wrapped with ``cost``.

    The payload is always re-encoded, so stray bits in the last character
    of a hand-written salt are cleared.
    """
    match = _BCRYPT_SETTING_RE.match(salt.text)
    if match:
        variant, cost_text, payload = match.groups()
        return f"${variant}${cost_text}${_bcrypt_payload(codec.decode_bcrypt64(payload))}"
    return f"$2a${cost:02d}${_bcrypt_payload(_bcrypt_salt_bytes(salt))}"


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class HashEngine:
    """
    Runs the hashing primitives.

    The logger is injected so callers decide where computation events go;
    without one the module logger is used.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.logger = logger or get_logger(__name__)
        self._routines: Dict[AlgorithmId, Callable[..., ComputedHash]] = {
            AlgorithmId.ARGON2ID: self.argon2id,
            AlgorithmId.SCRYPT: self.scrypt,
            AlgorithmId.BCRYPT: self.bcrypt,
            AlgorithmId.PBKDF2: self.pbkdf2,
        }

    def compute(
        self,
        algorithm: Union[AlgorithmId, str],
        password: str,
        parameters: Union[Mapping[str, Any], Any, None],
        salt: Salt,
    ) -> ComputedHash:
        """
        Hash a password with the named algorithm.

        Args:
            algorithm: Algorithm to run
            password: Plaintext password
            parameters: Typed parameter model or mapping (defaults fill gaps)
            salt: Salt to mix in

        Returns:
            Raw hash bytes and elapsed primitive time

        Raises:
            HashComputationError: If the primitive rejects the input
            FormatError: If the salt text does not decode
        """
        params = registry.build_parameters(algorithm, parameters)
        routine = self._routines[params.algorithm_id]
        result = routine(password, params, salt)
        self.logger.debug(
            "hash_computed",
            algorithm=params.algorithm_id.value,
            elapsed_ms=round(result.elapsed_ms, 2),
        )
        return result

    def argon2id(self, password: str, params: Argon2idParameters, salt: Salt) -> ComputedHash:
        """Argon2id (never Argon2i or Argon2d). Memory is converted from MiB to KiB."""
        salt_bytes = salt.to_bytes()
        start = time.perf_counter()
        try:
            raw = hash_secret_raw(
                secret=password.encode("utf-8"),
                salt=salt_bytes,
                time_cost=params.iterations,
                memory_cost=params.memory_kib,
                parallelism=params.parallelism,
                hash_len=params.key_length,
                type=Type.ID,
                version=ARGON2_VERSION,
            )
        except (Argon2HashingError,) + _PRIMITIVE_ERRORS as e:
            raise HashComputationError(AlgorithmId.ARGON2ID, e) from e
        return ComputedHash(raw_hash=raw, elapsed_ms=_elapsed_ms(start))

    def scrypt(self, password: str, params: ScryptParameters, salt: Salt) -> ComputedHash:
        """scrypt over the NFKC-normalized password."""
        salt_bytes = salt.to_bytes()
        secret = unicodedata.normalize("NFKC", password).encode("utf-8")

        start = time.perf_counter()
        try:
            kdf = Scrypt(
                salt=salt_bytes,
                length=params.key_length,
                n=params.n,
                r=params.r,
                p=params.p,
            )
            raw = kdf.derive(secret)
        except (UnsupportedAlgorithm,) + _PRIMITIVE_ERRORS as e:
            raise HashComputationError(AlgorithmId.SCRYPT, e) from e
        return ComputedHash(raw_hash=raw, elapsed_ms=_elapsed_ms(start))

    def bcrypt(self, password: str, params: BcryptParameters, salt: Salt) -> ComputedHash:
        """bcrypt; the raw hash is bcrypt's full encoded string."""
        setting = bcrypt_setting(params.cost, salt)
        start = time.perf_counter()
        try:
            raw = bcrypt.hashpw(bcrypt_password(password), setting.encode("ascii"))
        except _PRIMITIVE_ERRORS as e:
            raise HashComputationError(AlgorithmId.BCRYPT, e) from e
        return ComputedHash(raw_hash=raw, elapsed_ms=_elapsed_ms(start))

    def pbkdf2(self, password: str, params: Pbkdf2Parameters, salt: Salt) -> ComputedHash:
        """PBKDF2-HMAC-SHA256 producing ``key_length`` bytes."""
        salt_bytes = salt.to_bytes()
        start = time.perf_counter()
        try:
            raw = hashlib.pbkdf2_hmac(
                "sha256",
                password.encode("utf-8"),
                salt_bytes,
                params.iterations,
                dklen=params.key_length,
            )
        except _PRIMITIVE_ERRORS as e:
            raise HashComputationError(AlgorithmId.PBKDF2, e) from e
        return ComputedHash(raw_hash=raw, elapsed_ms=_elapsed_ms(start))
