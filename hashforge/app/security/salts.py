############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# salts.py: Cryptographically random salt generation
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Salt generation.

Every salt comes from the operating system's CSPRNG via ``secrets``. If that
source is missing the call fails with RngUnavailable; there is no fallback
to ``random``.
"""

import math
import secrets
from typing import Any, Mapping, Optional, Union

import bcrypt

from hashforge.app.core import codec, registry
from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import FormatError, HashComputationError, RngUnavailable
from hashforge.app.core.schemas import AlgorithmId, Salt

BCRYPT_SALT_CHARS = 22
BCRYPT_SALT_BYTES = 16


def random_bytes(length: int) -> bytes:
    """
    Draw bytes from the OS random source.

    Raises:
        RngUnavailable: If no secure random source exists
    """
    if length < 0:
        raise ValueError(f"Salt length must be non-negative, got {length}")
    try:
        return secrets.token_bytes(length)
    except NotImplementedError as e:
        raise RngUnavailable("No cryptographically secure random source available") from e


def random_salt(length_bytes: int = 16, encoding: Union[Encoding, str] = Encoding.HEX) -> Salt:
    """
    Generate a random salt.

    Args:
        length_bytes: Number of random bytes
        encoding: Text encoding for the salt

    Returns:
        Salt holding the encoded text
    """
    encoding = codec.coerce_encoding(encoding)
    return Salt.from_bytes(random_bytes(length_bytes), encoding)


def bcrypt_salt(cost: int) -> Salt:
    """
    Generate a bcrypt salt payload.

    bcrypt's own generator produces ``$2a$<cost>$<22 chars>``; only the
    22-character payload is kept.
    """
    try:
        full = bcrypt.gensalt(rounds=cost, prefix=b"2a")
    except NotImplementedError as e:
        raise RngUnavailable("No cryptographically secure random source available") from e
    except (ValueError, TypeError) as e:
        raise HashComputationError(AlgorithmId.BCRYPT, e) from e
    payload = full.decode("ascii").split("$")[3]
    return Salt(text=payload[:BCRYPT_SALT_CHARS], encoding=Encoding.BCRYPT64)


def algorithm_salt(
    algorithm: Union[AlgorithmId, str],
    parameters: Optional[Mapping[str, Any]] = None,
    encoding: Union[Encoding, str] = Encoding.HEX,
) -> Salt:
    """
    Generate a salt suited to an algorithm.

    bcrypt salts use bcrypt's radix-64 alphabet whatever encoding is asked
    for. Other algorithms get ``salt_length`` random bytes (schema default
    when not supplied) in the requested encoding.

    Args:
        algorithm: Target algorithm
        parameters: Parameter model or mapping; defaults fill the gaps
        encoding: Text encoding for non-bcrypt salts

    Returns:
        Generated salt
    """
    params = registry.build_parameters(algorithm, parameters)
    if params.algorithm_id == AlgorithmId.BCRYPT:
        return bcrypt_salt(params.cost)
    return random_salt(params.salt_length, encoding)


def salt_byte_length(
    text: str,
    encoding: Union[Encoding, str] = Encoding.HEX,
    algorithm: Optional[Union[AlgorithmId, str]] = None,
) -> int:
    """
    Number of bytes a salt text represents, for display.

    A 22-character bcrypt salt counts as 16 bytes and any other bcrypt text
    as 0. Hex counts half its length rounded up. Base64 counts its decoded
    length, or an estimate when the text does not decode.
    """
    if not text:
        return 0
    if algorithm is not None and AlgorithmId(algorithm) == AlgorithmId.BCRYPT:
        return BCRYPT_SALT_BYTES if len(text) == BCRYPT_SALT_CHARS else 0

    encoding = codec.coerce_encoding(encoding)
    if encoding == Encoding.HEX:
        return math.ceil(len(text) / 2)
    try:
        return len(codec.decode(text, encoding))
    except FormatError:
        return len(text) * 3 // 4
