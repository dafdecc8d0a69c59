############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# codec.py: Hex, base64 and bcrypt radix-64 byte codecs
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Conversions between byte strings and their text encodings.

Three encodings are supported:
- ``hex``: lowercase hexadecimal, two characters per byte
- ``base64``: RFC 4648 standard alphabet, padded
- ``bcrypt64``: bcrypt's radix-64 alphabet (``./A-Za-z0-9``), unpadded

PHC strings carry standard-alphabet base64 without padding, so there are
separate helpers for that form which tolerate padded input on decode.
"""

import base64
import binascii
import re
from enum import Enum
from typing import Union

from hashforge.app.core.exceptions import FormatError


class Encoding(str, Enum):
    """Text encodings for salts and hashes."""
    HEX = "hex"
    BASE64 = "base64"
    BCRYPT64 = "bcrypt64"


_STD_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BCRYPT_ALPHABET = "./ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

_TO_BCRYPT = str.maketrans(_STD_ALPHABET, _BCRYPT_ALPHABET)
_FROM_BCRYPT = str.maketrans(_BCRYPT_ALPHABET, _STD_ALPHABET)

_BCRYPT64_RE = re.compile(r"[./A-Za-z0-9]*")


def coerce_encoding(encoding: Union[Encoding, str]) -> Encoding:
    """Normalize an encoding name, raising FormatError for unknown names."""
    try:
        return Encoding(encoding)
    except ValueError:
        raise FormatError(f"Unsupported encoding: {encoding!r}", encoding=str(encoding)) from None


def encode(data: bytes, encoding: Union[Encoding, str] = Encoding.HEX) -> str:
    """
    Encode bytes as text.

    Args:
        data: Raw bytes
        encoding: Target text encoding

    Returns:
        Encoded text
    """
    encoding = coerce_encoding(encoding)
    if encoding == Encoding.HEX:
        return data.hex()
    if encoding == Encoding.BASE64:
        return base64.b64encode(data).decode("ascii")
    return encode_bcrypt64(data)


def decode(text: str, encoding: Union[Encoding, str] = Encoding.HEX) -> bytes:
    """
    Decode text back into bytes.

    Args:
        text: Encoded text
        encoding: Encoding the text is in

    Returns:
        Decoded bytes

    Raises:
        FormatError: If the text is not valid for the encoding
    """
    encoding = coerce_encoding(encoding)
    if encoding == Encoding.HEX:
        return _decode_hex(text)
    if encoding == Encoding.BASE64:
        return _decode_base64(text)
    return decode_bcrypt64(text)


def _decode_hex(text: str) -> bytes:
    if len(text) % 2:
        raise FormatError("Hex text must have an even number of characters", encoding="hex")
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid hex text: {e}", encoding="hex") from e


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64 text: {e}", encoding="base64") from e


def encode_phc_base64(data: bytes) -> str:
    """Standard-alphabet base64 with the ``=`` padding removed."""
    return base64.b64encode(data).decode("ascii").rstrip("=")


def decode_phc_base64(text: str) -> bytes:
    """Decode PHC base64, accepting both padded and unpadded input."""
    stripped = text.rstrip("=")
    if len(text) - len(stripped) > 2:
        raise FormatError("Invalid base64 padding", encoding="base64")
    return _decode_base64(stripped + "=" * (-len(stripped) % 4))


def encode_bcrypt64(data: bytes) -> str:
    """Encode bytes in bcrypt's radix-64 alphabet, unpadded."""
    return encode_phc_base64(data).translate(_TO_BCRYPT)


def decode_bcrypt64(text: str) -> bytes:
    """Decode bcrypt radix-64 text. Unused trailing bits are discarded."""
    if not _BCRYPT64_RE.fullmatch(text):
        raise FormatError("Invalid bcrypt radix-64 text", encoding="bcrypt64")
    remainder = len(text) % 4
    if remainder == 1:
        raise FormatError("Invalid bcrypt radix-64 length", encoding="bcrypt64")
    if remainder:
        # Only the top 2 (or 4) bits of the last character carry data
        keep = 0x30 if remainder == 2 else 0x3C
        last = _BCRYPT_ALPHABET[_BCRYPT_ALPHABET.index(text[-1]) & keep]
        text = text[:-1] + last
    return decode_phc_base64(text.translate(_FROM_BCRYPT))


def is_bcrypt64(text: str) -> bool:
    """Check whether text only uses the bcrypt radix-64 alphabet."""
    return bool(_BCRYPT64_RE.fullmatch(text))
