############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# test_engine.py: Unit tests for hash computation
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Unit tests for HashEngine and its per-algorithm routines."""

import hashlib
from unittest.mock import patch

import bcrypt
import pytest
from argon2 import PasswordHasher

from hashforge.app.core import codec, registry
from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import HashComputationError
from hashforge.app.core.schemas import AlgorithmId, Salt
from hashforge.app.security import encoded_format
from hashforge.app.security.engine import bcrypt_password, bcrypt_setting
from hashforge.app.security.salts import bcrypt_salt

SALT_BYTES = bytes(range(16))


@pytest.fixture
def salt():
    """Fixed 16-byte salt."""
    return Salt.from_bytes(SALT_BYTES, Encoding.HEX)


class TestArgon2id:
    """Tests for the Argon2id routine."""

    def test_output_length(self, engine, fast_params, salt):
        """Output length follows key_length."""
        params = dict(fast_params["argon2id"], key_length=24)
        result = engine.compute("argon2id", "pw", params, salt)
        assert len(result.raw_hash) == 24
        assert result.elapsed_ms >= 0

    def test_verifies_with_argon2_cffi(self, engine, fast_params, salt):
        """Serialized output is a valid Argon2id PHC string for argon2-cffi."""
        params = registry.build_parameters("argon2id", fast_params["argon2id"])
        result = engine.compute("argon2id", "pw", params, salt)
        encoded = encoded_format.serialize(params, SALT_BYTES, result.raw_hash)

        assert encoded.startswith("$argon2id$v=19$m=1024,t=1,p=1$")
        assert PasswordHasher().verify(encoded, "pw")

    def test_invalid_parallelism(self, engine, fast_params, salt):
        """Zero lanes is rejected by the primitive."""
        params = dict(fast_params["argon2id"], parallelism=0)
        with pytest.raises(HashComputationError) as exc_info:
            engine.compute("argon2id", "pw", params, salt)
        assert exc_info.value.algorithm == AlgorithmId.ARGON2ID
        assert exc_info.value.cause is not None


class TestScrypt:
    """Tests for the scrypt routine."""

    def test_matches_hashlib(self, engine, fast_params, salt):
        """Output equals hashlib.scrypt with the same inputs."""
        result = engine.compute("scrypt", "pw", fast_params["scrypt"], salt)
        expected = hashlib.scrypt(b"pw", salt=SALT_BYTES, n=1024, r=8, p=1, dklen=32)
        assert result.raw_hash == expected

    def test_nfkc_normalization(self, engine, fast_params, salt):
        """Compatibility-equivalent passwords hash identically."""
        ligature = engine.compute("scrypt", "ﬁle", fast_params["scrypt"], salt)
        plain = engine.compute("scrypt", "file", fast_params["scrypt"], salt)
        assert ligature.raw_hash == plain.raw_hash

    def test_non_power_of_two(self, engine, fast_params, salt):
        """N must be a power of two."""
        params = dict(fast_params["scrypt"], N=1000)
        with pytest.raises(HashComputationError):
            engine.compute("scrypt", "pw", params, salt)

    def test_largest_schema_cost_reaches_primitive(self, engine, salt):
        """N=2**20 with r=32 is passed through without a memory cap."""
        with patch("hashforge.app.security.engine.Scrypt") as scrypt_cls:
            scrypt_cls.return_value.derive.return_value = b"\x00" * 32
            result = engine.compute("scrypt", "pw", {"N": 1048576, "r": 32, "p": 1}, salt)

        kwargs = scrypt_cls.call_args.kwargs
        assert (kwargs["n"], kwargs["r"], kwargs["p"]) == (1048576, 32, 1)
        assert kwargs["salt"] == SALT_BYTES
        assert "maxmem" not in kwargs
        assert result.raw_hash == b"\x00" * 32


class TestBcrypt:
    """Tests for the bcrypt routine."""

    def test_same_salt_is_deterministic(self, engine):
        """A fixed salt and cost give the same string twice."""
        salt = bcrypt_salt(4)
        first = engine.compute("bcrypt", "pw", {"cost": 4}, salt)
        second = engine.compute("bcrypt", "pw", {"cost": 4}, salt)
        assert first.raw_hash == second.raw_hash
        assert bcrypt.checkpw(b"pw", first.raw_hash)

    def test_payload_is_wrapped_with_cost(self, engine):
        """A bare payload becomes $2a$<cost>$<payload>."""
        salt = bcrypt_salt(4)
        result = engine.compute("bcrypt", "pw", {"cost": 5}, salt)
        assert result.raw_hash.decode().startswith(f"$2a$05${salt.text[:21]}")

    def test_hex_salt_is_coerced(self):
        """A 16-byte hex salt is re-encoded in bcrypt's alphabet."""
        salt = Salt(text="00" * 16, encoding=Encoding.HEX)
        assert bcrypt_setting(4, salt) == "$2a$04$" + "." * 22

    def test_short_salt_is_padded(self):
        """Short salts are zero-padded to 16 bytes."""
        short = Salt(text="0000", encoding=Encoding.HEX)
        full = Salt(text="00" * 16, encoding=Encoding.HEX)
        assert bcrypt_setting(4, short) == bcrypt_setting(4, full)

    def test_bracketed_salt_used_as_is(self, engine):
        """A full setting string keeps its own prefix and cost."""
        setting = bcrypt.gensalt(rounds=5, prefix=b"2b").decode()
        salt = Salt(text=setting, encoding=Encoding.BCRYPT64)
        result = engine.compute("bcrypt", "pw", {"cost": 4}, salt)
        assert result.raw_hash.decode().startswith("$2b$05$")

    def test_non_canonical_payload(self, engine):
        """Unused bits in the last payload character are cleared."""
        salt = Salt(text="abcdefghijklmnopqrstuv", encoding=Encoding.BCRYPT64)
        assert bcrypt_setting(4, salt) == "$2a$04$abcdefghijklmnopqrstut"

        result = engine.compute("bcrypt", "pw", {"cost": 4}, salt)
        assert result.raw_hash.decode().startswith("$2a$04$abcdefghijklmnopqrstut")
        assert bcrypt.checkpw(b"pw", result.raw_hash)

    def test_hex_salt_of_payload_length(self, engine):
        """A 22-character hex salt is decoded as hex, not used as a payload."""
        salt = Salt(text="00112233445566778899aa", encoding=Encoding.HEX)
        raw = bytes.fromhex("00112233445566778899aa").ljust(16, b"\x00")
        assert bcrypt_setting(4, salt) == "$2a$04$" + codec.encode_bcrypt64(raw)

        result = engine.compute("bcrypt", "pw", {"cost": 4}, salt)
        assert bcrypt.checkpw(b"pw", result.raw_hash)

    def test_payload_declared_as_hex(self):
        """Radix-64 text that is not valid hex is read as a payload."""
        salt = Salt(text="abcdefghijklmnopqrstuv", encoding=Encoding.HEX)
        assert bcrypt_setting(4, salt) == "$2a$04$abcdefghijklmnopqrstut"

    def test_bracketed_non_canonical_salt(self):
        """A bracketed salt keeps its prefix and cost but is canonicalized."""
        salt = Salt(text="$2b$05$abcdefghijklmnopqrstuv", encoding=Encoding.BCRYPT64)
        assert bcrypt_setting(4, salt) == "$2b$05$abcdefghijklmnopqrstut"

    def test_long_password_truncated(self, engine):
        """Bytes past the 72nd are ignored."""
        salt = bcrypt_salt(4)
        base = "a" * 72
        first = engine.compute("bcrypt", base, {"cost": 4}, salt)
        second = engine.compute("bcrypt", base + "tail", {"cost": 4}, salt)
        assert first.raw_hash == second.raw_hash
        assert len(bcrypt_password("é" * 40)) == 72


class TestPbkdf2:
    """Tests for the PBKDF2 routine."""

    def test_matches_hashlib(self, engine, fast_params, salt):
        """Output equals hashlib.pbkdf2_hmac with SHA-256."""
        result = engine.compute("pbkdf2", "pw", fast_params["pbkdf2"], salt)
        expected = hashlib.pbkdf2_hmac("sha256", b"pw", SALT_BYTES, 1000, dklen=32)
        assert result.raw_hash == expected

    def test_key_length_in_bytes(self, engine, salt):
        """key_length is a byte count."""
        result = engine.compute("pbkdf2", "pw", {"iterations": 1000, "key_length": 20}, salt)
        assert len(result.raw_hash) == 20

    def test_zero_iterations(self, engine, salt):
        """Zero iterations is rejected by the primitive."""
        with pytest.raises(HashComputationError) as exc_info:
            engine.compute("pbkdf2", "pw", {"iterations": 0}, salt)
        assert "pbkdf2 hashing failed" in str(exc_info.value)
