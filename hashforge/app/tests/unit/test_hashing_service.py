############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# test_hashing_service.py: Unit tests for the hashing service
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Unit tests for HashingService."""

import asyncio

import bcrypt
import pytest

from hashforge.app.core import codec
from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import FormatError, InvalidParametersError
from hashforge.app.core.schemas import AlgorithmId
from hashforge.app.services import hashing
from hashforge.app.services.hashing import HashingService, get_hashing_service
from hashforge.app.settings import Settings

FIXED_SALT_B64 = "AAECAwQFBgcICQoLDA0ODw=="


class TestGenerateSalt:
    """Tests for salt generation through the service."""

    def test_default_encoding_is_hex(self, service):
        assert len(service.generate_salt()) == 32

    def test_settings_default_encoding(self):
        service = HashingService(settings=Settings(_env_file=None, default_salt_encoding="base64"))
        assert len(codec.decode(service.generate_salt(16), "base64")) == 16

    def test_algorithm_salt(self, service):
        assert len(service.generate_algorithm_salt("bcrypt", {"cost": 4})) == 22
        assert len(service.generate_algorithm_salt("scrypt", {"salt_length": 8})) == 16


class TestHashPassword:
    """Tests for hash_password()."""

    def test_argon2id_result(self, service, fast_params):
        result = service.hash_password("argon2id", "pw", fast_params["argon2id"])

        assert result.algorithm == AlgorithmId.ARGON2ID
        assert result.salt_encoding == Encoding.HEX
        assert len(result.salt) == 32
        assert result.hash_encoding == Encoding.HEX
        assert len(result.hash) == 64
        assert result.encoded_hash.startswith("$argon2id$v=19$m=1024,t=1,p=1$")
        assert result.parameters["memory"] == 1
        assert result.execution_time_ms >= 0
        assert result.warnings == [
            "Memory below 19 MiB may be insecure",
            "Iterations below 2 may be insecure",
        ]

    def test_fixed_salt_is_deterministic(self, service, fast_params):
        """The same salt and parameters give the same encoded hash."""
        kwargs = dict(salt=FIXED_SALT_B64, salt_encoding="base64", hash_encoding="base64")
        first = service.hash_password("scrypt", "pw", fast_params["scrypt"], **kwargs)
        second = service.hash_password("scrypt", "pw", fast_params["scrypt"], **kwargs)

        assert first.encoded_hash == second.encoded_hash
        assert first.salt == FIXED_SALT_B64
        assert first.salt_encoding == Encoding.BASE64
        assert len(codec.decode(first.hash, "base64")) == 32

    def test_salt_length_reports_actual_salt(self, service, fast_params):
        """A caller salt shorter than salt_length is reported as is."""
        result = service.hash_password("pbkdf2", "pw", fast_params["pbkdf2"], salt="0011223344556677")
        assert result.parameters["salt_length"] == 8

    def test_bcrypt_result(self, service):
        result = service.hash_password("bcrypt", "pw", {"cost": 4})

        assert result.hash == result.encoded_hash
        assert len(result.salt) == 22
        assert result.salt_encoding == Encoding.BCRYPT64
        assert result.parameters == {"cost": 4}
        assert result.warnings == ["Cost factor below 10 may be insecure"]
        assert bcrypt.checkpw(b"pw", result.encoded_hash.encode())

    def test_bcrypt_fixed_salt(self, service):
        salt = service.generate_algorithm_salt("bcrypt", {"cost": 4})
        first = service.hash_password("bcrypt", "pw", {"cost": 4}, salt=salt)
        second = service.hash_password("bcrypt", "pw", {"cost": 4}, salt=salt)
        assert first.encoded_hash == second.encoded_hash
        assert first.salt == salt

    def test_bcrypt_hand_typed_payload(self, service):
        """A 22-character payload with stray low bits still hashes."""
        first = service.hash_password("bcrypt", "pw", {"cost": 4}, salt="abcdefghijklmnopqrstuv")
        second = service.hash_password("bcrypt", "pw", {"cost": 4}, salt="abcdefghijklmnopqrstuv")
        assert first.encoded_hash == second.encoded_hash
        assert first.salt == "abcdefghijklmnopqrstut"
        assert service.verify_password("pw", first.encoded_hash)

    def test_bcrypt_hex_salt_of_payload_length(self, service):
        """A 22-character hex salt is decoded as hex."""
        result = service.hash_password(
            "bcrypt", "pw", {"cost": 4}, salt="00112233445566778899aa", salt_encoding="hex"
        )
        expected = bytes.fromhex("00112233445566778899aa").ljust(16, b"\x00")
        assert result.salt == codec.encode_bcrypt64(expected)
        assert bcrypt.checkpw(b"pw", result.encoded_hash.encode())

    def test_invalid_salt_text(self, service, fast_params):
        with pytest.raises(FormatError):
            service.hash_password("pbkdf2", "pw", fast_params["pbkdf2"], salt="xyz")

    def test_out_of_range_is_advisory_by_default(self, service):
        result = service.hash_password("pbkdf2", "pw", {"iterations": 999})
        assert result.parameters["iterations"] == 999
        assert "Iterations below 100,000 may be insecure" in result.warnings

    def test_bounds_enforced_when_configured(self, strict_service):
        with pytest.raises(InvalidParametersError) as exc_info:
            strict_service.hash_password("pbkdf2", "pw", {"iterations": 999})
        assert exc_info.value.problems == ["Iterations must be between 1000 and 10000000"]


class TestVerify:
    """Tests for verify() and verify_password()."""

    def test_surrounding_whitespace_ignored(self, service, fast_params):
        result = service.hash_password("pbkdf2", "pw", fast_params["pbkdf2"])
        assert service.verify_password("pw", f"  {result.encoded_hash}\n")

    def test_mismatch_is_false(self, service, fast_params):
        result = service.hash_password("pbkdf2", "pw", fast_params["pbkdf2"])
        assert service.verify_password("nope", result.encoded_hash) is False

    def test_outcome_message(self, service, fast_params):
        result = service.hash_password("bcrypt", "pw", fast_params["bcrypt"])
        assert service.verify("pw", result.encoded_hash).message == "Password matches password hash"


class TestWorkerDispatch:
    """Tests for the async helpers."""

    @pytest.mark.asyncio
    async def test_hash_and_verify_async(self, service, fast_params):
        result = await service.hash_password_async("argon2id", "pw", fast_params["argon2id"])
        assert await service.verify_password_async("pw", result.encoded_hash) is True
        assert await service.verify_password_async("px", result.encoded_hash) is False

    @pytest.mark.asyncio
    async def test_deadline(self, service, fast_params):
        with pytest.raises(asyncio.TimeoutError):
            await service.hash_password_async("pbkdf2", "pw", fast_params["pbkdf2"], timeout=0)

    @pytest.mark.asyncio
    async def test_settings_deadline(self, fast_params):
        service = HashingService(settings=Settings(_env_file=None, worker_timeout_seconds=0))
        with pytest.raises(asyncio.TimeoutError):
            await service.hash_password_async("pbkdf2", "pw", fast_params["pbkdf2"])


class TestModuleFunctions:
    """Tests for the global service helpers."""

    def test_singleton(self):
        assert get_hashing_service() is get_hashing_service()

    def test_hash_and_verify(self, fast_params):
        result = hashing.hash_password("pbkdf2", "pw", fast_params["pbkdf2"])
        assert hashing.verify_password("pw", result.encoded_hash)
        assert len(hashing.generate_salt(8)) > 0
