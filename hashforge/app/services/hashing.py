############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# hashing.py: Public hashing and verification operations
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Hashing service - the operations callers use.

The service resolves defaults from Settings, hands explicit values to the
core and assembles HashResult records. Blocking calls can be pushed onto a
worker thread with the async variants.
"""

import asyncio
from typing import Any, Mapping, Optional, Union

import structlog

from hashforge.app.core import codec, registry
from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import InvalidParametersError
from hashforge.app.core.schemas import AlgorithmId, HashResult, Salt, VerificationOutcome
from hashforge.app.core.validators import check_parameter_bounds
from hashforge.app.logging_config import get_logger
from hashforge.app.security import encoded_format, salts
from hashforge.app.security.encoded_format import BcryptFormat
from hashforge.app.security.engine import HashEngine
from hashforge.app.security.verifier import Verifier
from hashforge.app.settings import Settings, get_settings

Parameters = Union[Mapping[str, Any], Any, None]


class HashingService:
    """
    Generates salts, hashes passwords and verifies encoded hashes.

    Responsibilities:
    - Fill in encodings and parameter defaults
    - Optionally enforce schema bounds
    - Build HashResult records with advisories attached
    - Dispatch blocking work to a worker thread
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        engine: Optional[HashEngine] = None,
        verifier: Optional[Verifier] = None,
    ):
        self._settings = settings or get_settings()
        self.logger = logger or get_logger(__name__)
        self.engine = engine or HashEngine(logger=self.logger)
        self.verifier = verifier or Verifier(engine=self.engine, logger=self.logger)

    def _salt_encoding(self, encoding: Optional[Union[Encoding, str]]) -> Encoding:
        return codec.coerce_encoding(encoding or self._settings.default_salt_encoding)

    def _hash_encoding(self, encoding: Optional[Union[Encoding, str]]) -> Encoding:
        return codec.coerce_encoding(encoding or self._settings.default_hash_encoding)

    def generate_salt(
        self,
        length_bytes: int = 16,
        encoding: Optional[Union[Encoding, str]] = None,
    ) -> str:
        """Random salt of ``length_bytes`` bytes as encoded text."""
        return salts.random_salt(length_bytes, self._salt_encoding(encoding)).text

    def generate_algorithm_salt(
        self,
        algorithm: Union[AlgorithmId, str],
        parameters: Parameters = None,
        encoding: Optional[Union[Encoding, str]] = None,
    ) -> str:
        """Salt suited to ``algorithm`` (bcrypt gets a 22-character payload)."""
        return salts.algorithm_salt(algorithm, parameters, self._salt_encoding(encoding)).text

    def hash_password(
        self,
        algorithm: Union[AlgorithmId, str],
        password: str,
        parameters: Parameters = None,
        salt: Optional[str] = None,
        salt_encoding: Optional[Union[Encoding, str]] = None,
        hash_encoding: Optional[Union[Encoding, str]] = None,
    ) -> HashResult:
        """
        Hash a password.

        Args:
            algorithm: Algorithm to use
            password: Plaintext password
            parameters: Parameter overrides; schema defaults fill the rest
            salt: Salt text; a fresh salt is generated when empty
            salt_encoding: Encoding of ``salt`` (settings default when omitted)
            hash_encoding: Encoding for the raw hash text

        Returns:
            HashResult with the encoded hash and any security warnings

        Raises:
            InvalidParametersError: On bad parameters, or out-of-range values
                when bounds are enforced
            FormatError: If the salt text does not decode
            HashComputationError: If the primitive fails
        """
        params = registry.build_parameters(algorithm, parameters)
        algorithm = params.algorithm_id

        if self._settings.enforce_parameter_bounds:
            problems = check_parameter_bounds(algorithm, params)
            if problems:
                raise InvalidParametersError(algorithm, [p.message for p in problems])

        salt_enc = self._salt_encoding(salt_encoding)
        hash_enc = self._hash_encoding(hash_encoding)
        if salt:
            salt_obj = Salt(text=salt, encoding=salt_enc)
        else:
            salt_obj = salts.algorithm_salt(algorithm, params, salt_enc)

        computed = self.engine.compute(algorithm, password, params, salt_obj)

        if algorithm == AlgorithmId.BCRYPT:
            encoded = computed.raw_hash.decode("ascii")
            reported = BcryptFormat.parse(encoded).parameters.as_dict()
            result_salt = BcryptFormat.salt_payload(encoded)
            salt_enc = Encoding.BCRYPT64
            hash_text = encoded
            hash_enc = Encoding.BCRYPT64
        else:
            salt_bytes = salt_obj.to_bytes()
            encoded = encoded_format.serialize(params, salt_bytes, computed.raw_hash)
            reported = params.as_dict()
            reported["salt_length"] = len(salt_bytes)
            result_salt = salt_obj.text
            salt_enc = salt_obj.encoding
            hash_text = codec.encode(computed.raw_hash, hash_enc)

        advisories = registry.warnings(algorithm, reported)
        execution_time_ms = round(computed.elapsed_ms)

        self.logger.info(
            "hash_generated",
            algorithm=algorithm.value,
            execution_time_ms=execution_time_ms,
            warnings=len(advisories),
        )

        return HashResult(
            algorithm=algorithm,
            salt=result_salt,
            salt_encoding=salt_enc,
            hash=hash_text,
            hash_encoding=hash_enc,
            encoded_hash=encoded,
            execution_time_ms=execution_time_ms,
            parameters=reported,
            warnings=advisories,
        )

    def verify(
        self,
        password: str,
        encoded_hash: str,
        algorithm: Optional[Union[AlgorithmId, str]] = None,
    ) -> VerificationOutcome:
        """
        Verify a password against an encoded hash.

        Surrounding whitespace in ``encoded_hash`` is ignored. A wrong
        password is a normal outcome; malformed input raises.
        """
        outcome = self.verifier.verify(password, encoded_hash.strip(), algorithm)
        self.logger.info(
            "hash_verified",
            algorithm=outcome.algorithm.value,
            is_valid=outcome.is_valid,
        )
        return outcome

    def verify_password(
        self,
        password: str,
        encoded_hash: str,
        algorithm: Optional[Union[AlgorithmId, str]] = None,
    ) -> bool:
        """True when the password matches the encoded hash."""
        return self.verify(password, encoded_hash, algorithm).is_valid

    async def _run_in_worker(self, operation: str, timeout: Optional[float], func, *args):
        """Run a blocking call on a worker thread, bounded by a deadline."""
        deadline = timeout if timeout is not None else self._settings.worker_timeout_seconds
        call = asyncio.to_thread(func, *args)
        if deadline is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=deadline)
        except asyncio.TimeoutError:
            # The thread cannot be stopped; its result is dropped
            self.logger.warning("worker_timeout", operation=operation, timeout_seconds=deadline)
            raise

    async def hash_password_async(
        self,
        algorithm: Union[AlgorithmId, str],
        password: str,
        parameters: Parameters = None,
        salt: Optional[str] = None,
        salt_encoding: Optional[Union[Encoding, str]] = None,
        hash_encoding: Optional[Union[Encoding, str]] = None,
        timeout: Optional[float] = None,
    ) -> HashResult:
        """hash_password on a worker thread.

        Raises:
            asyncio.TimeoutError: If the deadline passes first
        """
        return await self._run_in_worker(
            "hash",
            timeout,
            self.hash_password,
            algorithm,
            password,
            parameters,
            salt,
            salt_encoding,
            hash_encoding,
        )

    async def verify_password_async(
        self,
        password: str,
        encoded_hash: str,
        algorithm: Optional[Union[AlgorithmId, str]] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """verify_password on a worker thread."""
        return await self._run_in_worker(
            "verify", timeout, self.verify_password, password, encoded_hash, algorithm
        )


# Global service instance
_service: Optional[HashingService] = None


def get_hashing_service() -> HashingService:
    """Get the global hashing service instance."""
    global _service
    if _service is None:
        _service = HashingService()
    return _service


def generate_salt(length_bytes: int = 16, encoding: Optional[Union[Encoding, str]] = None) -> str:
    """Random salt text using the global service."""
    return get_hashing_service().generate_salt(length_bytes, encoding)


def generate_algorithm_salt(
    algorithm: Union[AlgorithmId, str],
    parameters: Parameters = None,
    encoding: Optional[Union[Encoding, str]] = None,
) -> str:
    """Algorithm-specific salt text using the global service."""
    return get_hashing_service().generate_algorithm_salt(algorithm, parameters, encoding)


def hash_password(
    algorithm: Union[AlgorithmId, str],
    password: str,
    parameters: Parameters = None,
    salt: Optional[str] = None,
    salt_encoding: Optional[Union[Encoding, str]] = None,
    hash_encoding: Optional[Union[Encoding, str]] = None,
) -> HashResult:
    """Hash a password using the global service."""
    return get_hashing_service().hash_password(
        algorithm, password, parameters, salt, salt_encoding, hash_encoding
    )


def verify_password(
    password: str,
    encoded_hash: str,
    algorithm: Optional[Union[AlgorithmId, str]] = None,
) -> bool:
    """Verify a password using the global service."""
    return get_hashing_service().verify_password(password, encoded_hash, algorithm)
