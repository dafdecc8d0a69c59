############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# verifier.py: Password verification against encoded hashes
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Password verification.

A verify call goes detect -> parse -> recompute -> compare, once, with no
fallback to another algorithm after detection. A wrong password is a normal
negative outcome. Unparseable strings and unknown prefixes raise.
"""

import hmac
import time
from typing import Optional, Union

import bcrypt
import structlog

from hashforge.app.core.codec import Encoding
from hashforge.app.core.exceptions import HashComputationError, UnknownAlgorithm
from hashforge.app.core.schemas import AlgorithmId, DecodedHash, Salt, VerificationOutcome
from hashforge.app.logging_config import get_logger
from hashforge.app.security import encoded_format
from hashforge.app.security.engine import HashEngine, bcrypt_password

MATCH_MESSAGE = "Password matches password hash"
MISMATCH_MESSAGE = "Password does not match password hash"


class Verifier:
    """Checks candidate passwords against encoded hash strings."""

    def __init__(
        self,
        engine: Optional[HashEngine] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.logger = logger or get_logger(__name__)
        self.engine = engine or HashEngine(logger=self.logger)

    def verify(
        self,
        password: str,
        encoded_hash: str,
        algorithm: Optional[Union[AlgorithmId, str]] = None,
    ) -> VerificationOutcome:
        """
        Verify a candidate password.

        Args:
            password: Candidate plaintext password
            encoded_hash: Stored encoded hash string
            algorithm: Expected algorithm; detected from the prefix when omitted

        Returns:
            VerificationOutcome with is_valid False on a mismatch

        Raises:
            UnknownAlgorithm: If the algorithm cannot be determined
            MalformedEncodingError: If the string does not parse
            HashComputationError: If recomputation fails
        """
        if algorithm is None:
            algorithm = encoded_format.detect_algorithm(encoded_hash)
        else:
            try:
                algorithm = AlgorithmId(algorithm)
            except ValueError:
                raise UnknownAlgorithm(f"Unsupported algorithm: {algorithm}") from None
        self.logger.debug("verify_detected", algorithm=algorithm.value)

        decoded = encoded_format.parse(encoded_hash, algorithm)

        start = time.perf_counter()
        if algorithm == AlgorithmId.BCRYPT:
            is_valid = self._check_bcrypt(password, encoded_hash)
        else:
            is_valid = self._check_recomputed(password, decoded)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        self.logger.debug(
            "verify_completed",
            algorithm=algorithm.value,
            is_valid=is_valid,
            elapsed_ms=round(elapsed_ms, 2),
        )
        return VerificationOutcome(
            is_valid=is_valid,
            algorithm=algorithm,
            message=MATCH_MESSAGE if is_valid else MISMATCH_MESSAGE,
            execution_time_ms=round(elapsed_ms),
        )

    def _check_recomputed(self, password: str, decoded: DecodedHash) -> bool:
        """Recompute with the embedded parameters and compare in constant time."""
        salt = Salt.from_bytes(decoded.salt, Encoding.BASE64)
        computed = self.engine.compute(decoded.algorithm, password, decoded.parameters, salt)
        return hmac.compare_digest(computed.raw_hash, decoded.hash)

    @staticmethod
    def _check_bcrypt(password: str, encoded_hash: str) -> bool:
        """Delegate to bcrypt's own constant-time check."""
        try:
            return bcrypt.checkpw(bcrypt_password(password), encoded_hash.encode("ascii"))
        except ValueError as e:
            raise HashComputationError(AlgorithmId.BCRYPT, e) from e
