############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# exceptions.py: Error taxonomy for hashing and verification
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Exceptions raised by the hashing core.

A password that does not match is never an exception; verification reports
it as a normal negative outcome. Everything here signals malformed input or
a primitive that could not run.
"""

from typing import Any, List, Optional


class HashingError(Exception):
    """Base class for all hashforge errors."""


class FormatError(HashingError, ValueError):
    """Text could not be decoded with the requested byte encoding."""

    def __init__(self, message: str, encoding: Optional[str] = None):
        super().__init__(message)
        self.encoding = encoding


class RngUnavailable(HashingError):
    """No cryptographically secure random source is available."""


class HashComputationError(HashingError):
    """An underlying primitive rejected its parameters or failed."""

    def __init__(self, algorithm: Any, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.algorithm = algorithm
        self.cause = cause
        name = getattr(algorithm, "value", algorithm)
        if message is None:
            message = f"{name} hashing failed: {cause}" if cause else f"{name} hashing failed"
        super().__init__(message)


class InvalidParametersError(HashComputationError):
    """Parameters do not fit the algorithm's parameter shape or bounds."""

    def __init__(self, algorithm: Any, problems: List[str], cause: Optional[BaseException] = None):
        self.problems = list(problems)
        name = getattr(algorithm, "value", algorithm)
        super().__init__(
            algorithm,
            cause=cause,
            message=f"Invalid {name} parameters: " + "; ".join(self.problems),
        )


class MalformedEncodingError(HashingError, ValueError):
    """An encoded hash string does not follow its algorithm's grammar."""

    def __init__(self, message: str, algorithm: Any = None):
        super().__init__(message)
        self.algorithm = algorithm


class UnknownAlgorithm(HashingError, ValueError):
    """No known algorithm prefix matches an encoded hash string."""

    def __init__(self, message: str = "Unable to determine algorithm from hash format"):
        super().__init__(message)
