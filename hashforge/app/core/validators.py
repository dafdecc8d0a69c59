############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# validators.py: Caller input validation and parameter bound checks
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Input validation for hashforge callers.

The hashing core accepts whatever it is given; these checks are for callers
(the CLI, forms) that want to reject blank input or out-of-range parameters
before a computation starts.
"""

from typing import Any, Dict, List, Mapping, Tuple, Union

from pydantic import BaseModel

from hashforge.app.core import registry
from hashforge.app.core.schemas import AlgorithmId


class ValidationError:
    """Represents a validation error."""

    def __init__(self, path: str, message: str, expected: Any = None, actual: Any = None):
        self.path = path
        self.message = message
        self.expected = expected
        self.actual = actual

    def __repr__(self) -> str:
        return f"ValidationError(path={self.path!r}, message={self.message!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "path": self.path,
            "message": self.message,
            "expected": self.expected,
            "actual": self.actual,
        }


def _require_text(value: str, message: str) -> Tuple[bool, str]:
    if not value or not value.strip():
        return False, message
    return True, ""


def validate_password(password: str) -> Tuple[bool, str]:
    """Validate the plaintext password field."""
    return _require_text(password, "Please enter a plaintext password")


def validate_salt(salt: str) -> Tuple[bool, str]:
    """Validate the salt field."""
    return _require_text(salt, "Please enter a salt or generate one")


def validate_encoded_hash(encoded_hash: str) -> Tuple[bool, str]:
    """Validate the encoded hash field."""
    return _require_text(encoded_hash, "Please enter an encoded password hash")


def validate_candidate_password(password: str) -> Tuple[bool, str]:
    """Validate the candidate password field."""
    return _require_text(password, "Please enter a candidate password")


_FIELD_VALIDATORS = {
    "password": validate_password,
    "salt": validate_salt,
    "encoded_hash": validate_encoded_hash,
    "candidate_password": validate_candidate_password,
}


def validate_field(field: str, value: str) -> str:
    """
    Validate a named field.

    Returns:
        The error message, or an empty string when valid or unknown
    """
    validator = _FIELD_VALIDATORS.get(field)
    if validator is None:
        return ""
    return validator(value)[1]


def check_parameter_bounds(
    algorithm: Union[AlgorithmId, str],
    parameters: Union[BaseModel, Mapping[str, Any]],
) -> List[ValidationError]:
    """
    Compare parameter values against the schema bounds.

    Args:
        algorithm: Algorithm the parameters belong to
        parameters: Parameter model or name/value mapping

    Returns:
        One ValidationError per value outside ``[min, max]``
    """
    if isinstance(parameters, BaseModel):
        parameters = parameters.model_dump()

    errors = []
    for name, spec in registry.schema(algorithm).items():
        value = parameters.get(name)
        if value is None and spec.alias:
            value = parameters.get(spec.alias)
        if not isinstance(value, (int, float)):
            continue
        if value < spec.min or value > spec.max:
            errors.append(
                ValidationError(
                    path=f"$.{name}",
                    message=f"{spec.label} must be between {spec.min} and {spec.max}",
                    expected=[spec.min, spec.max],
                    actual=value,
                )
            )
    return errors
