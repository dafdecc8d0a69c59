############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# schemas.py: Value objects for parameters, salts and results
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Value objects shared by the hashing core.

Each algorithm has its own parameter model, so a parameter name that does
not belong to an algorithm is rejected when the model is built. The models
accept both snake_case names and the camelCase names used by form callers
(``saltLength``, ``keyLength``, ``N``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hashforge.app.core import codec
from hashforge.app.core.codec import Encoding


class AlgorithmId(str, Enum):
    """Supported password hashing algorithms."""
    ARGON2ID = "argon2id"
    SCRYPT = "scrypt"
    BCRYPT = "bcrypt"
    PBKDF2 = "pbkdf2"


# Parameter models
class _ParameterModel(BaseModel):
    """Common configuration for per-algorithm parameter models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    @property
    def algorithm_id(self) -> AlgorithmId:
        """Algorithm these parameters belong to."""
        return AlgorithmId(self.algorithm)

    def as_dict(self) -> Dict[str, Any]:
        """Parameter values keyed by name, without the algorithm tag."""
        return self.model_dump(exclude={"algorithm"})


class Argon2idParameters(_ParameterModel):
    """Argon2id parameters. ``memory`` is in MiB."""
    algorithm: Literal["argon2id"] = "argon2id"
    memory: Union[int, float]
    iterations: int
    parallelism: int
    salt_length: int
    key_length: int

    @property
    def memory_kib(self) -> int:
        """Memory cost in KiB, as the primitive expects it."""
        return int(round(self.memory * 1024))


class ScryptParameters(_ParameterModel):
    """scrypt parameters. ``n`` is the CPU/memory cost (a power of two)."""
    algorithm: Literal["scrypt"] = "scrypt"
    n: int = Field(alias="N")
    r: int
    p: int
    salt_length: int
    key_length: int


class BcryptParameters(_ParameterModel):
    """bcrypt parameters. ``cost`` is log2 of the round count."""
    algorithm: Literal["bcrypt"] = "bcrypt"
    cost: int


class Pbkdf2Parameters(_ParameterModel):
    """PBKDF2-HMAC-SHA256 parameters."""
    algorithm: Literal["pbkdf2"] = "pbkdf2"
    iterations: int
    salt_length: int
    key_length: int


AlgorithmParameters = Annotated[
    Union[Argon2idParameters, ScryptParameters, BcryptParameters, Pbkdf2Parameters],
    Field(discriminator="algorithm"),
]

PARAMETER_MODELS: Dict[AlgorithmId, Type[_ParameterModel]] = {
    AlgorithmId.ARGON2ID: Argon2idParameters,
    AlgorithmId.SCRYPT: ScryptParameters,
    AlgorithmId.BCRYPT: BcryptParameters,
    AlgorithmId.PBKDF2: Pbkdf2Parameters,
}


class Salt(BaseModel):
    """A salt as text plus the encoding that text is in."""

    model_config = ConfigDict(frozen=True)

    text: str
    encoding: Encoding = Encoding.HEX

    def to_bytes(self) -> bytes:
        """Decode the salt text into raw bytes."""
        return codec.decode(self.text, self.encoding)

    @classmethod
    def from_bytes(cls, data: bytes, encoding: Encoding = Encoding.HEX) -> "Salt":
        """Build a salt from raw bytes."""
        return cls(text=codec.encode(data, encoding), encoding=encoding)


@dataclass(frozen=True)
class ComputedHash:
    """Output of one primitive call.

    For bcrypt ``raw_hash`` is the ASCII bytes of bcrypt's own encoded
    string, since bcrypt does not expose the digest separately.
    """

    raw_hash: bytes
    elapsed_ms: float


class HashResult(BaseModel):
    """Result of a single hashing call."""

    model_config = ConfigDict(frozen=True)

    algorithm: AlgorithmId
    salt: str
    salt_encoding: Encoding
    hash: str
    hash_encoding: Encoding
    encoded_hash: str
    execution_time_ms: int
    parameters: Dict[str, Any]
    warnings: List[str] = Field(default_factory=list)


class DecodedHash(BaseModel):
    """Components recovered from an encoded hash string."""

    model_config = ConfigDict(frozen=True)

    algorithm: AlgorithmId
    parameters: AlgorithmParameters
    salt: bytes
    hash: bytes
    variant: Optional[str] = None  # bcrypt only: "2a", "2b" or "2y"


class VerificationOutcome(BaseModel):
    """Result of a verification call."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    algorithm: AlgorithmId
    message: str
    execution_time_ms: int = 0
