############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# registry.py: Algorithm parameter schemas, defaults and warnings
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Static description of each algorithm's parameters.

The registry is pure data plus lookups. Schema bounds are advisory: nothing
here blocks a computation, it only reports.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from hashforge.app.core.exceptions import InvalidParametersError, UnknownAlgorithm
from hashforge.app.core.schemas import PARAMETER_MODELS, AlgorithmId


@dataclass(frozen=True)
class ParameterSpec:
    """Schema entry for one tunable parameter."""

    name: str
    label: str
    default: Union[int, float]
    min: Union[int, float]
    max: Union[int, float]
    step: Union[int, float] = 1
    alias: Optional[str] = None  # camelCase name used by form callers


@dataclass(frozen=True)
class WarningThreshold:
    """A value strictly below ``threshold`` triggers ``message``."""

    threshold: Union[int, float]
    message: str


@dataclass(frozen=True)
class AlgorithmSpec:
    """Everything the registry knows about one algorithm."""

    algorithm: AlgorithmId
    label: str
    description: str
    parameters: Dict[str, ParameterSpec] = field(default_factory=dict)
    warnings: Dict[str, WarningThreshold] = field(default_factory=dict)


def _params(*specs: ParameterSpec) -> Dict[str, ParameterSpec]:
    return {spec.name: spec for spec in specs}


_SALT_LENGTH = ParameterSpec("salt_length", "Salt Length (bytes)", 16, 8, 64, 1, alias="saltLength")

_ALGORITHMS: Dict[AlgorithmId, AlgorithmSpec] = {
    AlgorithmId.ARGON2ID: AlgorithmSpec(
        algorithm=AlgorithmId.ARGON2ID,
        label="Argon2id",
        description="Memory-hard password hashing function",
        parameters=_params(
            ParameterSpec("memory", "Memory (MiB)", 19, 1, 2048, 1),
            ParameterSpec("iterations", "Iterations", 2, 1, 10, 1),
            ParameterSpec("parallelism", "Parallelism", 1, 1, 16, 1),
            _SALT_LENGTH,
            ParameterSpec("key_length", "Hash Length (bytes)", 32, 16, 64, 1, alias="keyLength"),
        ),
        warnings={
            "memory": WarningThreshold(19, "Memory below 19 MiB may be insecure"),
            "iterations": WarningThreshold(2, "Iterations below 2 may be insecure"),
            "parallelism": WarningThreshold(1, "Parallelism below 1 is invalid"),
        },
    ),
    AlgorithmId.SCRYPT: AlgorithmSpec(
        algorithm=AlgorithmId.SCRYPT,
        label="scrypt",
        description="Memory-hard key derivation function",
        parameters=_params(
            ParameterSpec("n", "N (CPU/Memory cost)", 131072, 1024, 1048576, 1024, alias="N"),
            ParameterSpec("r", "r (Block size)", 8, 1, 32, 1),
            ParameterSpec("p", "p (Parallelization)", 1, 1, 16, 1),
            _SALT_LENGTH,
            ParameterSpec("key_length", "Key Length (bytes)", 32, 16, 64, 1, alias="keyLength"),
        ),
        warnings={
            "n": WarningThreshold(65536, "N below 65536 may be insecure"),
            "r": WarningThreshold(8, "r below 8 may be insecure"),
        },
    ),
    AlgorithmId.BCRYPT: AlgorithmSpec(
        algorithm=AlgorithmId.BCRYPT,
        label="bcrypt",
        description="Adaptive password hashing function",
        parameters=_params(
            ParameterSpec("cost", "Cost Factor", 12, 4, 20, 1),
        ),
        warnings={
            "cost": WarningThreshold(10, "Cost factor below 10 may be insecure"),
        },
    ),
    AlgorithmId.PBKDF2: AlgorithmSpec(
        algorithm=AlgorithmId.PBKDF2,
        label="PBKDF2-HMAC-SHA256",
        description="Password-based key derivation function",
        parameters=_params(
            ParameterSpec("iterations", "Iterations", 600000, 1000, 10000000, 1000),
            _SALT_LENGTH,
            ParameterSpec("key_length", "Key Length (bytes)", 32, 16, 64, 1, alias="keyLength"),
        ),
        warnings={
            "iterations": WarningThreshold(100000, "Iterations below 100,000 may be insecure"),
        },
    ),
}

_DESCRIPTIONS: Dict[str, str] = {
    "memory": "Memory usage in MiB. Higher = more secure but slower.",
    "iterations": "Number of iterations. Higher = more secure but slower.",
    "parallelism": "Number of parallel threads. Usually 4 for optimal performance.",
    "salt_length": "Salt length in bytes. 16 bytes (128-bit) is recommended.",
    "key_length": "Hash output length in bytes. 32 bytes (256-bit) is recommended.",
    "n": "CPU/Memory cost factor. Must be power of 2.",
    "r": "Block size parameter. Higher = more memory usage.",
    "p": "Parallelization parameter. Usually 1.",
    "cost": "Cost factor (2^cost rounds). Higher = more secure but slower.",
}
_ALIASES = {"saltLength": "salt_length", "keyLength": "key_length", "N": "n"}


def get_algorithm_spec(algorithm: Union[AlgorithmId, str]) -> AlgorithmSpec:
    """Look up an algorithm's spec.

    Raises:
        UnknownAlgorithm: If the algorithm is not supported
    """
    try:
        return _ALGORITHMS[AlgorithmId(algorithm)]
    except ValueError:
        raise UnknownAlgorithm(f"Unsupported algorithm: {algorithm}") from None


def supported_algorithms() -> List[AlgorithmSpec]:
    """All algorithm specs in declaration order."""
    return list(_ALGORITHMS.values())


def schema(algorithm: Union[AlgorithmId, str]) -> Dict[str, ParameterSpec]:
    """Parameter schema for an algorithm, in declaration order."""
    return dict(get_algorithm_spec(algorithm).parameters)


def defaults(algorithm: Union[AlgorithmId, str]) -> Dict[str, Union[int, float]]:
    """Default value for every parameter of an algorithm."""
    return {name: spec.default for name, spec in schema(algorithm).items()}


def parameter_description(name: str) -> str:
    """Short help text for a parameter, or an empty string."""
    return _DESCRIPTIONS.get(_ALIASES.get(name, name), "")


def _lookup(values: Mapping[str, Any], spec: ParameterSpec) -> Any:
    if spec.name in values:
        return values[spec.name]
    if spec.alias and spec.alias in values:
        return values[spec.alias]
    return None


def _as_mapping(parameters: Union[BaseModel, Mapping[str, Any], None]) -> Mapping[str, Any]:
    if parameters is None:
        return {}
    if isinstance(parameters, BaseModel):
        return parameters.model_dump()
    return parameters


def warnings(
    algorithm: Union[AlgorithmId, str],
    parameters: Union[BaseModel, Mapping[str, Any], None],
) -> List[str]:
    """
    Security advisories for a parameter set.

    A message is emitted for each parameter whose value is strictly below
    its threshold. Missing parameters produce nothing. Messages follow
    schema declaration order.

    Args:
        algorithm: Algorithm the parameters are for
        parameters: Parameter model or name/value mapping

    Returns:
        List of warning messages (possibly empty)
    """
    spec = get_algorithm_spec(algorithm)
    values = _as_mapping(parameters)
    messages = []
    for name, param in spec.parameters.items():
        threshold = spec.warnings.get(name)
        if threshold is None:
            continue
        value = _lookup(values, param)
        if isinstance(value, (int, float)) and value < threshold.threshold:
            messages.append(threshold.message)
    return messages


def build_parameters(
    algorithm: Union[AlgorithmId, str],
    overrides: Union[BaseModel, Mapping[str, Any], None] = None,
):
    """
    Build the typed parameter model for an algorithm.

    Registry defaults fill any parameter the caller did not supply.

    Args:
        algorithm: Algorithm to build parameters for
        overrides: Caller-supplied values (model or mapping)

    Returns:
        The algorithm's parameter model

    Raises:
        InvalidParametersError: On unknown names or wrongly typed values
    """
    algorithm = get_algorithm_spec(algorithm).algorithm
    model_cls = PARAMETER_MODELS[algorithm]

    if isinstance(overrides, BaseModel):
        if isinstance(overrides, model_cls):
            return overrides
        raise InvalidParametersError(
            algorithm,
            [f"{type(overrides).__name__} cannot be used for {algorithm.value}"],
        )

    values: Dict[str, Any] = dict(defaults(algorithm))
    for key, value in (overrides or {}).items():
        if key == "algorithm":
            if value != algorithm.value:
                raise InvalidParametersError(algorithm, [f"algorithm tag {value!r} does not match"])
            continue
        # Caller values replace the default under whichever name they used
        canonical = _ALIASES.get(key, key)
        values.pop(canonical, None)
        values[key] = value

    try:
        return model_cls.model_validate(values)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(loc) for loc in err['loc']) or 'parameters'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidParametersError(algorithm, problems, cause=e) from e
