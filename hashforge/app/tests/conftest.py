############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# conftest.py: Pytest configuration and shared test fixtures
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Pytest configuration and shared fixtures for hashforge tests."""

import pytest

from hashforge.app.security.engine import HashEngine
from hashforge.app.security.verifier import Verifier
from hashforge.app.services.hashing import HashingService
from hashforge.app.settings import Settings


@pytest.fixture
def fast_params():
    """Low-cost parameters per algorithm so tests run quickly."""
    return {
        "argon2id": {"memory": 1, "iterations": 1, "parallelism": 1, "salt_length": 16, "key_length": 32},
        "scrypt": {"N": 1024, "r": 8, "p": 1, "salt_length": 16, "key_length": 32},
        "bcrypt": {"cost": 4},
        "pbkdf2": {"iterations": 1000, "salt_length": 16, "key_length": 32},
    }


@pytest.fixture
def settings():
    """Settings that ignore the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def engine():
    """Hash engine instance."""
    return HashEngine()


@pytest.fixture
def verifier(engine):
    """Verifier sharing the test engine."""
    return Verifier(engine=engine)


@pytest.fixture
def service(settings):
    """Hashing service with default settings."""
    return HashingService(settings=settings)


@pytest.fixture
def strict_service():
    """Hashing service that rejects out-of-range parameters."""
    return HashingService(settings=Settings(_env_file=None, enforce_parameter_bounds=True))


@pytest.fixture
def sample_password():
    """Sample plaintext password."""
    return "correct horse battery staple"
