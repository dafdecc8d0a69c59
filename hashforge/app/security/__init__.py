############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# __init__.py: Security package exports
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Salt generation, hash computation, encoded formats and verification."""

from hashforge.app.security.encoded_format import detect_algorithm, parse, serialize
from hashforge.app.security.engine import HashEngine
from hashforge.app.security.salts import algorithm_salt, random_salt, salt_byte_length
from hashforge.app.security.verifier import Verifier

__all__ = [
    "HashEngine",
    "Verifier",
    "algorithm_salt",
    "detect_algorithm",
    "parse",
    "random_salt",
    "salt_byte_length",
    "serialize",
]
