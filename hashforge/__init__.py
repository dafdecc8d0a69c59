############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# __init__.py: Root package initialization and version definition
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""hashforge - Argon2id, scrypt, bcrypt and PBKDF2 hash generation and verification."""

__version__ = "0.3.0"
