############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# __init__.py: Core hashing primitives package
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Core hashing logic for hashforge."""
