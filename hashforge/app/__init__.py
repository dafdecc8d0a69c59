############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# __init__.py: Application package initialization
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""hashforge Application Package."""

from hashforge import __version__

__all__ = ["__version__"]
