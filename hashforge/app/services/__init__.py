############################################################
#
# hashforge - Password Hash Generator and Verifier
#
# __init__.py: Services package exports
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Services for hashforge."""

from hashforge.app.services.hashing import HashingService, get_hashing_service

__all__ = ["HashingService", "get_hashing_service"]
