"""
tfbackend API Server

FastAPI application exposing /states and /locks.
"""

from .auth import check_credentials, install_basic_auth
from .router import LOCK_OPERATIONS, STATE_OPERATIONS, create_app

__all__ = [
    "LOCK_OPERATIONS",
    "STATE_OPERATIONS",
    "check_credentials",
    "create_app",
    "install_basic_auth",
]
