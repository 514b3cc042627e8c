"""
Core Libraries

Shared functionality and utilities for the RBAC Policy tool.
"""

from .auth import OpenShiftAuth
from .config import ConfigManager
from .exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    PolicyManagerError,
    RoleRefMismatchError,
    StoreError,
    ValidationError,
)
from .utils import disable_ssl_warnings, mask_sensitive_info, setup_logging

__all__ = [
    'OpenShiftAuth',
    'ConfigManager',
    'PolicyManagerError',
    'AuthenticationError',
    'ConfigurationError',
    'ValidationError',
    'StoreError',
    'NotFoundError',
    'AlreadyExistsError',
    'ConflictError',
    'RoleRefMismatchError',
    'setup_logging',
    'mask_sensitive_info',
    'disable_ssl_warnings',
]
