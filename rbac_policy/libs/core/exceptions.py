"""
Exceptions Module

Exception hierarchy for the RBAC Policy tool.
"""

from typing import Optional


class PolicyManagerError(Exception):
    """Base exception for all RBAC Policy errors"""


class ConfigurationError(PolicyManagerError):
    """Raised when configuration or command input is invalid"""


class AuthenticationError(PolicyManagerError):
    """Raised when the cluster client cannot be configured"""


class ValidationError(PolicyManagerError):
    """Raised when a subject or role reference cannot be parsed"""


class StoreError(PolicyManagerError):
    """
    Raised when the backing RBAC store rejects a request.

    Carries the HTTP status and reason reported by the API server so callers
    can decide whether the whole operation is worth re-running.
    """

    def __init__(self, message: str, status: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class NotFoundError(StoreError):
    """Raised when a requested binding does not exist"""


class AlreadyExistsError(StoreError):
    """Raised when a binding is created under a name that is already taken"""


class ConflictError(StoreError):
    """Raised when an update is based on a stale resource version"""


class RoleRefMismatchError(PolicyManagerError):
    """Raised when a named binding grants a different role than requested"""
