"""
RBAC Policy Library

Grant roles to subjects, or revoke them, by creating and updating
Kubernetes role bindings.
"""

__version__ = "1.0.0"
__author__ = "OLMv1 Project"

# Core libraries
from .core import OpenShiftAuth, ConfigManager
from .core.exceptions import (
    PolicyManagerError,
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    AlreadyExistsError,
    ConflictError,
)

# Policy libraries
from .policy import ClusterRoleBindingAccessor, LocalRoleBindingAccessor, RoleModifier

# Main application
from .main_app import PolicyManager, create_policy_manager, main

__all__ = [
    # Core
    'OpenShiftAuth',
    'ConfigManager',
    'PolicyManagerError',
    'AuthenticationError',
    'ConfigurationError',
    'NotFoundError',
    'AlreadyExistsError',
    'ConflictError',
    # Policy
    'ClusterRoleBindingAccessor',
    'LocalRoleBindingAccessor',
    'RoleModifier',
    # Main
    'PolicyManager',
    'create_policy_manager',
    'main',
]
