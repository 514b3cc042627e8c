"""
RBAC Policy

A tool to grant OpenShift/Kubernetes roles to users, groups and service
accounts, or revoke them, without knowing which role binding holds them.
"""

__version__ = "1.0.0"
__author__ = "OLMv1 Project"

from .libs import (
    ClusterRoleBindingAccessor,
    LocalRoleBindingAccessor,
    PolicyManager,
    RoleModifier,
    create_policy_manager,
    main,
)

__all__ = [
    'ClusterRoleBindingAccessor',
    'LocalRoleBindingAccessor',
    'PolicyManager',
    'RoleModifier',
    'create_policy_manager',
    'main',
]
