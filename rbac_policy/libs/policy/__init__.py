"""
Policy Libraries

Role binding resolution and subject list modification.
"""

from .accessors import ClusterRoleBindingAccessor, LocalRoleBindingAccessor
from .models import (
    ModificationAction,
    ModificationOutcome,
    ModificationRequest,
    ResourceScope,
    RoleBinding,
    RoleKind,
    RoleRef,
    Subject,
    SubjectKind,
)
from .modifier import RoleModifier
from .resolver import BindingTarget, resolve_binding_target
from .subjects import build_subjects, format_subject, merge_subjects, subtract_subjects

__all__ = [
    'ClusterRoleBindingAccessor',
    'LocalRoleBindingAccessor',
    'ModificationAction',
    'ModificationOutcome',
    'ModificationRequest',
    'ResourceScope',
    'RoleBinding',
    'RoleKind',
    'RoleRef',
    'Subject',
    'SubjectKind',
    'RoleModifier',
    'BindingTarget',
    'resolve_binding_target',
    'build_subjects',
    'format_subject',
    'merge_subjects',
    'subtract_subjects',
]
