"""
Binding Target Resolver

Decides which role binding an add or remove operates on when the caller
did not name one.

Add prefers the canonical binding (named after the role) only when it is
the sole binding granting the role. When the role is already granted by
other bindings it creates a new binding with a numeric suffix rather than
guessing which of them the caller meant. Remove always targets the
canonical binding.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import NotFoundError
from ..core.protocols import RoleBindingAccessor
from .models import ModificationAction, RoleBinding

logger = logging.getLogger(__name__)


@dataclass
class BindingTarget:
    """
    The binding an operation acts on.

    fresh: a new binding must be created under `name` with no subjects.
    binding: an existing binding already read while resolving, to merge into.
    When neither is set the caller fetches `name` itself.
    """
    name: str
    binding: Optional[RoleBinding] = None
    fresh: bool = False


def resolve_binding_target(accessor: RoleBindingAccessor,
                           role_name: str,
                           action: ModificationAction,
                           binding_name: Optional[str] = None) -> BindingTarget:
    """
    Choose the binding to act on.

    Args:
        accessor: Scope-specific binding accessor
        role_name: Role being granted or revoked
        action: Add or remove
        binding_name: Binding name given explicitly by the caller, used verbatim

    Returns:
        BindingTarget describing the chosen binding
    """
    if binding_name:
        return BindingTarget(name=binding_name)

    if action == ModificationAction.REMOVE:
        return BindingTarget(name=role_name)

    existing = accessor.list_bindings_referencing_role(role_name)

    if not existing:
        logger.debug(f"No binding grants {role_name}; creating {role_name}")
        return BindingTarget(name=role_name, fresh=True)

    if len(existing) == 1 and existing[0].name == role_name:
        logger.debug(f"Reusing canonical binding {role_name}")
        return BindingTarget(name=role_name, binding=existing[0])

    name = next_free_binding_name(accessor, role_name)
    logger.debug(
        f"{len(existing)} binding(s) grant {role_name} "
        f"({', '.join(b.name for b in existing)}); creating {name}")
    return BindingTarget(name=name, fresh=True)


def next_free_binding_name(accessor: RoleBindingAccessor, role_name: str) -> str:
    """
    Find '<role>-N' with the smallest N >= 0 not used by any binding in scope.

    Each candidate is probed with get_binding; errors other than NotFound
    propagate.
    """
    for index in itertools.count():
        candidate = f"{role_name}-{index}"
        try:
            accessor.get_binding(candidate)
        except NotFoundError:
            return candidate
