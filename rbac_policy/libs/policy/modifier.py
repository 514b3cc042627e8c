"""
Role Modification

Grants a role to subjects or revokes it from them by creating or updating a
single role binding. Scope (cluster or namespace) is entirely the accessor's
concern.
"""

import logging
from typing import Callable, Optional

from ..core.constants import ErrorMessages
from ..core.exceptions import NotFoundError, RoleRefMismatchError
from ..core.protocols import RoleBindingAccessor
from .models import (
    ModificationAction,
    ModificationOutcome,
    ModificationRequest,
    RoleBinding,
)
from .resolver import resolve_binding_target
from .subjects import merge_subjects, subtract_subjects

logger = logging.getLogger(__name__)

WarningHandler = Callable[[str], None]


class RoleModifier:
    """
    Adds subjects to, or removes them from, the binding that grants a role.

    Every call issues exactly one create or update against the accessor, or
    fails before writing anything. Store errors (NotFound, AlreadyExists,
    Conflict) propagate unchanged; the resolve/merge/write sequence is safe
    to re-run from scratch.
    """

    def __init__(self, accessor: RoleBindingAccessor, warning_handler: Optional[WarningHandler] = None):
        """
        Args:
            accessor: Scope-specific binding accessor
            warning_handler: Receives the advisory warning when an added role
                does not exist (defaults to logging it)
        """
        self.accessor = accessor
        self.warning_handler = warning_handler or logger.warning

    def modify(self, request: ModificationRequest) -> ModificationOutcome:
        """Dispatch to add_role or remove_role based on the request action"""
        if request.action == ModificationAction.REMOVE:
            return self.remove_role(request)
        return self.add_role(request)

    def add_role(self, request: ModificationRequest) -> ModificationOutcome:
        """
        Grant request.role_name to request.subjects.

        The binding is created when missing. A missing role only produces
        the warning "Warning: role '<role>' not found"; the binding is
        written anyway since the role may be created later.

        Returns:
            ModificationOutcome with the binding name, final subjects and warning

        Raises:
            AlreadyExistsError: A binding was created under the same name concurrently
            ConflictError: The binding changed between read and update
            RoleRefMismatchError: The named binding grants another role
        """
        target = resolve_binding_target(
            self.accessor, request.role_name, ModificationAction.ADD, request.binding_name)

        if target.fresh:
            binding = self.accessor.new_binding(target.name, request.role_name)
        elif target.binding is not None:
            binding = target.binding
        else:
            try:
                binding = self.accessor.get_binding(target.name)
            except NotFoundError:
                binding = self.accessor.new_binding(target.name, request.role_name)

        self._check_role_ref(binding, request.role_name)

        warning = ""
        if not self.accessor.role_exists(request.role_name):
            warning = ErrorMessages.ROLE_NOT_FOUND_WARNING.format(role=request.role_name)
            self.warning_handler(warning)

        updated = binding.with_subjects(merge_subjects(binding.subjects, request.subjects))

        if binding.is_persisted:
            saved = self.accessor.update_binding(updated)
        else:
            saved = self.accessor.create_binding(updated)

        return ModificationOutcome(
            binding_name=saved.name,
            subjects=saved.subjects,
            warning=warning,
            created=not binding.is_persisted,
        )

    def remove_role(self, request: ModificationRequest) -> ModificationOutcome:
        """
        Revoke request.role_name from request.subjects.

        Without an explicit binding name the canonical binding (named after
        the role) is used, however many other bindings grant the role.
        Subjects not on the binding are ignored. The role itself is never
        checked.

        Raises:
            NotFoundError: The target binding does not exist
            ConflictError: The binding changed between read and update
            RoleRefMismatchError: The named binding grants another role
        """
        target = resolve_binding_target(
            self.accessor, request.role_name, ModificationAction.REMOVE, request.binding_name)

        binding = self.accessor.get_binding(target.name)
        self._check_role_ref(binding, request.role_name)

        updated = binding.with_subjects(subtract_subjects(binding.subjects, request.subjects))
        saved = self.accessor.update_binding(updated)

        return ModificationOutcome(binding_name=saved.name, subjects=saved.subjects)

    def _check_role_ref(self, binding: RoleBinding, role_name: str) -> None:
        # Role references are immutable, so only matching bindings may be modified
        expected = self.accessor.new_binding(binding.name, role_name).role_ref
        if binding.is_persisted and binding.role_ref != expected:
            raise RoleRefMismatchError(
                f"Role binding '{binding.name}' grants {binding.role_ref.kind.value.lower()} "
                f"'{binding.role_ref.name}', not {expected.kind.value.lower()} '{role_name}'")
