"""
Data Models Module.

Typed data structures for role bindings, their subjects and the requests
and outcomes of a role modification.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional

from ..core.constants import KubernetesConstants

SubjectKind = KubernetesConstants.SubjectKind
RoleKind = KubernetesConstants.RoleKind


class ResourceScope(Enum):
    """Scope of RBAC resources."""
    CLUSTER = "cluster"
    NAMESPACE = "namespace"


class ModificationAction(str, Enum):
    """Direction of a role modification"""
    ADD = "add"
    REMOVE = "remove"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Subject:
    """
    An identity bound to a role.

    Equality is structural over kind, name and namespace; the namespace is
    only meaningful for service accounts and is None otherwise.
    """
    kind: SubjectKind
    name: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class RoleRef:
    """The role a binding grants. Set at creation and never changed."""
    kind: RoleKind
    name: str


@dataclass
class RoleBinding:
    """
    A cluster role binding (namespace None) or a namespaced role binding.

    resource_version is the optimistic-concurrency token read from the store;
    it is None for bindings that have not been created yet.
    """
    name: str
    role_ref: RoleRef
    subjects: List[Subject] = field(default_factory=list)
    namespace: Optional[str] = None
    resource_version: Optional[str] = None
    # API object the binding was read from; its metadata is sent back on update
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def is_persisted(self) -> bool:
        return self.resource_version is not None

    def with_subjects(self, subjects: List[Subject]) -> 'RoleBinding':
        """Copy of this binding with its subject list replaced"""
        return replace(self, subjects=list(subjects))


@dataclass
class ModificationRequest:
    """Input to one add/remove invocation"""
    role_name: str
    subjects: List[Subject]
    action: ModificationAction = ModificationAction.ADD
    binding_name: Optional[str] = None


@dataclass
class ModificationOutcome:
    """Result of one add/remove invocation"""
    binding_name: str
    subjects: List[Subject]
    warning: str = ""
    created: bool = False
