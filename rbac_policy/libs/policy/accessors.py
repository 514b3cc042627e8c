"""
Role Binding Accessors

Scope-specific adapters between the policy engine and the Kubernetes RBAC
API. ClusterRoleBindingAccessor works on ClusterRoleBindings,
LocalRoleBindingAccessor on RoleBindings in one namespace. Both satisfy the
RoleBindingAccessor protocol and translate ApiException into the tool's
NotFound/AlreadyExists/Conflict errors.
"""

import logging
from typing import Any, List, Optional

import urllib3
from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.constants import APIConstants, ErrorMessages, KubernetesConstants
from ..core.exceptions import ConfigurationError
from ..core.utils import translate_api_error, validate_namespace
from .models import RoleBinding, RoleKind, RoleRef, Subject, SubjectKind

logger = logging.getLogger(__name__)


def subject_from_api(subject: Any) -> Subject:
    """Convert an RbacV1Subject into a Subject"""
    kind = SubjectKind(subject.kind)
    namespace = subject.namespace if kind == SubjectKind.SERVICE_ACCOUNT else None
    return Subject(kind, subject.name, namespace)


def subject_to_api(subject: Subject) -> client.RbacV1Subject:
    """Convert a Subject into an RbacV1Subject"""
    return client.RbacV1Subject(
        kind=str(subject.kind),
        name=subject.name,
        namespace=subject.namespace,
        api_group=subject.kind.api_group or None,
    )


def binding_from_api(obj: Any) -> RoleBinding:
    """Convert a V1ClusterRoleBinding or V1RoleBinding into a RoleBinding"""
    return RoleBinding(
        name=obj.metadata.name,
        namespace=obj.metadata.namespace,
        role_ref=RoleRef(RoleKind(obj.role_ref.kind), obj.role_ref.name),
        subjects=[subject_from_api(s) for s in obj.subjects or []],
        resource_version=obj.metadata.resource_version,
        raw=obj,
    )


def _references_role(obj: Any, kind: RoleKind, role_name: str) -> bool:
    role_ref = obj.role_ref
    return role_ref is not None and role_ref.kind == kind and role_ref.name == role_name


def _build_body(model_class: type, binding: RoleBinding) -> Any:
    """
    Build the request body for create/update.

    Metadata of a fetched binding (labels, annotations, resource version) is
    sent back unchanged so the update only replaces the subject list.
    """
    if binding.raw is not None:
        metadata = binding.raw.metadata
    else:
        metadata = client.V1ObjectMeta(
            name=binding.name,
            namespace=binding.namespace,
            resource_version=binding.resource_version,
        )
    return model_class(
        api_version=f"{KubernetesConstants.RBAC_API_GROUP}/v1",
        kind=model_class.__name__[len("V1"):],
        metadata=metadata,
        role_ref=client.V1RoleRef(
            api_group=KubernetesConstants.RBAC_API_GROUP,
            kind=str(binding.role_ref.kind),
            name=binding.role_ref.name,
        ),
        subjects=[subject_to_api(s) for s in binding.subjects],
    )


class ClusterRoleBindingAccessor:
    """Accessor for cluster-scoped ClusterRoleBindings referencing ClusterRoles"""

    RESOURCE = KubernetesConstants.ResourceName.CLUSTER_ROLE_BINDINGS.value

    def __init__(self, rbac_api: client.RbacAuthorizationV1Api):
        self.rbac_api = rbac_api
        self.role_kind = RoleKind.CLUSTER_ROLE

    def list_bindings_referencing_role(self, role_name: str) -> List[RoleBinding]:
        try:
            items = self.rbac_api.list_cluster_role_binding().items
        except ApiException as e:
            raise translate_api_error(e, "list", self.RESOURCE) from e

        bindings = [binding_from_api(obj) for obj in items
                    if _references_role(obj, self.role_kind, role_name)]
        logger.debug(f"Found {len(bindings)} {self.RESOURCE} referencing clusterrole {role_name}")
        return bindings

    def get_binding(self, name: str) -> RoleBinding:
        try:
            return binding_from_api(self.rbac_api.read_cluster_role_binding(name))
        except ApiException as e:
            raise translate_api_error(e, "get", self.RESOURCE, name) from e

    def create_binding(self, binding: RoleBinding) -> RoleBinding:
        body = _build_body(client.V1ClusterRoleBinding, binding)
        try:
            created = self.rbac_api.create_cluster_role_binding(body)
        except ApiException as e:
            raise translate_api_error(e, "create", self.RESOURCE, binding.name) from e
        logger.info(f"Created {self.RESOURCE} {binding.name}")
        return binding_from_api(created)

    def update_binding(self, binding: RoleBinding) -> RoleBinding:
        body = _build_body(client.V1ClusterRoleBinding, binding)
        try:
            updated = self.rbac_api.replace_cluster_role_binding(binding.name, body)
        except ApiException as e:
            raise translate_api_error(e, "update", self.RESOURCE, binding.name) from e
        logger.info(f"Updated {self.RESOURCE} {binding.name}")
        return binding_from_api(updated)

    def role_exists(self, role_name: str) -> bool:
        return _probe_role(
            lambda: self.rbac_api.read_cluster_role(role_name),
            KubernetesConstants.ResourceName.CLUSTER_ROLES.value, role_name)

    def new_binding(self, name: str, role_name: str) -> RoleBinding:
        return RoleBinding(name=name, role_ref=RoleRef(self.role_kind, role_name))

    def describe_role(self, role_name: str) -> str:
        return f"{self.role_kind.resource}/{role_name}"


class LocalRoleBindingAccessor:
    """
    Accessor for RoleBindings in a single namespace.

    Without a role namespace the bindings reference ClusterRoles. With one,
    they reference Roles in that namespace, which must be the binding
    namespace because a RoleBinding can only grant a Role from its own
    namespace.
    """

    RESOURCE = KubernetesConstants.ResourceName.ROLE_BINDINGS.value

    def __init__(self, namespace: str, rbac_api: client.RbacAuthorizationV1Api,
                 role_namespace: Optional[str] = None):
        """
        Args:
            namespace: Namespace the bindings live in
            rbac_api: Authenticated RBAC API client
            role_namespace: Namespace of the referenced Role, or None for a ClusterRole

        Raises:
            ConfigurationError: If a namespace is invalid or the role namespace
                differs from the binding namespace
        """
        validate_namespace(namespace)
        if role_namespace and role_namespace != namespace:
            raise ConfigurationError(ErrorMessages.ConfigError.ROLE_NAMESPACE_MISMATCH.format(
                role_namespace=role_namespace, namespace=namespace))

        self.namespace = namespace
        self.rbac_api = rbac_api
        self.role_namespace = role_namespace or None
        self.role_kind = RoleKind.ROLE if self.role_namespace else RoleKind.CLUSTER_ROLE

    def list_bindings_referencing_role(self, role_name: str) -> List[RoleBinding]:
        try:
            items = self.rbac_api.list_namespaced_role_binding(self.namespace).items
        except ApiException as e:
            raise translate_api_error(e, "list", self.RESOURCE) from e

        bindings = [binding_from_api(obj) for obj in items
                    if _references_role(obj, self.role_kind, role_name)]
        logger.debug(
            f"Found {len(bindings)} {self.RESOURCE} in {self.namespace} "
            f"referencing {self.role_kind.value.lower()} {role_name}")
        return bindings

    def get_binding(self, name: str) -> RoleBinding:
        try:
            return binding_from_api(self.rbac_api.read_namespaced_role_binding(name, self.namespace))
        except ApiException as e:
            raise translate_api_error(e, "get", self.RESOURCE, name) from e

    def create_binding(self, binding: RoleBinding) -> RoleBinding:
        body = _build_body(client.V1RoleBinding, binding)
        try:
            created = self.rbac_api.create_namespaced_role_binding(self.namespace, body)
        except ApiException as e:
            raise translate_api_error(e, "create", self.RESOURCE, binding.name) from e
        logger.info(f"Created {self.RESOURCE} {binding.name} in {self.namespace}")
        return binding_from_api(created)

    def update_binding(self, binding: RoleBinding) -> RoleBinding:
        body = _build_body(client.V1RoleBinding, binding)
        try:
            updated = self.rbac_api.replace_namespaced_role_binding(binding.name, self.namespace, body)
        except ApiException as e:
            raise translate_api_error(e, "update", self.RESOURCE, binding.name) from e
        logger.info(f"Updated {self.RESOURCE} {binding.name} in {self.namespace}")
        return binding_from_api(updated)

    def role_exists(self, role_name: str) -> bool:
        if self.role_namespace:
            return _probe_role(
                lambda: self.rbac_api.read_namespaced_role(role_name, self.role_namespace),
                KubernetesConstants.ResourceName.ROLES.value, role_name)
        return _probe_role(
            lambda: self.rbac_api.read_cluster_role(role_name),
            KubernetesConstants.ResourceName.CLUSTER_ROLES.value, role_name)

    def new_binding(self, name: str, role_name: str) -> RoleBinding:
        return RoleBinding(name=name, namespace=self.namespace,
                           role_ref=RoleRef(self.role_kind, role_name))

    def describe_role(self, role_name: str) -> str:
        return f"{self.role_kind.resource}/{role_name}"


def _probe_role(read_role, resource: str, role_name: str) -> bool:
    """
    Run a role read and report whether the role exists.

    Only a 404 counts as missing. Any other failure, including a transport
    error before the API server answers, is logged and the role is treated
    as existing, since the check only drives an advisory warning.
    """
    try:
        read_role()
    except ApiException as e:
        if e.status == APIConstants.HTTPStatus.NOT_FOUND:
            return False
        logger.warning(f"Could not verify that {resource} {role_name} exists: {e.status} {e.reason}")
    except (urllib3.exceptions.HTTPError, OSError) as e:
        logger.warning(f"Could not verify that {resource} {role_name} exists: {e}")
    return True
