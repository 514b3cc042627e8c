"""
Role Binding Accessor Tests

Cluster and namespace accessors against the in-memory RBAC API.
"""

import pytest
from unittest.mock import Mock

from kubernetes.client.rest import ApiException

from rbac_policy.libs.core.exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    StoreError,
)
from rbac_policy.libs.policy import (
    ClusterRoleBindingAccessor,
    LocalRoleBindingAccessor,
    RoleKind,
    RoleRef,
)

from fake_rbac import service_account, subject_names, user


class TestClusterRoleBindingAccessor:
    """Test the cluster-scoped accessor"""

    def test_lists_only_bindings_for_the_role(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit", [user("foo")])
        rbac_api.add_cluster_role_binding("custom", "edit", [user("bar")])
        rbac_api.add_cluster_role_binding("viewers", "view", [user("baz")])
        accessor = ClusterRoleBindingAccessor(rbac_api)

        bindings = accessor.list_bindings_referencing_role("edit")

        assert sorted(b.name for b in bindings) == ["custom", "edit"]
        assert all(b.role_ref == RoleRef(RoleKind.CLUSTER_ROLE, "edit") for b in bindings)

    def test_get_binding_converts_subjects(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit", [user("foo"), service_account("ci", "runner")])
        accessor = ClusterRoleBindingAccessor(rbac_api)

        binding = accessor.get_binding("edit")

        assert binding.namespace is None
        assert binding.subjects == [user("foo"), service_account("ci", "runner")]
        assert binding.is_persisted

    def test_get_missing_binding_raises_not_found(self, rbac_api):
        accessor = ClusterRoleBindingAccessor(rbac_api)

        with pytest.raises(NotFoundError) as exc_info:
            accessor.get_binding("missing")

        assert exc_info.value.status == 404
        assert '"missing" not found' in str(exc_info.value)

    def test_create_binding_persists_new_binding(self, rbac_api):
        accessor = ClusterRoleBindingAccessor(rbac_api)
        binding = accessor.new_binding("edit", "edit").with_subjects([user("foo")])

        created = accessor.create_binding(binding)

        assert created.is_persisted
        assert rbac_api.binding_subjects("edit") == ["foo"]
        assert rbac_api.cluster_role_bindings["edit"]["role_ref"] == ("ClusterRole", "edit")

    def test_create_existing_binding_raises_already_exists(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit")
        accessor = ClusterRoleBindingAccessor(rbac_api)

        with pytest.raises(AlreadyExistsError):
            accessor.create_binding(accessor.new_binding("edit", "edit"))

    def test_update_keeps_metadata_and_replaces_subjects(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit", [user("foo")], labels={"team": "platform"})
        accessor = ClusterRoleBindingAccessor(rbac_api)
        binding = accessor.get_binding("edit")

        accessor.update_binding(binding.with_subjects([user("bar")]))

        assert rbac_api.binding_subjects("edit") == ["bar"]
        assert rbac_api.cluster_role_bindings["edit"]["labels"] == {"team": "platform"}

    def test_update_with_stale_version_raises_conflict(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit", [user("foo")])
        accessor = ClusterRoleBindingAccessor(rbac_api)
        stale = accessor.get_binding("edit")
        accessor.update_binding(stale.with_subjects([user("bar")]))

        with pytest.raises(ConflictError):
            accessor.update_binding(stale.with_subjects([user("baz")]))

        assert rbac_api.binding_subjects("edit") == ["bar"]

    def test_update_removed_binding_raises_not_found(self, rbac_api):
        rbac_api.add_cluster_role_binding("edit", "edit")
        accessor = ClusterRoleBindingAccessor(rbac_api)
        binding = accessor.get_binding("edit")
        del rbac_api.cluster_role_bindings["edit"]

        with pytest.raises(NotFoundError):
            accessor.update_binding(binding)

    def test_role_exists(self, rbac_api):
        rbac_api.add_cluster_role("edit")
        accessor = ClusterRoleBindingAccessor(rbac_api)

        assert accessor.role_exists("edit") is True
        assert accessor.role_exists("admin") is False

    def test_role_check_failure_is_not_reported_as_missing(self, rbac_api):
        rbac_api.fail_role_reads_with = 403
        accessor = ClusterRoleBindingAccessor(rbac_api)

        assert accessor.role_exists("edit") is True

    def test_describe_role(self, rbac_api):
        accessor = ClusterRoleBindingAccessor(rbac_api)

        assert accessor.describe_role("edit") == "clusterrole.rbac.authorization.k8s.io/edit"

    def test_unexpected_api_error_becomes_store_error(self):
        api = Mock()
        api.list_cluster_role_binding.side_effect = ApiException(status=500, reason="Internal Server Error")
        accessor = ClusterRoleBindingAccessor(api)

        with pytest.raises(StoreError) as exc_info:
            accessor.list_bindings_referencing_role("edit")

        assert exc_info.value.status == 500
        assert not isinstance(exc_info.value, (NotFoundError, ConflictError))


class TestLocalRoleBindingAccessor:
    """Test the namespace-scoped accessor"""

    def test_cluster_role_reference_by_default(self, rbac_api):
        accessor = LocalRoleBindingAccessor("project", rbac_api)

        binding = accessor.new_binding("edit", "edit")

        assert binding.namespace == "project"
        assert binding.role_ref == RoleRef(RoleKind.CLUSTER_ROLE, "edit")
        assert accessor.describe_role("edit") == "clusterrole.rbac.authorization.k8s.io/edit"

    def test_role_reference_with_role_namespace(self, rbac_api):
        accessor = LocalRoleBindingAccessor("project", rbac_api, role_namespace="project")

        assert accessor.new_binding("edit", "edit").role_ref == RoleRef(RoleKind.ROLE, "edit")
        assert accessor.describe_role("edit") == "role.rbac.authorization.k8s.io/edit"

    def test_role_namespace_must_match_binding_namespace(self, rbac_api):
        with pytest.raises(ConfigurationError):
            LocalRoleBindingAccessor("project", rbac_api, role_namespace="other")

    def test_invalid_namespace_is_rejected(self, rbac_api):
        with pytest.raises(ConfigurationError):
            LocalRoleBindingAccessor("Not_A_Namespace", rbac_api)

    def test_lists_only_bindings_in_namespace_with_matching_role_kind(self, rbac_api):
        rbac_api.add_role_binding("project", "edit", "edit", role_kind="Role")
        rbac_api.add_role_binding("project", "edit-cluster", "edit", role_kind="ClusterRole")
        rbac_api.add_role_binding("other", "edit", "edit", role_kind="Role")
        accessor = LocalRoleBindingAccessor("project", rbac_api, role_namespace="project")

        bindings = accessor.list_bindings_referencing_role("edit")

        assert [(b.name, b.namespace) for b in bindings] == [("edit", "project")]

    def test_role_in_other_namespace_does_not_count(self, rbac_api):
        rbac_api.add_role("other", "edit")
        accessor = LocalRoleBindingAccessor("project", rbac_api, role_namespace="project")

        assert accessor.role_exists("edit") is False

        rbac_api.add_role("project", "edit")
        assert accessor.role_exists("edit") is True

    def test_connection_failure_on_role_read_is_not_reported_as_missing(self, rbac_api):
        rbac_api.read_namespaced_role = Mock(side_effect=ConnectionRefusedError("connection refused"))
        accessor = LocalRoleBindingAccessor("project", rbac_api, role_namespace="project")

        assert accessor.role_exists("edit") is True

    def test_cluster_role_existence_without_role_namespace(self, rbac_api):
        rbac_api.add_role("project", "edit")
        accessor = LocalRoleBindingAccessor("project", rbac_api)

        assert accessor.role_exists("edit") is False

    def test_create_and_update_round_trip(self, rbac_api):
        accessor = LocalRoleBindingAccessor("project", rbac_api)

        created = accessor.create_binding(accessor.new_binding("edit", "edit").with_subjects([user("a")]))
        accessor.update_binding(created.with_subjects(created.subjects + [user("b")]))

        assert subject_names(accessor.get_binding("edit").subjects) == ["a", "b"]
        assert rbac_api.writes == [("create", "edit"), ("update", "edit")]
