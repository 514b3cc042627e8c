"""
Command Line Tests

Runs main() end to end with authentication replaced by the in-memory
RBAC API.
"""

import pytest
from unittest.mock import Mock, patch

from rbac_policy.libs.cli_interface import COMMANDS, create_argument_parser
from rbac_policy.libs.core.constants import FileConstants
from rbac_policy.libs.core.exceptions import AuthenticationError
from rbac_policy.libs.main_app import PolicyManager, format_outcome_message, main
from rbac_policy.libs.policy import ModificationAction, ModificationOutcome, ResourceScope

from fake_rbac import service_account, user


@pytest.fixture
def auth(rbac_api, monkeypatch):
    """Patched OpenShiftAuth whose instances hand out the in-memory API"""
    monkeypatch.setattr(FileConstants, "DEFAULT_CONFIG_LOCATIONS", [])
    with patch('rbac_policy.libs.main_app.setup_logging'), \
            patch('rbac_policy.libs.main_app.OpenShiftAuth') as auth_class:
        instance = auth_class.return_value
        instance.configure_auth.return_value = True
        instance.get_rbac_api.return_value = rbac_api
        instance.get_context_namespace.return_value = None
        yield instance


class TestArgumentParser:
    """Test the command table and argument parsing"""

    def test_all_role_commands_are_registered(self):
        assert sorted(COMMANDS) == [
            'add-cluster-role-to-group',
            'add-cluster-role-to-user',
            'add-role-to-group',
            'add-role-to-user',
            'remove-cluster-role-from-group',
            'remove-cluster-role-from-user',
            'remove-role-from-group',
            'remove-role-from-user',
        ]

    def test_user_command_arguments(self):
        args = create_argument_parser().parse_args([
            'add-role-to-user', 'edit', 'alice', 'bob', '-z', 'builder', '-z', 'ci:runner',
            '-n', 'project', '--rolebinding-name', 'custom',
        ])

        assert args.role == 'edit'
        assert args.users == ['alice', 'bob']
        assert args.service_accounts == ['builder', 'ci:runner']
        assert args.namespace == 'project'
        assert args.rolebinding_name == 'custom'
        assert args.role_namespace is None

    def test_group_command_requires_a_group(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(['add-role-to-group', 'edit'])

    def test_cluster_commands_have_no_role_namespace(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(
                ['add-cluster-role-to-user', 'edit', 'alice', '--role-namespace', 'x'])

    def test_unset_flags_stay_none_so_config_can_apply(self):
        args = create_argument_parser().parse_args(['add-cluster-role-to-group', 'view', 'devs'])

        assert args.debug is None
        assert args.skip_tls is None


class TestFormatOutcomeMessage:
    """Test the success message"""

    def test_lists_subjects_and_binding(self):
        outcome = ModificationOutcome(binding_name="edit-0", subjects=[])

        message = format_outcome_message(
            "clusterrole.rbac.authorization.k8s.io/edit",
            ModificationAction.ADD,
            [user("alice"), service_account("ci", "runner")],
            outcome,
        )

        assert message == ('clusterrole.rbac.authorization.k8s.io/edit added: '
                           '"alice", "system:serviceaccount:ci:runner" (binding "edit-0")')

    def test_remove_wording(self):
        outcome = ModificationOutcome(binding_name="edit", subjects=[])

        message = format_outcome_message("role.rbac.authorization.k8s.io/edit",
                                         ModificationAction.REMOVE, [user("bob")], outcome)

        assert message.startswith('role.rbac.authorization.k8s.io/edit removed: "bob"')


class TestPolicyManager:
    """Test PolicyManager with injected providers"""

    def _manager(self, config_values=None, context_namespace=None):
        auth = Mock()
        auth.get_context_namespace.return_value = context_namespace
        config = Mock()
        config.get_value.side_effect = lambda key, default=None: (config_values or {}).get(key, default)
        with patch('rbac_policy.libs.main_app.setup_logging'):
            return PolicyManager(auth_provider=auth, config_provider=config, warning_handler=Mock())

    def test_explicit_namespace_wins(self):
        manager = self._manager({'cluster.namespace': 'from-config'}, context_namespace='from-context')

        assert manager.resolve_namespace('explicit') == 'explicit'

    def test_config_namespace_wins_over_context(self):
        manager = self._manager({'cluster.namespace': 'from-config'}, context_namespace='from-context')

        assert manager.resolve_namespace() == 'from-config'

    def test_context_namespace_then_default(self):
        assert self._manager(context_namespace='from-context').resolve_namespace() == 'from-context'
        assert self._manager().resolve_namespace() == 'default'

    def test_credentials_fall_back_to_config(self):
        manager = self._manager({'cluster.url': 'https://api.example.com:6443', 'cluster.token': 'sha256~abc'})

        manager.configure_authentication()

        manager.auth.configure_auth.assert_called_once_with('https://api.example.com:6443', 'sha256~abc')

    def test_create_accessor_per_scope(self, rbac_api):
        manager = self._manager()
        manager.auth.get_rbac_api.return_value = rbac_api

        cluster = manager.create_accessor(ResourceScope.CLUSTER)
        local = manager.create_accessor(ResourceScope.NAMESPACE, 'project', 'project')

        assert cluster.describe_role('edit') == 'clusterrole.rbac.authorization.k8s.io/edit'
        assert local.describe_role('edit') == 'role.rbac.authorization.k8s.io/edit'


class TestMain:
    """Test main() end to end"""

    def test_add_cluster_role_to_user(self, auth, rbac_api, capsys):
        rbac_api.add_cluster_role('edit')

        exit_code = main(['add-cluster-role-to-user', 'edit', 'alice', 'bob'])

        out, _ = capsys.readouterr()
        assert exit_code == 0
        assert out.strip() == 'clusterrole.rbac.authorization.k8s.io/edit added: "alice", "bob" (binding "edit")'
        assert rbac_api.binding_subjects('edit') == ['alice', 'bob']

    def test_missing_role_prints_warning_and_still_binds(self, auth, rbac_api, capsys):
        exit_code = main(['add-cluster-role-to-group', 'reader', 'devs'])

        _, err = capsys.readouterr()
        assert exit_code == 0
        assert "Warning: role 'reader' not found" in err
        assert rbac_api.binding_subjects('reader') == ['devs']

    def test_add_role_to_service_account_in_namespace(self, auth, rbac_api, capsys):
        rbac_api.add_cluster_role('view')

        exit_code = main(['add-role-to-user', 'view', '-z', 'deployer', '-n', 'project'])

        assert exit_code == 0
        stored = rbac_api.role_bindings[('project', 'view')]
        assert stored['subjects'] == [('ServiceAccount', 'deployer', 'project')]
        assert stored['role_ref'] == ('ClusterRole', 'view')

    def test_role_namespace_binds_namespaced_role(self, auth, rbac_api, capsys):
        rbac_api.add_role('project', 'deployer')

        exit_code = main(['add-role-to-group', 'deployer', 'ops', '-n', 'project', '--role-namespace', 'project'])

        out, _ = capsys.readouterr()
        assert exit_code == 0
        assert out.startswith('role.rbac.authorization.k8s.io/deployer added: "ops"')
        assert rbac_api.role_bindings[('project', 'deployer')]['role_ref'] == ('Role', 'deployer')

    def test_role_namespace_mismatch_is_an_error(self, auth, rbac_api, capsys):
        exit_code = main(['add-role-to-group', 'edit', 'ops', '-n', 'project', '--role-namespace', 'other'])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert err.startswith('Error: ')
        assert rbac_api.writes == []

    def test_remove_from_missing_binding_fails(self, auth, rbac_api, capsys):
        exit_code = main(['remove-role-from-user', 'admin', 'alice', '-n', 'project'])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert 'Error: rolebindings "admin" not found' in err

    def test_remove_cluster_role_from_user(self, auth, rbac_api, capsys):
        rbac_api.add_cluster_role_binding('edit', 'edit', [user('alice'), user('bob')])

        exit_code = main(['remove-cluster-role-from-user', 'edit', 'alice'])

        out, _ = capsys.readouterr()
        assert exit_code == 0
        assert 'removed: "alice"' in out
        assert rbac_api.binding_subjects('edit') == ['bob']

    def test_user_command_without_subjects_fails(self, auth, rbac_api, capsys):
        exit_code = main(['add-role-to-user', 'edit', '-n', 'project'])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert 'At least one subject is required' in err
        assert rbac_api.writes == []

    def test_invalid_binding_name_fails(self, auth, rbac_api, capsys):
        exit_code = main(['add-cluster-role-to-user', 'edit', 'alice', '--rolebinding-name', 'a/b'])

        assert exit_code == 1
        assert rbac_api.writes == []

    def test_flags_are_passed_to_authentication(self, auth, capsys):
        main(['add-cluster-role-to-user', 'edit', 'alice',
              '--openshift-url', 'https://api.example.com:6443', '--openshift-token', 'sha256~abc'])

        auth.configure_auth.assert_called_once_with('https://api.example.com:6443', 'sha256~abc')

    def test_authentication_failure_is_reported(self, auth, rbac_api, capsys):
        auth.configure_auth.side_effect = AuthenticationError("No cluster credentials found.")

        exit_code = main(['add-cluster-role-to-user', 'edit', 'alice'])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert 'Error: No cluster credentials found.' in err
        assert rbac_api.writes == []

    def test_namespace_from_config_file(self, auth, rbac_api, tmp_path, capsys):
        config_file = tmp_path / 'rbac-policy.yaml'
        config_file.write_text("cluster:\n  namespace: team-a\n")

        exit_code = main(['add-role-to-user', 'edit', 'alice', '--config', str(config_file)])

        assert exit_code == 0
        assert ('team-a', 'edit') in rbac_api.role_bindings

    def test_invalid_config_file_fails(self, auth, tmp_path, capsys):
        config_file = tmp_path / 'rbac-policy.yaml'
        config_file.write_text("cluster:\n  skip_tls: 'yes'\n")

        exit_code = main(['add-role-to-user', 'edit', 'alice', '--config', str(config_file)])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert 'config.cluster.skip_tls must be a bool' in err

    def test_missing_config_file_fails(self, auth, tmp_path, capsys):
        exit_code = main(['add-role-to-user', 'edit', 'alice', '--config', str(tmp_path / 'missing.yaml')])

        _, err = capsys.readouterr()
        assert exit_code == 1
        assert 'Configuration file not found' in err

    def test_generate_config(self, auth, tmp_path, capsys):
        exit_code = main(['generate-config', '--output', str(tmp_path / 'out')])

        out, _ = capsys.readouterr()
        assert exit_code == 0
        assert (tmp_path / 'out' / 'rbac-policy.yaml').is_file()
        assert 'Configuration template written to' in out

    def test_no_command_prints_help(self, auth, capsys):
        exit_code = main([])

        out, _ = capsys.readouterr()
        assert exit_code == 1
        assert 'usage:' in out
