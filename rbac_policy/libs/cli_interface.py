"""
CLI Interface Module.

Argument parsing and the table of role modification commands.
"""

import argparse
from dataclasses import dataclass
from typing import Dict

from .policy.models import ModificationAction, ResourceScope


@dataclass(frozen=True)
class CommandSpec:
    """What a role modification subcommand does"""
    scope: ResourceScope
    action: ModificationAction
    subject_type: str  # 'user' or 'group'
    help: str


USER = 'user'
GROUP = 'group'

COMMANDS: Dict[str, CommandSpec] = {
    'add-role-to-user': CommandSpec(
        ResourceScope.NAMESPACE, ModificationAction.ADD, USER,
        'Add a role to users or service accounts for a namespace'),
    'add-role-to-group': CommandSpec(
        ResourceScope.NAMESPACE, ModificationAction.ADD, GROUP,
        'Add a role to groups for a namespace'),
    'remove-role-from-user': CommandSpec(
        ResourceScope.NAMESPACE, ModificationAction.REMOVE, USER,
        'Remove a role from users or service accounts for a namespace'),
    'remove-role-from-group': CommandSpec(
        ResourceScope.NAMESPACE, ModificationAction.REMOVE, GROUP,
        'Remove a role from groups for a namespace'),
    'add-cluster-role-to-user': CommandSpec(
        ResourceScope.CLUSTER, ModificationAction.ADD, USER,
        'Add a cluster role to users or service accounts'),
    'add-cluster-role-to-group': CommandSpec(
        ResourceScope.CLUSTER, ModificationAction.ADD, GROUP,
        'Add a cluster role to groups'),
    'remove-cluster-role-from-user': CommandSpec(
        ResourceScope.CLUSTER, ModificationAction.REMOVE, USER,
        'Remove a cluster role from users or service accounts'),
    'remove-cluster-role-from-group': CommandSpec(
        ResourceScope.CLUSTER, ModificationAction.REMOVE, GROUP,
        'Remove a cluster role from groups'),
}

GENERATE_CONFIG_COMMAND = 'generate-config'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser with subcommands using parent parsers"""

    # Common parser: arguments shared by ALL commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--config', help='Configuration file path')
    common_parser.add_argument('--debug', action='store_true', default=None, help='Enable debug logging')

    # Auth parser: arguments shared by commands that talk to the cluster
    auth_parser = argparse.ArgumentParser(add_help=False)
    auth_parser.add_argument('--skip-tls', action='store_true', default=None,
                             help='Skip TLS verification for insecure requests')
    auth_parser.add_argument('--openshift-url', help='OpenShift cluster URL')
    auth_parser.add_argument('--openshift-token', help='OpenShift authentication token')

    # Binding parser: arguments shared by every role modification command
    binding_parser = argparse.ArgumentParser(add_help=False)
    binding_parser.add_argument('role', help='Name of the role or cluster role')
    binding_parser.add_argument('--rolebinding-name',
                                help='Name of the binding to modify or create '
                                     '(default: chosen from the bindings that grant the role)')

    parser = argparse.ArgumentParser(
        prog='rbac-policy',
        description='RBAC Policy - Grant roles to users, groups and service accounts, or revoke them',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rbac-policy add-role-to-user edit alice -n my-project
  rbac-policy add-role-to-user view -z deployer -n my-project
  rbac-policy remove-role-from-group admin developers -n my-project
  rbac-policy add-cluster-role-to-user cluster-reader bob --rolebinding-name readers
  rbac-policy generate-config --output ./config

Use --help with specific commands for detailed help.
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    for name, spec in COMMANDS.items():
        command_parser = subparsers.add_parser(
            name,
            parents=[common_parser, auth_parser, binding_parser],
            help=spec.help,
            description=spec.help,
        )
        if spec.subject_type == USER:
            command_parser.add_argument('users', nargs='*', metavar='USER', help='User names')
            command_parser.add_argument('-z', '--serviceaccount', dest='service_accounts', action='append',
                                        default=[], metavar='[NAMESPACE:]NAME',
                                        help='Service account; may be repeated')
        else:
            command_parser.add_argument('groups', nargs='+', metavar='GROUP', help='Group names')

        if spec.scope == ResourceScope.NAMESPACE:
            command_parser.add_argument('-n', '--namespace',
                                        help='Namespace of the role binding (default: current context namespace)')
            command_parser.add_argument('--role-namespace',
                                        help='Namespace of a namespaced Role to bind '
                                             '(default: bind the cluster role of that name)')
        else:
            command_parser.add_argument('-n', '--namespace',
                                        help='Default namespace for service accounts given without one')

    config_parser = subparsers.add_parser(
        GENERATE_CONFIG_COMMAND,
        parents=[common_parser],
        help='Generate a configuration file template',
        description='Write a commented rbac-policy.yaml template'
    )
    config_parser.add_argument('--output', help='Output directory (default: current directory)')

    return parser
