"""
Main Application

Wires authentication, configuration and the policy engine together and
dispatches the command line.
"""

import argparse
import logging
import sys
from typing import Callable, Iterable, List, Optional

from .cli_interface import COMMANDS, GENERATE_CONFIG_COMMAND, CommandSpec, create_argument_parser
from .core import ConfigManager, OpenShiftAuth, disable_ssl_warnings, setup_logging
from .core.constants import KubernetesConstants
from .core.exceptions import ConfigurationError, PolicyManagerError
from .core.protocols import AuthProvider, ConfigProvider, RoleBindingAccessor
from .core.utils import validate_namespace, validate_object_name
from .policy import (
    ClusterRoleBindingAccessor,
    LocalRoleBindingAccessor,
    ModificationAction,
    ModificationOutcome,
    ModificationRequest,
    ResourceScope,
    RoleModifier,
    Subject,
    build_subjects,
    format_subject,
)

logger = logging.getLogger(__name__)


def print_warning(message: str) -> None:
    """Default diagnostics sink: one line on stderr"""
    print(message, file=sys.stderr)


class PolicyManager:
    """Main application orchestrator for the RBAC Policy tool"""

    def __init__(
        self,
        auth_provider: Optional[AuthProvider] = None,
        config_provider: Optional[ConfigProvider] = None,
        warning_handler: Optional[Callable[[str], None]] = None,
        skip_tls: bool = False,
        debug: bool = False
    ):
        """
        Initialize RBAC Policy manager with dependency injection

        Args:
            auth_provider: Authentication provider (defaults to OpenShiftAuth)
            config_provider: Configuration provider (defaults to ConfigManager)
            warning_handler: Receives advisory warnings (defaults to stderr)
            skip_tls: Whether to skip TLS verification
            debug: Enable debug logging
        """
        self.skip_tls = skip_tls
        self.debug = debug

        setup_logging(debug)

        if skip_tls:
            disable_ssl_warnings()

        self.auth = auth_provider or OpenShiftAuth(skip_tls=skip_tls)
        self.config_manager = config_provider or ConfigManager()
        self.warning_handler = warning_handler or print_warning

    def configure_authentication(self, openshift_url: str = None, openshift_token: str = None) -> bool:
        """
        Configure authentication, falling back to the config file for URL and token

        Raises:
            AuthenticationError: If no usable credentials are found
        """
        openshift_url = openshift_url or self.config_manager.get_value('cluster.url')
        openshift_token = openshift_token or self.config_manager.get_value('cluster.token')
        return self.auth.configure_auth(openshift_url, openshift_token)

    def resolve_namespace(self, namespace: Optional[str] = None) -> str:
        """
        Pick the working namespace.

        Precedence: explicit value, config file, current context, 'default'.
        """
        namespace = (namespace
                     or self.config_manager.get_value('cluster.namespace')
                     or self.auth.get_context_namespace()
                     or KubernetesConstants.DEFAULT_NAMESPACE)
        validate_namespace(namespace)
        return namespace

    def create_accessor(self, scope: ResourceScope, namespace: Optional[str] = None,
                        role_namespace: Optional[str] = None) -> RoleBindingAccessor:
        """
        Build the binding accessor for a scope.

        Args:
            scope: Cluster or namespace scope
            namespace: Binding namespace (namespace scope only)
            role_namespace: Namespace of a referenced Role (namespace scope only)
        """
        rbac_api = self.auth.get_rbac_api()
        if scope == ResourceScope.CLUSTER:
            return ClusterRoleBindingAccessor(rbac_api)
        return LocalRoleBindingAccessor(namespace, rbac_api, role_namespace=role_namespace)

    def modify_role(self, accessor: RoleBindingAccessor, action: ModificationAction, role_name: str,
                    subjects: List[Subject], binding_name: Optional[str] = None) -> ModificationOutcome:
        """
        Grant or revoke a role through the given accessor.

        Raises:
            ConfigurationError: If the role or binding name is invalid
            StoreError: If the store rejects the change
        """
        validate_object_name(role_name)
        if binding_name:
            validate_object_name(binding_name)
        if not subjects:
            raise ConfigurationError("At least one subject is required")

        request = ModificationRequest(
            role_name=role_name,
            subjects=subjects,
            action=action,
            binding_name=binding_name,
        )
        logger.debug(f"{action.value} {role_name} for {', '.join(format_subject(s) for s in subjects)}")

        outcome = RoleModifier(accessor, warning_handler=self.warning_handler).modify(request)

        logger.info(
            f"{'Created' if outcome.created else 'Updated'} binding {outcome.binding_name} "
            f"with {len(outcome.subjects)} subject(s)")
        return outcome


def create_policy_manager(skip_tls: bool = False, debug: bool = False,
                          config_provider: Optional[ConfigProvider] = None) -> PolicyManager:
    """
    Factory function to create PolicyManager with default dependencies

    Args:
        skip_tls: Whether to skip TLS verification
        debug: Enable debug logging
        config_provider: Already loaded configuration (optional)

    Returns:
        PolicyManager: Configured PolicyManager instance
    """
    return PolicyManager(config_provider=config_provider, skip_tls=skip_tls, debug=debug)


def format_outcome_message(role_description: str, action: ModificationAction,
                           subjects: Iterable[Subject], outcome: ModificationOutcome) -> str:
    """Human readable summary, e.g. 'clusterrole.rbac.authorization.k8s.io/edit added: "alice"'"""
    verb = "added" if action == ModificationAction.ADD else "removed"
    names = ", ".join(f'"{format_subject(s)}"' for s in subjects)
    return f'{role_description} {verb}: {names} (binding "{outcome.binding_name}")'


def handle_modify_command(args: argparse.Namespace, policy_manager: PolicyManager) -> int:
    """
    Run one of the role modification subcommands

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    spec: CommandSpec = COMMANDS[args.command]

    try:
        policy_manager.configure_authentication(args.openshift_url, args.openshift_token)

        namespace = policy_manager.resolve_namespace(args.namespace)
        role_namespace = getattr(args, 'role_namespace', None)

        subjects = build_subjects(
            users=getattr(args, 'users', []),
            groups=getattr(args, 'groups', []),
            service_accounts=getattr(args, 'service_accounts', []),
            default_namespace=namespace,
        )

        accessor = policy_manager.create_accessor(spec.scope, namespace, role_namespace)
        outcome = policy_manager.modify_role(
            accessor, spec.action, args.role, subjects, binding_name=args.rolebinding_name)

        print(format_outcome_message(accessor.describe_role(args.role), spec.action, subjects, outcome))
        return 0

    except PolicyManagerError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def handle_generate_config_command(args: argparse.Namespace, policy_manager: PolicyManager) -> int:
    """Write the configuration template"""
    try:
        path = policy_manager.config_manager.generate_config_template(args.output)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Configuration template written to {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config_manager = ConfigManager(args.config)
    try:
        config_manager.load_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Command line flags win over the config file
    debug = args.debug if args.debug is not None else config_manager.get_value('global.debug', False)
    skip_tls = getattr(args, 'skip_tls', None)
    if skip_tls is None:
        skip_tls = config_manager.get_value('cluster.skip_tls', False)

    policy_manager = create_policy_manager(skip_tls=skip_tls, debug=debug, config_provider=config_manager)

    try:
        if args.command == GENERATE_CONFIG_COMMAND:
            return handle_generate_config_command(args, policy_manager)
        return handle_modify_command(args, policy_manager)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
