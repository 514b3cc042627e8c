"""
Constants Module

Centralized constants for the RBAC Policy tool to eliminate magic strings
and improve maintainability.
"""

from enum import Enum, IntEnum


class KubernetesConstants:
    """Kubernetes-related constants"""

    DEFAULT_NAMESPACE = "default"
    RBAC_API_GROUP = "rbac.authorization.k8s.io"

    # Prefix used by the API server for service account user names
    SERVICE_ACCOUNT_USER_PREFIX = "system:serviceaccount:"

    # Maximum length of an RBAC object name
    MAX_NAME_LENGTH = 253

    class ResourceName(str, Enum):
        """RBAC resource names"""
        CLUSTER_ROLES = "clusterroles"
        CLUSTER_ROLE_BINDINGS = "clusterrolebindings"
        ROLES = "roles"
        ROLE_BINDINGS = "rolebindings"

    class SubjectKind(str, Enum):
        """Kinds of identity that can be bound to a role"""
        USER = "User"
        GROUP = "Group"
        SERVICE_ACCOUNT = "ServiceAccount"

        def __str__(self) -> str:
            return self.value

        @property
        def api_group(self) -> str:
            """API group carried by subjects of this kind ('' for service accounts)"""
            if self is KubernetesConstants.SubjectKind.SERVICE_ACCOUNT:
                return ""
            return KubernetesConstants.RBAC_API_GROUP

    class RoleKind(str, Enum):
        """Kinds of role a binding can reference"""
        CLUSTER_ROLE = "ClusterRole"
        ROLE = "Role"

        def __str__(self) -> str:
            return self.value

        @property
        def resource(self) -> str:
            """Fully qualified resource name used when printing role references"""
            return f"{self.value.lower()}.{KubernetesConstants.RBAC_API_GROUP}"


class APIConstants:
    """Constants for talking to the Kubernetes API server"""

    class HTTPStatus(IntEnum):
        """HTTP status codes the RBAC store reports"""
        UNAUTHORIZED = 401
        FORBIDDEN = 403
        NOT_FOUND = 404
        CONFLICT = 409


class ErrorMessages:
    """Centralized error message templates"""

    ROLE_NOT_FOUND_WARNING = "Warning: role '{role}' not found"

    class StoreError(str, Enum):
        """RBAC store error messages"""
        NOT_FOUND = "{resource} \"{name}\" not found"
        ALREADY_EXISTS = "{resource} \"{name}\" already exists"
        CONFLICT = (
            "{resource} \"{name}\" was modified concurrently; "
            "re-run the command to apply the change against the latest version"
        )
        UNAUTHORIZED = "Unauthorized (401). Verify that your token is valid and has not expired."
        FORBIDDEN = (
            "Forbidden (403). Your credentials are valid but lack permission to "
            "{operation} {resource}."
        )
        UNEXPECTED = "Failed to {operation} {resource} \"{name}\": {error}"

        def format(self, **kwargs) -> str:
            return self.value.format(**kwargs)

    class ConfigError(str, Enum):
        """Configuration error messages"""
        INVALID_NAMESPACE = "Invalid Kubernetes namespace format: {namespace}"
        INVALID_NAME = "Invalid Kubernetes object name: {name}"
        INVALID_OPENSHIFT_URL = "Invalid OpenShift URL format: {url}"
        CONFIG_FILE_NOT_FOUND = "Configuration file not found: {config_path}"
        ROLE_NAMESPACE_MISMATCH = (
            "Role namespace '{role_namespace}' must match the binding namespace "
            "'{namespace}'; a RoleBinding can only reference a Role in its own namespace"
        )

        def format(self, **kwargs) -> str:
            return self.value.format(**kwargs)

    class AuthError(str, Enum):
        """Authentication error messages"""
        NOT_CONFIGURED = "Authentication not configured. Configure authentication first."
        NO_CREDENTIALS = (
            "No cluster credentials found. Provide --openshift-url and --openshift-token, "
            "set OPENSHIFT_URL/OPENSHIFT_TOKEN, or log in so a kubeconfig is available."
        )
        SSL_CERT_VERIFICATION_FAILED = (
            "SSL certificate verification failed. Use --skip-tls to bypass "
            "verification for clusters with self-signed certificates."
        )

        def format(self, **kwargs) -> str:
            return self.value.format(**kwargs)


class FileConstants:
    """File and path constants"""

    DEFAULT_CONFIG_FILE = "rbac-policy.yaml"

    # Default configuration file locations, in order of precedence
    DEFAULT_CONFIG_LOCATIONS = [
        "rbac-policy.yaml",
        "~/.rbac-policy.yaml",
        "~/.config/rbac-policy.yaml",
    ]


class EnvironmentConstants:
    """Environment variables read through python-decouple"""

    OPENSHIFT_URL = "OPENSHIFT_URL"
    OPENSHIFT_TOKEN = "OPENSHIFT_TOKEN"
