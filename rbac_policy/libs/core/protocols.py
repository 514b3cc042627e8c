"""
Protocols Module

Structural interfaces for the pluggable parts of the RBAC Policy tool.
The orchestrator and resolver depend only on these, so cluster and
namespace scope (or test doubles) can be swapped freely.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from kubernetes import client

if TYPE_CHECKING:
    from ..policy.models import RoleBinding


class RoleBindingAccessor(Protocol):
    """Scope-specific access to role bindings and the roles they reference"""

    def list_bindings_referencing_role(self, role_name: str) -> List["RoleBinding"]:
        """All bindings in scope that grant the named role"""
        ...

    def get_binding(self, name: str) -> "RoleBinding":
        """Fetch a binding; raises NotFoundError when absent"""
        ...

    def create_binding(self, binding: "RoleBinding") -> "RoleBinding":
        """Persist a new binding; raises AlreadyExistsError on a name collision"""
        ...

    def update_binding(self, binding: "RoleBinding") -> "RoleBinding":
        """Replace a binding; raises ConflictError when its version is stale"""
        ...

    def role_exists(self, role_name: str) -> bool:
        """Whether the role a new binding would reference exists"""
        ...

    def new_binding(self, name: str, role_name: str) -> "RoleBinding":
        """Build an unsaved, empty binding in this accessor's scope"""
        ...

    def describe_role(self, role_name: str) -> str:
        """Printable role reference, e.g. 'clusterrole.rbac.authorization.k8s.io/edit'"""
        ...


class AuthProvider(Protocol):
    """Source of an authenticated RBAC API client"""

    def configure_auth(self, openshift_url: str = None, openshift_token: str = None) -> bool:
        ...

    def get_rbac_api(self) -> client.RbacAuthorizationV1Api:
        ...

    def get_context_namespace(self) -> Optional[str]:
        ...


class ConfigProvider(Protocol):
    """Source of file-based configuration"""

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        ...

    def get_value(self, key: str, default: Any = None) -> Any:
        ...

    def generate_config_template(self, output_dir: Optional[str] = None) -> str:
        ...
