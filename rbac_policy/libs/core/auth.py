"""
Authentication Module

Handles OpenShift/Kubernetes authentication and context discovery.
"""

import logging
import os
from typing import Optional

from decouple import UndefinedValueError
from decouple import config as env_config
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from .constants import EnvironmentConstants, ErrorMessages
from .exceptions import AuthenticationError, ConfigurationError
from .utils import disable_ssl_warnings, handle_ssl_error, mask_sensitive_info, validate_openshift_url

logger = logging.getLogger(__name__)

IN_CLUSTER_NAMESPACE_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/namespace'


class OpenShiftAuth:
    """Handles cluster authentication and context discovery"""

    def __init__(self, skip_tls: bool = False):
        """
        Initialize authentication handler

        Args:
            skip_tls: Whether to skip TLS verification for API requests
        """
        self.skip_tls = skip_tls
        self.openshift_url: Optional[str] = None
        self.openshift_token: Optional[str] = None
        self.context_namespace: Optional[str] = None
        self.k8s_client: Optional[client.ApiClient] = None
        self.rbac_api: Optional[client.RbacAuthorizationV1Api] = None

    def configure_auth(self, openshift_url: str = None, openshift_token: str = None) -> bool:
        """
        Configure authentication with provided URL and token, or discover from context

        Explicit arguments win over OPENSHIFT_URL/OPENSHIFT_TOKEN from the
        environment, which win over kubeconfig and in-cluster configuration.

        Args:
            openshift_url: Cluster API URL (optional)
            openshift_token: Bearer token (optional)

        Returns:
            bool: True if authentication was configured successfully

        Raises:
            AuthenticationError: If authentication configuration fails
            ConfigurationError: If provided parameters are invalid
        """
        openshift_url = openshift_url or self._read_env(EnvironmentConstants.OPENSHIFT_URL)
        openshift_token = openshift_token or self._read_env(EnvironmentConstants.OPENSHIFT_TOKEN)

        try:
            if openshift_url and openshift_token:
                validate_openshift_url(openshift_url)
                logger.info("Using provided OpenShift URL and token for authentication")
                self.openshift_url = openshift_url
                self.openshift_token = openshift_token
                return self._configure_client_with_token()

            return self._discover_from_context()

        except (ConfigurationError, AuthenticationError):
            raise
        except Exception as e:
            raise AuthenticationError(f"Failed to configure authentication: {e}") from e

    @staticmethod
    def _read_env(name: str) -> Optional[str]:
        try:
            return env_config(name)
        except UndefinedValueError:
            return None

    def _configure_client_with_token(self) -> bool:
        """
        Configure Kubernetes client using URL and token

        Raises:
            AuthenticationError: If client configuration fails
        """
        try:
            configuration = client.Configuration()
            configuration.host = self.openshift_url
            configuration.api_key = {"authorization": self.openshift_token}
            configuration.api_key_prefix = {"authorization": "Bearer"}

            if self.skip_tls:
                configuration.verify_ssl = False
                configuration.ssl_ca_cert = None
                disable_ssl_warnings()

            self.k8s_client = client.ApiClient(configuration)
            self.rbac_api = client.RbacAuthorizationV1Api(self.k8s_client)

            masked_url = mask_sensitive_info(self.openshift_url, self.openshift_url)
            logger.info(f"Successfully configured Kubernetes client for {masked_url}")
            return True

        except Exception as e:
            handle_ssl_error(e, AuthenticationError)

    def _discover_from_context(self) -> bool:
        """
        Discover authentication from kubeconfig or in-cluster config

        Raises:
            AuthenticationError: If neither source is usable
        """
        try:
            config.load_kube_config()
            logger.info("Successfully loaded kubeconfig")

            _, active_context = config.list_kube_config_contexts()
            if active_context:
                self.context_namespace = active_context.get('context', {}).get('namespace')

        except (ConfigException, OSError) as kubeconfig_error:
            logger.debug(f"Failed to load kubeconfig: {kubeconfig_error}")

            try:
                config.load_incluster_config()
                logger.info("Successfully loaded in-cluster config")
            except ConfigException as incluster_error:
                logger.debug(f"Failed to load in-cluster config: {incluster_error}")
                raise AuthenticationError(ErrorMessages.AuthError.NO_CREDENTIALS.value) from incluster_error

            if os.path.exists(IN_CLUSTER_NAMESPACE_PATH):
                with open(IN_CLUSTER_NAMESPACE_PATH, 'r') as f:
                    self.context_namespace = f.read().strip() or None

        # TLS settings must be in place before the ApiClient builds its pool
        configuration = client.Configuration.get_default_copy()
        if self.skip_tls:
            configuration.verify_ssl = False
            configuration.ssl_ca_cert = None
            disable_ssl_warnings()

        self.k8s_client = client.ApiClient(configuration)
        self.openshift_url = configuration.host
        self.rbac_api = client.RbacAuthorizationV1Api(self.k8s_client)

        logger.info("Successfully discovered authentication from context")
        return True

    def is_authenticated(self) -> bool:
        """Check if authentication is properly configured"""
        return self.rbac_api is not None

    def get_rbac_api(self) -> client.RbacAuthorizationV1Api:
        """
        Get the authenticated RBAC API client

        Raises:
            AuthenticationError: If authentication has not been configured
        """
        if not self.is_authenticated():
            raise AuthenticationError(ErrorMessages.AuthError.NOT_CONFIGURED.value)
        return self.rbac_api

    def get_context_namespace(self) -> Optional[str]:
        """Namespace of the active kubeconfig context, if any"""
        return self.context_namespace
