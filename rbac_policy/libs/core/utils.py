"""
Core Utilities

Common utility functions used across the RBAC Policy tool.
"""

import logging
import re
from typing import Type
from urllib.parse import urlparse

import urllib3
from kubernetes.client.rest import ApiException

from .constants import APIConstants, ErrorMessages, KubernetesConstants
from .exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    PolicyManagerError,
    StoreError,
)

HTTPStatus = APIConstants.HTTPStatus


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the application.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(console_handler)

    # Reduce noise from urllib3 when using insecure connections
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    if debug:
        logging.getLogger(__name__).debug("Debug mode enabled")


def disable_ssl_warnings() -> None:
    """Disable SSL warnings when --skip-tls is used"""
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def mask_sensitive_info(text: str, url: str = None, token: str = None) -> str:
    """
    Mask sensitive information in text for logging and debug output.

    Args:
        text: Text to mask
        url: URL to mask (optional)
        token: Token to mask (optional)

    Returns:
        Text with sensitive information masked
    """
    if not text:
        return text

    masked_text = text

    if token and token in masked_text:
        # Keep the token type prefix (e.g. "sha256~") visible
        if '~' in token:
            masked_token = token.split('~')[0] + '~***MASKED***'
        else:
            masked_token = "***MASKED***"
        masked_text = masked_text.replace(token, masked_token)

    if url and url in masked_text:
        parsed = urlparse(url)
        if parsed.hostname:
            hostname_parts = parsed.hostname.split('.')
            if len(hostname_parts) >= 3:
                # api.cluster.example.com -> api.****.com
                masked_hostname = f"{hostname_parts[0][:3]}.****.{hostname_parts[-1]}"
            elif len(hostname_parts) == 2:
                masked_hostname = f"****.{hostname_parts[-1]}"
            else:
                masked_hostname = "****"
            masked_text = masked_text.replace(url, f"{parsed.scheme}://{masked_hostname}:***")
        else:
            masked_text = masked_text.replace(url, "https://****:***")

    masked_text = re.sub(r'Bearer [A-Za-z0-9+/=_~-]+', 'Bearer ***MASKED***', masked_text)
    masked_text = re.sub(r'sha256~[A-Za-z0-9_-]+', 'sha256~***MASKED***', masked_text)

    return masked_text


def validate_namespace(namespace: str) -> bool:
    """
    Validate if the provided string is a valid Kubernetes namespace.

    Args:
        namespace: Kubernetes namespace to validate

    Returns:
        bool: True if valid namespace

    Raises:
        ConfigurationError: If namespace is invalid
    """
    if not namespace or not isinstance(namespace, str):
        raise ConfigurationError("Namespace cannot be empty")

    # Lowercase alphanumeric with hyphens, max 63 chars
    if not re.match(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?$', namespace) or len(namespace) > 63:
        raise ConfigurationError(ErrorMessages.ConfigError.INVALID_NAMESPACE.format(namespace=namespace))

    return True


def validate_object_name(name: str) -> bool:
    """
    Validate a role or role binding name.

    RBAC object names are path segments, so they may contain ':' (as in
    'system:admin') but never '/' or '%' and never be '.' or '..'.

    Raises:
        ConfigurationError: If the name cannot be used as an RBAC object name
    """
    if not name or not isinstance(name, str):
        raise ConfigurationError("Name cannot be empty")

    if (name in ('.', '..') or '/' in name or '%' in name
            or len(name) > KubernetesConstants.MAX_NAME_LENGTH):
        raise ConfigurationError(ErrorMessages.ConfigError.INVALID_NAME.format(name=name))

    return True


def validate_openshift_url(url: str) -> bool:
    """
    Validate if the provided string is a valid OpenShift API URL.

    Args:
        url: OpenShift API URL to validate

    Returns:
        bool: True if valid URL

    Raises:
        ConfigurationError: If URL is invalid
    """
    if not url or not isinstance(url, str):
        raise ConfigurationError("OpenShift URL cannot be empty")

    if not re.match(r'^https?:\/\/[a-zA-Z0-9.-]+(?:\:[0-9]+)?(?:\/.*)?$', url):
        raise ConfigurationError(ErrorMessages.ConfigError.INVALID_OPENSHIFT_URL.format(url=url))

    return True


def handle_ssl_error(error: Exception, exception_class: Type[PolicyManagerError] = AuthenticationError) -> None:
    """
    Centralized SSL error handling with user-friendly messages

    Args:
        error: The caught exception
        exception_class: The specific exception class to raise

    Raises:
        PolicyManagerError: Appropriate error type with user-friendly message
    """
    error_str = str(error)

    if "certificate verify failed" in error_str or "CERTIFICATE_VERIFY_FAILED" in error_str:
        raise exception_class(ErrorMessages.AuthError.SSL_CERT_VERIFICATION_FAILED.value) from error
    raise exception_class(f"Connection error: {error}") from error


def translate_api_error(error: ApiException, operation: str, resource: str, name: str = "") -> StoreError:
    """
    Translate a Kubernetes ApiException into the tool's store error taxonomy.

    A 409 answer means AlreadyExists for create calls and a stale resource
    version for everything else.

    Args:
        error: Exception raised by the Kubernetes client
        operation: Verb being performed ('get', 'list', 'create', 'update')
        resource: Resource kind, e.g. 'clusterrolebindings'
        name: Object name, empty for list calls

    Returns:
        StoreError subclass instance for the caller to raise
    """
    status = error.status
    reason = error.reason

    if status == HTTPStatus.NOT_FOUND:
        return NotFoundError(
            ErrorMessages.StoreError.NOT_FOUND.format(resource=resource, name=name),
            status=status, reason=reason)

    if status == HTTPStatus.CONFLICT:
        if operation == "create":
            return AlreadyExistsError(
                ErrorMessages.StoreError.ALREADY_EXISTS.format(resource=resource, name=name),
                status=status, reason=reason)
        return ConflictError(
            ErrorMessages.StoreError.CONFLICT.format(resource=resource, name=name),
            status=status, reason=reason)

    if status == HTTPStatus.UNAUTHORIZED:
        return StoreError(ErrorMessages.StoreError.UNAUTHORIZED.value, status=status, reason=reason)

    if status == HTTPStatus.FORBIDDEN:
        return StoreError(
            ErrorMessages.StoreError.FORBIDDEN.format(operation=operation, resource=resource),
            status=status, reason=reason)

    return StoreError(
        ErrorMessages.StoreError.UNEXPECTED.format(
            operation=operation, resource=resource, name=name, error=reason or error),
        status=status, reason=reason)
