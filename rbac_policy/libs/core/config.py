"""
Configuration Management

Handles loading and validating configuration files for the RBAC Policy tool.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import ErrorMessages, FileConstants, KubernetesConstants
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and validation"""

    # Configuration schema - defines expected structure and types
    CONFIG_SCHEMA = {
        'cluster': {
            'type': dict,
            'required': False,
            'fields': {
                'url': {'type': str, 'required': False},
                'token': {'type': str, 'required': False},
                'skip_tls': {'type': bool, 'required': False},
                'namespace': {'type': str, 'required': False},
            }
        },
        'global': {
            'type': dict,
            'required': False,
            'fields': {
                'debug': {'type': bool, 'required': False},
            }
        },
    }

    def __init__(self, custom_config_path: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            custom_config_path: Explicit configuration file; when set, the
                default locations are not searched
        """
        self.custom_config_path = custom_config_path
        self.config_data: Dict[str, Any] = {}
        self.config_file_path: Optional[str] = None

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file

        Args:
            config_path: Path to configuration file (defaults to the path given
                at construction, then to the default search locations)

        Returns:
            Dict containing configuration data, empty when no file was found

        Raises:
            ConfigurationError: If an explicit file is missing or any file is invalid
        """
        explicit_path = config_path or self.custom_config_path
        if explicit_path:
            config_file = Path(os.path.expanduser(explicit_path))
            if not config_file.exists():
                raise ConfigurationError(
                    ErrorMessages.ConfigError.CONFIG_FILE_NOT_FOUND.format(config_path=explicit_path))
            if not config_file.is_file():
                raise ConfigurationError(f"Configuration path is not a file: {explicit_path}")
        else:
            config_file = self._find_default_config()
            if config_file is None:
                logger.debug("No configuration file found")
                return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {config_file}: {e}") from e

        self.config_data = data
        self.config_file_path = str(config_file)
        self._validate_config()

        logger.info(f"Loaded configuration from {config_file}")
        return self.config_data

    def _find_default_config(self) -> Optional[Path]:
        for location in FileConstants.DEFAULT_CONFIG_LOCATIONS:
            candidate = Path(os.path.expanduser(location))
            if candidate.is_file():
                return candidate
        return None

    def _validate_config(self) -> None:
        """
        Validate configuration structure and values

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(self.config_data, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        self._validate_against_schema(self.config_data, self.CONFIG_SCHEMA, "config")

    def _validate_against_schema(self, data: Dict[str, Any], schema: Dict[str, Any], path: str = "") -> None:
        """
        Validate data against schema definition

        Args:
            data: Data to validate
            schema: Schema definition
            path: Current path for error reporting

        Raises:
            ConfigurationError: If data doesn't match schema
        """
        for key, field_schema in schema.items():
            current_path = f"{path}.{key}" if path else key

            if key in data:
                value = data[key]

                # Skip None values for optional fields
                if value is None and not field_schema.get('required', False):
                    continue

                expected_type = field_schema['type']
                if not isinstance(value, expected_type):
                    raise ConfigurationError(f"{current_path} must be a {expected_type.__name__}")

                if expected_type == dict and 'fields' in field_schema:
                    self._validate_against_schema(value, field_schema['fields'], current_path)

            elif field_schema.get('required', False):
                raise ConfigurationError(f"Required field {current_path} is missing")

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key

        Args:
            key: Configuration key (supports dot notation like 'cluster.namespace')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config_data
        try:
            for k in key.split('.'):
                value = value[k]
        except (KeyError, TypeError):
            return default
        return default if value is None else value

    def get_config_template_content(self) -> str:
        """
        Generate configuration template content as string without file I/O

        Returns:
            str: YAML configuration template content
        """
        template = {
            "cluster": {
                "url": "https://api.cluster.example.com:6443",
                "token": "",
                "skip_tls": False,
                "namespace": KubernetesConstants.DEFAULT_NAMESPACE,
            },
            "global": {
                "debug": False,
            },
        }
        header = (
            "# RBAC Policy Configuration File\n"
            "# Values here are overridden by command line flags.\n"
            "# Leave url/token empty to use OPENSHIFT_URL/OPENSHIFT_TOKEN or the current kubeconfig.\n"
        )
        return header + yaml.safe_dump(template, default_flow_style=False, sort_keys=False)

    def generate_config_template(self, output_dir: Optional[str] = None) -> str:
        """
        Generate configuration template file

        Args:
            output_dir: Directory to save template (optional)

        Returns:
            str: Path to generated template file

        Raises:
            ConfigurationError: If template generation fails
        """
        if output_dir:
            output_path = Path(output_dir)
            config_file = output_path / FileConstants.DEFAULT_CONFIG_FILE
        else:
            output_path = None
            config_file = Path(FileConstants.DEFAULT_CONFIG_FILE)

        try:
            if output_path is not None:
                output_path.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w', encoding='utf-8') as f:
                f.write(self.get_config_template_content())
        except OSError as e:
            raise ConfigurationError(f"Failed to generate configuration template: {e}") from e

        logger.info(f"Configuration template generated: {config_file}")
        return str(config_file)
