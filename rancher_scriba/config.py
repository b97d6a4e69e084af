"""
Configuration management for Rancher Scriba.

This module handles loading and accessing configuration values from config.yaml.
Values that are normally injected by the deployment (server URL, API token) can
be overridden through environment variables, which always take precedence.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import logging

from .errors import ConfigurationError


# Environment variable -> dot-notation config key
ENVIRONMENT_OVERRIDES = {
    "RANCHER_SERVER_URL": "rancher.server_url",
    "RANCHER_TOKEN_KEY": "rancher.token",
    "RANCHER_VERIFY_TLS": "rancher.verify_tls",
    "SCRIBA_DOCUMENT_NAME": "document.name",
    "SCRIBA_DOCUMENT_NAMESPACE": "document.namespace",
}

_FALSE_STRINGS = {"0", "false", "no", "off"}


class ConfigManager:
    """
    Manages configuration loading and access for Rancher Scriba.
    """

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file (defaults to $SCRIBA_CONFIG or config.yaml)
            environ: Environment mapping used for overrides (defaults to os.environ)
        """
        self._environ = os.environ if environ is None else environ
        self.config_path = Path(config_path or self._environ.get("SCRIBA_CONFIG", "config.yaml"))
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file and apply environment overrides."""
        if not self.config_path.exists():
            logging.info(f"Configuration file not found: {self.config_path}, using defaults")
            self._config = self._get_default_config()
        else:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}

                if not isinstance(self._config, dict):
                    raise ValueError("top level must be a mapping")

                logging.info(f"Configuration loaded from {self.config_path}")

            except (OSError, ValueError, yaml.YAMLError) as e:
                logging.error(f"Failed to load configuration: {e}")
                # Fall back to default configuration
                self._config = self._get_default_config()

        self._apply_environment()

    def _apply_environment(self) -> None:
        """Overlay environment variables onto the loaded configuration."""
        for variable, key_path in ENVIRONMENT_OVERRIDES.items():
            value = self._environ.get(variable)
            if value is None or value == "":
                continue
            self._set(key_path, value)

    def _set(self, key_path: str, value: Any) -> None:
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "rancher": {
                "server_url": "",
                "api_path": "/v3",
                "token": None,
                "verify_tls": True,
                "timeout": 30.0,
                "cluster_type": "cluster"
            },
            "retry": {
                "max_retries": 5
            },
            "document": {
                "name": "rancher-data",
                "namespace": "kube-system",
                "retry_upsert": False
            },
            "kubernetes": {
                "in_cluster": True,
                "kubeconfig": None
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "paths": {
                "log_file": None
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "rancher.server_url")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("document.name")  # Returns "rancher-data"
            config.get("retry.max_retries")  # Returns 5
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def validate(self) -> None:
        """
        Check that the settings required for a collection pass are present.

        Raises:
            ConfigurationError: If the server URL or token is missing, or a numeric setting is invalid
        """
        missing = []
        if not self.server_url:
            missing.append("rancher.server_url (RANCHER_SERVER_URL)")
        if not self.token:
            missing.append("rancher.token (RANCHER_TOKEN_KEY)")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
        if self.max_retries < 0:
            raise ConfigurationError(f"retry.max_retries must not be negative, got {self.max_retries}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"rancher.timeout must be positive, got {self.request_timeout}")

    def _get_number(self, key_path: str, default: Any, convert: Callable[[Any], Any]) -> Any:
        value = self.get(key_path, default)
        if isinstance(value, bool):
            raise ConfigurationError(f"{key_path} must be a number, got {value!r}")
        try:
            return convert(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key_path} must be a number, got {value!r}") from e

    # Convenience properties for commonly used values

    @property
    def server_url(self) -> str:
        """Get the Rancher server URL."""
        return (self.get("rancher.server_url") or "").rstrip('/')

    @property
    def api_base_url(self) -> str:
        """Get the Rancher API base URL (server URL plus API path)."""
        api_path = self.get("rancher.api_path", "/v3") or ""
        if api_path and not api_path.startswith('/'):
            api_path = '/' + api_path
        return self.server_url + api_path.rstrip('/')

    @property
    def token(self) -> Optional[str]:
        """Get the Rancher API bearer token."""
        return self.get("rancher.token")

    @property
    def verify_tls(self) -> bool:
        """Whether TLS certificates of the Rancher API are verified."""
        value = self.get("rancher.verify_tls", True)
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        return bool(value)

    @property
    def request_timeout(self) -> float:
        """Get the per-request HTTP timeout."""
        return self._get_number("rancher.timeout", 30.0, float)

    @property
    def cluster_type(self) -> str:
        """Get the type discriminator of genuine clusters."""
        return self.get("rancher.cluster_type", "cluster")

    @property
    def max_retries(self) -> int:
        """Get the number of retries after the first attempt."""
        return self._get_number("retry.max_retries", 5, int)

    @property
    def document_name(self) -> str:
        """Get the target document name."""
        return self.get("document.name", "rancher-data")

    @property
    def document_namespace(self) -> str:
        """Get the target document namespace."""
        return self.get("document.namespace", "kube-system")

    @property
    def retry_upsert(self) -> bool:
        """Whether the document upsert is wrapped in the backoff retrier."""
        return bool(self.get("document.retry_upsert", False))

    @property
    def in_cluster(self) -> bool:
        """Whether to use the in-cluster service account for the Kubernetes API."""
        return bool(self.get("kubernetes.in_cluster", True))

    @property
    def kubeconfig(self) -> Optional[str]:
        """Get the kubeconfig path for out-of-cluster use."""
        return self.get("kubernetes.kubeconfig")

    @property
    def log_filename(self) -> Optional[str]:
        """Get log file name."""
        return self.get("paths.log_file")
