"""Configuration management for eks-addons.

This module handles configuration loading from environment variables and .env files,
plus the optional YAML file holding per-addon settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from eksaddons.utils.errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigError,
)

VALID_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class AddonsConfig:
    """eks-addons configuration.

    Loads configuration from environment variables. Cluster access and the
    addons file given to the constructor (command line flags) take precedence
    over the environment.
    """

    # Cluster access
    kubeconfig: str | None = None
    context: str | None = None
    kubectl_timeout: int = 30

    # Addon settings
    addons_file: str | None = None
    addon_settings: dict[str, dict[str, Any]] = field(default_factory=dict)

    log_level: str = "info"

    def __post_init__(self):
        """Load configuration from environment variables after initialization."""
        # Load .env file if present
        load_dotenv()

        self.kubeconfig = self.kubeconfig or os.getenv("KUBECONFIG")
        self.context = self.context or os.getenv("EKSADDONS_CONTEXT")
        self.addons_file = self.addons_file or os.getenv("EKSADDONS_ADDONS_FILE")
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).lower()

        timeout = os.getenv("EKSADDONS_KUBECTL_TIMEOUT")
        if timeout is not None:
            try:
                self.kubectl_timeout = int(timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"EKSADDONS_KUBECTL_TIMEOUT must be an integer, got {timeout!r}"
                ) from e

        if self.addons_file and not self.addon_settings:
            self.addon_settings = load_addon_settings(Path(self.addons_file))

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        if self.kubectl_timeout <= 0:
            raise ConfigurationError(
                f"kubectl timeout must be positive, got {self.kubectl_timeout}"
            )

    def get_kubeconfig_path(self) -> Path | None:
        """Get kubeconfig file path, if one was configured.

        Returns:
            Path to kubeconfig file or None to let kubectl use its default
        """
        return Path(self.kubeconfig).expanduser() if self.kubeconfig else None


def load_addon_settings(filepath: Path) -> dict[str, dict[str, Any]]:
    """Load per-addon settings from a YAML file.

    The file maps addon names to setting dicts:

        kube-proxy:
          namespace: kube-system
          image_build: eksbuild.1

    Args:
        filepath: Path to YAML file

    Returns:
        Dict of addon name -> settings

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist
        InvalidConfigError: If the file is not valid YAML or has the wrong shape
    """
    if not filepath.exists():
        raise ConfigFileNotFoundError(f"Addon configuration file not found: {filepath}")

    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfigError(f"Invalid YAML in {filepath}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise InvalidConfigError(
            f"Addon configuration in {filepath} must be a mapping of addon name to settings"
        )

    settings: dict[str, dict[str, Any]] = {}
    for name, values in data.items():
        if values is None:
            values = {}
        if not isinstance(values, dict):
            raise InvalidConfigError(f"Settings for addon '{name}' in {filepath} must be a mapping")
        settings[str(name).lower().strip()] = values

    return settings
