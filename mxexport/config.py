"""
Configuration loader for the Mendix model export.

Provides a single configuration model covering:
- The Mendix apps to extract (name -> app id and branch)
- Token, results and output file locations
- Model repository connection settings

This module uses Pydantic for validation and supports:
- Loading from mxexport.yaml
- Falling back to defaults when no config file exists
- CLI argument overrides
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


# Default config file name
DEFAULT_CONFIG_FILE = "mxexport.yaml"

DEFAULT_BRANCH = "main"
DEFAULT_TOKEN_FILE = "config/token.txt"
DEFAULT_RESULTS_DIR = "results"
DEFAULT_OUTPUT_FILENAME = "mendix_model_export.xlsx"
DEFAULT_BASE_URL = "https://model.api.mendix.com/v1"


class ConfigurationError(Exception):
    """Raised when the export cannot start because of bad configuration."""


class ApplicationConfig(BaseModel):
    """Single Mendix app to extract."""

    app_id: str
    branch: str = DEFAULT_BRANCH


class PathsConfig(BaseModel):
    """File locations used by the export."""

    token_file: str = DEFAULT_TOKEN_FILE
    results_dir: str = DEFAULT_RESULTS_DIR
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    @property
    def output_path(self) -> Path:
        """Full path of the output workbook."""
        return Path(self.results_dir) / self.output_filename

    @property
    def json_output_path(self) -> Path:
        """Full path of the optional JSON export."""
        return self.output_path.with_suffix(".json")


class RepositoryConfig(BaseModel):
    """Model repository connection settings."""

    # "platform" talks to the Mendix model server, "local" reads JSON dumps
    type: str = "platform"
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 120
    # Directory of exported model JSON files, for the local type
    path: str | None = None


class ExportConfig(BaseModel):
    """Root configuration model for the model export."""

    applications: dict[str, ApplicationConfig] = Field(default_factory=dict)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ExportConfig":
        """Load configuration from YAML file.

        Duplicate application names in the file are not rejected: the YAML
        loader keeps the last entry.

        Args:
            path: Path to the YAML config file

        Returns:
            ExportConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except (yaml.YAMLError, ValidationError) as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportConfig":
        """Create config from dictionary."""
        return cls.model_validate(data)

    @classmethod
    def load(
        cls,
        config_path: Path | str | None = None,
        search_paths: list[Path | str] | None = None,
    ) -> "ExportConfig":
        """Load configuration with fallback search.

        Args:
            config_path: Explicit path to config file
            search_paths: List of directories to search for mxexport.yaml

        Returns:
            ExportConfig instance (defaults if no config found)
        """
        if config_path:
            return cls.from_yaml(config_path)

        if search_paths is None:
            search_paths = [Path.cwd()]

        for search_dir in search_paths:
            config_file = Path(search_dir) / DEFAULT_CONFIG_FILE
            if config_file.exists():
                return cls.from_yaml(config_file)

        return cls()

    def select_applications(self, names: list[str] | None) -> dict[str, ApplicationConfig]:
        """Restrict the configured applications to the given names.

        Args:
            names: Application names to keep, or None to keep all

        Returns:
            Applications in configuration order

        Raises:
            ConfigurationError: If a name is not configured
        """
        if not names:
            return dict(self.applications)

        unknown = [n for n in names if n not in self.applications]
        if unknown:
            raise ConfigurationError(
                f"Unknown application(s): {', '.join(unknown)}. "
                f"Configured: {', '.join(self.applications) or 'none'}"
            )

        wanted = set(names)
        return {
            name: app for name, app in self.applications.items() if name in wanted
        }


def load_config(config_path: Path | str | None = None) -> ExportConfig:
    """Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        ExportConfig instance
    """
    return ExportConfig.load(config_path)


def read_platform_token(token_file: Path | str) -> str:
    """Read the Mendix personal access token from a plain-text file.

    Args:
        token_file: Path to the token file

    Returns:
        The token with surrounding whitespace removed

    Raises:
        ConfigurationError: If the file is missing or empty
    """
    token_file = Path(token_file)
    if not token_file.exists():
        raise ConfigurationError(
            f"Token file not found at '{token_file}'. "
            "Please create the file and place your Mendix PAT inside."
        )

    token = token_file.read_text(encoding="utf-8").strip()
    if not token:
        raise ConfigurationError(
            f"Token file '{token_file}' is empty. "
            "Please paste your Mendix PAT into the file."
        )

    return token
