"""
Configuration management for bibpath-mcp.

Handles:
- Config file loading from ~/.bibpath/config.yaml (or $BIBPATH_CONFIG)
- File directory lists used to resolve relative file links
- Auto-link matching options
- Environment variable reading
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from bibpath_mcp.conventions import PathConvention, convention_by_name


DEFAULT_EXTENSIONS = ["pdf", "ps", "djvu", "epub"]


class AutolinkConfig(BaseModel):
    """Options for associating loose files with entries."""
    exact_citation_key_match_only: bool = Field(
        default=False,
        description="Only link files whose name without extension equals the citation key. "
                    "When false, files whose name starts with the citation key are linked too."
    )
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))


class FileDirectoryConfig(BaseModel):
    """Directories searched when a file link is relative."""
    file_directories: list[str] = Field(default_factory=list)
    extension_directories: dict[str, list[str]] = Field(default_factory=dict)
    database_directory: Optional[str] = None


class PathConfig(BaseModel):
    """Path convention used for separators and case rules."""
    convention: Literal["native", "posix", "windows"] = "native"


class Config(BaseModel):
    """Main configuration model."""
    autolink: AutolinkConfig = Field(default_factory=AutolinkConfig)
    directories: FileDirectoryConfig = Field(default_factory=FileDirectoryConfig)
    paths: PathConfig = Field(default_factory=PathConfig)

    def path_convention(self) -> PathConvention:
        return convention_by_name(self.paths.convention)


class ConfigManager:
    """Manages configuration loading and access."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = config_path

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        if self._config_path is None:
            self._config_path = detect_config_path()
        return self._config_path

    def load(self) -> Config:
        """Load configuration from file, or return defaults."""
        if self._config is not None:
            return self._config

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
            self._config = Config(**data)
        else:
            self._config = Config()

        return self._config

    def save(self, config: Config) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

        self._config = config

    @property
    def config(self) -> Config:
        """Get the current configuration (loads if needed)."""
        return self.load()


def detect_config_path() -> Path:
    """
    Locate the config file.

    Checks the BIBPATH_CONFIG environment variable first and falls back to
    ~/.bibpath/config.yaml. The file does not need to exist.
    """
    env_path = get_env_var("BIBPATH_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".bibpath" / "config.yaml"


def get_env_var(name: str, required: bool = False) -> Optional[str]:
    """Get an environment variable, optionally raising if missing."""
    value = os.environ.get(name)
    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


# Global config manager instance
config_manager = ConfigManager()
