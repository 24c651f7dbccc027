"""
Configuration management for impsort.

Options are layered, lowest precedence first: built-in defaults, a YAML
config file, IMPSORT_* environment variables, then explicit overrides (CLI
flags). Config files may use snake_case keys or the camelCase names of the
Maven plugin (``staticGroups``, ``removeUnused``, ...).
"""

import codecs
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake

from .grouper import parse_groups
from .java_adapter import normalize_language_level
from .line_ending import LineEnding
from .settings import EnvSettings

logger = logging.getLogger(__name__)

CONFIG_NAMES = [".impsort.yml", ".impsort.yaml", "impsort.yml", "impsort.yaml"]

DEFAULT_DIRECTORIES = ["src/main/java", "src/test/java"]
DEFAULT_INCLUDES = ["**/*.java"]
CACHE_FILE_NAME = "impsort-cache.json"
DEFAULT_CACHE_DIR = "target"


class ImpSortConfig(BaseModel):
    """All options of a sort or check run."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Sorting
    source_encoding: str = "UTF-8"
    groups: str = "*"
    static_groups: str = "*"
    static_after: bool = False
    join_static_with_non_static: bool = False
    remove_unused: bool = False
    treat_same_package_as_unused: bool = True
    breadth_first_comparator: bool = True
    line_ending: LineEnding = LineEnding.AUTO
    compliance: Optional[str] = None

    # Driver
    skip: bool = False
    directories: List[str] = Field(default_factory=list)
    includes: List[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDES))
    excludes: List[str] = Field(default_factory=list)
    cache_dir: Optional[str] = DEFAULT_CACHE_DIR
    jobs: int = Field(default=0, ge=0)

    @field_validator("groups", "static_groups")
    @classmethod
    def _check_groups(cls, value: str) -> str:
        parse_groups(value)
        return value

    @field_validator("line_ending", mode="before")
    @classmethod
    def _parse_line_ending(cls, value: Any) -> LineEnding:
        line_ending = value if isinstance(value, LineEnding) else LineEnding.from_name(value)
        if line_ending is LineEnding.UNKNOWN:
            raise ValueError("UNKNOWN is not a configurable line ending")
        return line_ending

    @field_validator("source_encoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"Unknown source encoding '{value}'")
        return value

    @field_validator("compliance")
    @classmethod
    def _check_compliance(cls, value: Optional[str]) -> Optional[str]:
        normalize_language_level(value)
        return value

    @property
    def language_level(self) -> str:
        return normalize_language_level(self.compliance)

    @property
    def cache_file(self) -> Optional[str]:
        if not self.cache_dir:
            return None
        return os.path.join(self.cache_dir, CACHE_FILE_NAME)


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {to_snake(str(key)): value for key, value in data.items()}


def read_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """
    Read the raw options of a YAML config file.

    Returns an empty dict when there is no file or it cannot be read.
    """
    if not config_path or not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return {}
    if not isinstance(file_config, dict):
        logger.warning(f"Ignoring config {config_path}: expected a mapping")
        return {}
    return _normalize_keys(file_config)


def load_config(config_path: Optional[str] = None,
                overrides: Optional[Dict[str, Any]] = None,
                use_env: bool = True) -> ImpSortConfig:
    """
    Load configuration from file, environment and overrides.

    Args:
        config_path: Path to config file (YAML). If None, file options are skipped.
        overrides: Options taking precedence over everything else; None values are ignored
        use_env: Whether to apply IMPSORT_* environment variables

    Returns:
        ImpSortConfig instance

    Raises:
        pydantic.ValidationError: An option has an invalid value
    """
    merged: Dict[str, Any] = {}
    merged.update(read_config_file(config_path))
    if use_env:
        merged.update(EnvSettings().overrides())
    if overrides:
        merged.update({k: v for k, v in _normalize_keys(overrides).items() if v is not None})
    return ImpSortConfig.model_validate(merged)


def get_default_config() -> ImpSortConfig:
    """Get default configuration without loading from file or environment."""
    return load_config(None, use_env=False)


def save_config(config: ImpSortConfig, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        config: ImpSortConfig to save
        config_path: Path where to save the config
    """
    config_dict = config.model_dump(mode="json", by_alias=True)

    parent = os.path.dirname(config_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for files in this order:
    1. .impsort.yml
    2. .impsort.yaml
    3. impsort.yml
    4. impsort.yaml

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None
