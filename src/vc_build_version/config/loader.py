"""
Configuration loader for vc_build_version.

The tool reads an optional JSON configuration file named
``.buildversion.json`` located in the repository root. A different file
can be supplied explicitly (``buildversion --config path``). When the
default file does not exist, the built-in defaults of
:class:`~vc_build_version.config.settings.VersionConfig` are used.

If an explicitly requested file is missing, or any file is malformed,
contains unknown keys, or has values of the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from .settings import CountingStyle, VersionConfig, VersionControl


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings when the root logger
# is not configured. The CLI configures logging explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".buildversion.json"

_E = TypeVar("_E", bound=Enum)


class ConfigError(Exception):
    """Raised when the versioning configuration is missing or invalid."""

    pass


class UnsupportedVcsKindError(ConfigError):
    """Raised when the configuration selects a VCS without an implementation."""

    def __init__(self, kind: object) -> None:
        supported = ", ".join(member.value for member in VersionControl)
        super().__init__(
            f"Unsupported version control system: {kind!r} (supported: {supported})"
        )
        self.kind = kind


def _get_config_path(repo_root: Path) -> Path:
    """Return the default configuration file path for ``repo_root``."""
    return repo_root / CONFIG_FILE_NAME


def _normalize_enum_name(name: str) -> str:
    return name.replace("_", "").replace("-", "").lower()


def parse_enum(enum_type: Type[_E], value: Any, key: str) -> _E:
    """Parse ``value`` into a member of ``enum_type``.

    Both the member value (``"minor_then_patch"``) and the CamelCase
    name used by older settings exports (``"MinorThenPatch"``) are
    accepted.
    """
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    wanted = _normalize_enum_name(value)
    for member in enum_type:
        if wanted in (_normalize_enum_name(member.value), _normalize_enum_name(member.name)):
            return member
    choices = ", ".join(member.value for member in enum_type)
    raise ConfigError(f"Invalid value for '{key}': {value!r} (expected one of: {choices})")


def parse_vcs_kind(value: Any) -> VersionControl:
    """Parse a VCS kind, raising :class:`UnsupportedVcsKindError` when unknown."""
    try:
        return parse_enum(VersionControl, value, "version_control_system")
    except ConfigError as exc:
        raise UnsupportedVcsKindError(value) from exc


def _parse_tags(value: Any, key: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    tags = tuple(tag.strip() for tag in value)
    if any(not tag for tag in tags):
        # An empty prefix would match every commit line.
        raise ConfigError(f"'{key}' must not contain empty tags")
    return tags


def _check_type(data: Dict[str, Any], key: str, expected: type, label: str) -> Any:
    value = data[key]
    # bool is a subclass of int; reject it for integer options
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"'{key}' must be {label}")
    if not isinstance(value, expected):
        raise ConfigError(f"'{key}' must be {label}")
    return value


_INT_KEYS = ("number_offset", "branch_commit_limit", "max_patches_per_minor")
_BOOL_KEYS = ("include_branch_count", "include_changes")
_STR_KEYS = ("main_branch_name", "version_tag_pattern", "plastic_version_tag_regex")
_TAG_KEYS = ("minor_tags", "patch_tags", "build_tags")
_STYLE_KEYS = ("commit_counting_style", "bundle_version_style")
_KNOWN_KEYS = frozenset(
    _INT_KEYS + _BOOL_KEYS + _STR_KEYS + _TAG_KEYS + _STYLE_KEYS + ("version_control_system",)
)


def config_from_dict(data: Dict[str, Any]) -> VersionConfig:
    """Validate a decoded configuration mapping and build a :class:`VersionConfig`.

    Keys that are absent keep their default value.

    Raises
    ------
    ConfigError
        If the mapping contains unknown keys or invalid values.
    UnsupportedVcsKindError
        If ``version_control_system`` names an unknown VCS.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.error("Configuration contains unknown keys: %s", unknown)
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in data:
            values[key] = _check_type(data, key, int, "an integer")
    for key in _BOOL_KEYS:
        if key in data:
            values[key] = _check_type(data, key, bool, "a boolean")
    for key in _STR_KEYS:
        if key in data:
            values[key] = _check_type(data, key, str, "a string")
    if "main_branch_name" in values and not values["main_branch_name"].strip():
        raise ConfigError("'main_branch_name' must not be empty")
    for key in _TAG_KEYS:
        if key in data:
            values[key] = _parse_tags(data[key], key)
    for key in _STYLE_KEYS:
        if key in data:
            values[key] = parse_enum(CountingStyle, data[key], key)
    if "version_control_system" in data:
        values["version_control_system"] = parse_vcs_kind(data["version_control_system"])

    return VersionConfig(**values)


def load_config(repo_root: Path, config_path: Optional[Path] = None) -> VersionConfig:
    """Load the versioning configuration for a repository.

    Args:
        repo_root: Repository root; the default file is looked up here.
        config_path: Explicit configuration file. When given it must exist.

    Returns:
        The validated :class:`VersionConfig`.

    Raises:
        ConfigError: If the file is missing (explicit path only), malformed,
            or invalid.
    """
    explicit = config_path is not None
    path = config_path if explicit else _get_config_path(repo_root)

    if not path.exists():
        if explicit:
            logger.error("Configuration file '%s' does not exist", path)
            raise ConfigError(f"Missing configuration file: {path}")
        logger.debug("No configuration file at %s; using defaults", path)
        return VersionConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc

    config = config_from_dict(data)
    logger.debug("Loaded versioning configuration from: %s", path)
    logger.debug("Configuration data: %s", config)
    return config
