"""
The version data record handed to builds.

:class:`VersionData` is what a build embeds and displays: the version
string, the build number, the commit hash, a free-form *bonus* field with
optional branch and change counts, and a *debug* memo owned by the
caller. Updating the record from a :class:`VersionResult` never touches
the debug memo.

The record is stored as JSON wherever the caller chooses.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

from vc_build_version.config.settings import VersionConfig

from .assembler import VersionResult


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class VersionDataError(Exception):
    """Raised when a version data file cannot be read or written."""

    pass


@dataclass(frozen=True)
class VersionData:
    """Version information embedded in a build."""

    version: str = ""
    number: int = 0
    hash: str = ""
    bonus: str = ""
    debug: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_bonus(result: VersionResult, config: VersionConfig) -> str:
    """Return the bonus field for ``result``.

    ``Branch: {branch_count}+{changes}`` when both counts are enabled,
    ``Changes: {changes}`` or ``Branch: {branch_count}`` when only one is,
    and an empty string otherwise.
    """
    branch = result.branch_count or "0.0"
    changes = result.change_count or 0
    if config.include_branch_count and config.include_changes:
        return f"Branch: {branch}+{changes}"
    if config.include_changes:
        return f"Changes: {changes}"
    if config.include_branch_count:
        return f"Branch: {branch}"
    return ""


def update_version_data(
    data: VersionData, result: VersionResult, config: VersionConfig
) -> VersionData:
    """Return ``data`` refreshed from ``result``.

    The build number is kept when the VCS was unavailable; the debug
    memo is always kept.
    """
    number = result.build_number if result.available else data.number
    updated = dataclasses.replace(
        data,
        version=result.short_version,
        number=number,
        hash=result.hash,
        bonus=build_bonus(result, config),
    )
    logger.info("Filled version data: %s Build: %d", updated.version, updated.number)
    return updated


def clear_almost_all(data: VersionData) -> VersionData:
    """Reset every field except the debug memo."""
    return VersionData(debug=data.debug)


def set_debug(data: VersionData, memo: str = "") -> VersionData:
    """Set the debug memo; with no memo, mark the data as a debug build."""
    if not data.debug.strip() and not memo.strip():
        memo = "true"
    return dataclasses.replace(data, debug=memo)


def clear_debug(data: VersionData) -> VersionData:
    return dataclasses.replace(data, debug="")


def load_version_data(path: Path) -> VersionData:
    """Read a version data file; a missing file yields an empty record.

    Raises
    ------
    VersionDataError
        If the file cannot be parsed or has fields of the wrong type.
    """
    if not path.exists():
        logger.debug("No version data at %s", path)
        return VersionData()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read version data: %s", exc)
        raise VersionDataError(f"Invalid version data in {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise VersionDataError(f"Version data in {path.name} must be a JSON object")

    fields = {field.name: field for field in dataclasses.fields(VersionData)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in fields:
            logger.warning("Ignoring unknown version data field '%s'", key)
            continue
        expected = int if key == "number" else str
        if not isinstance(value, expected) or isinstance(value, bool):
            raise VersionDataError(f"'{key}' in {path.name} must be {expected.__name__}")
        values[key] = value
    return VersionData(**values)


def save_version_data(data: VersionData, path: Path) -> None:
    """Write ``data`` to ``path`` as JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write version data: %s", exc)
        raise VersionDataError(f"Could not write {path}: {exc}") from exc
    logger.debug("Saved version data to %s", path)
