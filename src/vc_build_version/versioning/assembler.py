"""
Formatting of computed versions.

:func:`assemble_version` produces the plain ``major.minor.patch`` string.
:func:`format_full_version` decorates it with the optional hash, build
number, commits-since-main and working tree change suffixes used for
display builds, and :func:`mobile_build_numbers` renders the build
number for the platform build-number fields of mobile targets.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union


UNKNOWN_VERSION = "unknown"
NO_TAGS_HASH = "no tags"


class VersionStatus(str, Enum):
    """Outcome of a version computation."""

    OK = "ok"
    NO_VERSION_TAG = "no_version_tag"
    VCS_UNAVAILABLE = "vcs_unavailable"


class MobileTarget(str, Enum):
    """Platforms with a dedicated build-number field."""

    ANDROID = "android"
    IOS = "ios"
    TVOS = "tvos"


@dataclass(frozen=True)
class VersionResult:
    """A computed version.

    ``commits_on_main_to_branch``, ``commits_since_main`` and
    ``change_count`` are only filled in when they were requested, since
    each costs additional VCS queries.
    """

    major: int
    minor: int
    patch: int
    build_number: int
    hash: str
    tag: str = ""
    commits_since_tag: int = 0
    status: VersionStatus = VersionStatus.OK
    message: str = ""
    commits_on_main_to_branch: Optional[int] = None
    commits_since_main: Optional[int] = None
    change_count: Optional[int] = None

    @property
    def version(self) -> str:
        return assemble_version(self.major, self.minor, self.patch)

    @property
    def available(self) -> bool:
        """False when the VCS could not be queried at all."""
        return self.status is not VersionStatus.VCS_UNAVAILABLE

    @property
    def short_version(self) -> str:
        """The version string, or ``unknown`` when the VCS is unavailable."""
        return self.version if self.available else UNKNOWN_VERSION

    @property
    def branch_count(self) -> Optional[str]:
        """``{commits on main to branch}.{commits since main}`` if counted."""
        if self.commits_on_main_to_branch is None or self.commits_since_main is None:
            return None
        return f"{self.commits_on_main_to_branch}.{self.commits_since_main}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["version"] = self.short_version
        return data


def assemble_version(major: int, minor: int, patch: int) -> str:
    """Return ``"{major}.{minor}.{patch}"``."""
    return f"{major}.{minor}.{patch}"


def format_full_version(
    result: VersionResult,
    include_hash: bool = False,
    include_build_number: bool = False,
    commit_status: bool = False,
) -> str:
    """Return the version decorated with the selected suffixes.

    The suffixes are appended in this order:

    * `` {hash}`` when ``include_hash`` is set;
    * `` ({build_number})`` when ``include_build_number`` is set;
    * ``+{commits_since_main}`` when ``commit_status`` is set and the
      build number is not included;
    * ``&{change_count}`` (``&0`` for a clean tree) when ``commit_status``
      is set.
    """
    version = result.short_version
    if include_hash:
        version += f" {result.hash}"
    if include_build_number and result.available:
        version += f" ({result.build_number})"
    if commit_status and not include_build_number:
        version += f"+{result.commits_since_main or 0}"
    if commit_status:
        version += f"&{result.change_count or 0}"
    return version


def mobile_build_numbers(
    number: int, targets: Iterable[Union[MobileTarget, str]]
) -> Dict[MobileTarget, Union[int, str]]:
    """Render ``number`` for each mobile target's build-number field.

    Android version codes are integers; iOS and tvOS build numbers are
    strings.

    Raises
    ------
    ValueError
        If a target is not a known mobile platform.
    """
    fields: Dict[MobileTarget, Union[int, str]] = {}
    for target in targets:
        target = MobileTarget(target)
        fields[target] = number if target is MobileTarget.ANDROID else str(number)
    return fields
