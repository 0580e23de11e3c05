"""
Versioning settings for vc_build_version.

The :class:`VersionConfig` is an immutable record holding every option
that influences a version computation. It is built once per invocation
(see :mod:`vc_build_version.config.loader`) and passed explicitly to
the calculator; nothing in the package keeps a cached copy.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class VersionControl(str, Enum):
    """Version control systems the calculator can query."""

    GIT = "git"
    PLASTIC_SCM = "plastic_scm"


class CountingStyle(str, Enum):
    """How commits since a version tag are turned into numbers."""

    BOTH_MINOR_AND_PATCH = "both_minor_and_patch"
    MINOR_THEN_PATCH = "minor_then_patch"
    MAIN_AND_BRANCH = "main_and_branch"
    PATCH_AND_BUILD = "patch_and_build"
    MINOR_THEN_PATCH_AND_BUILD = "minor_then_patch_and_build"
    MINOR_AND_PATCH_AND_BUILD = "minor_and_patch_and_build"


DEFAULT_VERSION_TAG_PATTERN = "*v[0-9]*"
DEFAULT_PLASTIC_VERSION_TAG_REGEX = r"^version-tag:"


@dataclass(frozen=True)
class VersionConfig:
    """Options for a single version computation.

    Attributes
    ----------
    version_control_system : VersionControl
        Which VCS backend is queried.
    main_branch_name : str
        Name of the trunk branch used by the main/branch counting style.
    number_offset : int
        Added to every build number after the style-specific count.
    branch_commit_limit : int
        Weight of one main-branch commit in the main/branch style.
    max_patches_per_minor : int
        Weight of one minor commit when a style yields a minor count.
    minor_tags, patch_tags, build_tags : Tuple[str, ...]
        Commit message prefixes for each category, in matching order.
    commit_counting_style : CountingStyle
        Style used for the integer build number.
    bundle_version_style : CountingStyle
        Style used for the patch part of the ``major.minor.patch`` string.
    include_branch_count : bool
        Add the main/branch commit counts to the version data bonus field.
    include_changes : bool
        Add the working tree change count to the version data bonus field.
    version_tag_pattern : str
        Glob passed to ``git describe --match``.
    plastic_version_tag_regex : str
        Regular expression identifying version tag lines in a Plastic log.
    """

    version_control_system: VersionControl = VersionControl.GIT
    main_branch_name: str = "main"
    number_offset: int = 0
    branch_commit_limit: int = 100
    max_patches_per_minor: int = 20
    minor_tags: Tuple[str, ...] = ("feat",)
    patch_tags: Tuple[str, ...] = ("fix", "asset", "adjust")
    build_tags: Tuple[str, ...] = ("build", "chore")
    commit_counting_style: CountingStyle = CountingStyle.BOTH_MINOR_AND_PATCH
    bundle_version_style: CountingStyle = CountingStyle.MINOR_THEN_PATCH
    include_branch_count: bool = False
    include_changes: bool = False
    version_tag_pattern: str = DEFAULT_VERSION_TAG_PATTERN
    plastic_version_tag_regex: str = DEFAULT_PLASTIC_VERSION_TAG_REGEX

    def replace(self, **overrides) -> "VersionConfig":
        """Return a copy of this configuration with ``overrides`` applied."""
        return dataclasses.replace(self, **overrides)
