"""
Classification of commit log lines into version bump categories.

A line belongs to a category when one of the category's tags is a
literal prefix of the stripped line. Matching is case-sensitive and
anchored at the start of the line; tags are never interpreted as
regular expressions, so a tag such as ``fix(ui)`` or ``c++`` matches
exactly those characters.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from vc_build_version.config.settings import VersionConfig


class CommitCategory(str, Enum):
    """Bucket a commit line is counted in."""

    MINOR = "minor"
    PATCH = "patch"
    BUILD = "build"
    NONE = "none"


def matches_any(line: str, tags: Iterable[str]) -> bool:
    """Return True if any of ``tags`` is a prefix of the stripped ``line``.

    Parameters
    ----------
    line : str
        A single line of commit log output.
    tags : Iterable[str]
        Prefix tags; an empty collection never matches.
    """
    prefixes = tuple(tag for tag in tags if tag)
    if not prefixes:
        return False
    return line.strip().startswith(prefixes)


def classify_line(line: str, config: VersionConfig) -> CommitCategory:
    """Classify ``line`` using the tag sets of ``config``.

    Minor tags take precedence over patch tags, which take precedence
    over build tags, so every line falls into exactly one category.
    """
    if matches_any(line, config.minor_tags):
        return CommitCategory.MINOR
    if matches_any(line, config.patch_tags):
        return CommitCategory.PATCH
    if matches_any(line, config.build_tags):
        return CommitCategory.BUILD
    return CommitCategory.NONE


def count_categories(
    lines: Iterable[str], config: VersionConfig, categories: Sequence[CommitCategory]
) -> int:
    """Count the lines whose category is one of ``categories``."""
    wanted = set(categories)
    return sum(1 for line in lines if classify_line(line, config) in wanted)
