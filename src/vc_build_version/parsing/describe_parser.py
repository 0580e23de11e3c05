"""
Parsing of version tag descriptions.

Git describes HEAD relative to the most recent matching tag as
``{tag}-{commits_since_tag}-{hash}`` (``git describe --long``). The tag
itself carries the version as ``v{major}[.{minor}]``, optionally preceded
by other characters (``release/v1.4``). Fields are extracted from the
right using the *last* occurrence of each separator, which keeps tags
containing dashes (``app-v2.0``) intact.

Plastic SCM has no describe command; version tags are commit log lines
matching a configurable regular expression, with the version after the
last colon (``version-tag: 1.4``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple, Union


_DIGITS = re.compile(r"[0-9]+")
_PLASTIC_CHANGESET = re.compile(r"cs:(\d+)")
PLASTIC_CHANGESET_HEADER = "Changeset "


class MalformedDescribeOutputError(Exception):
    """Raised when a describe string does not have the expected shape."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"Malformed describe output {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


@dataclass(frozen=True)
class DescribeResult:
    """The version tag nearest to HEAD and the distance from it.

    Attributes
    ----------
    tag : str
        The matched tag in its VCS-native form (e.g. ``v1.4``).
    major, minor : int
        Version numbers parsed from the tag; ``minor`` is 0 when the tag
        has no minor part.
    has_minor : bool
        False when the tag carried no ``.minor`` part.
    hash : str
        Short identifier of HEAD, or a sentinel such as ``no tags``.
    commits_since_tag : int
        Number of commits between the tag and HEAD.
    """

    tag: str
    major: int
    minor: int
    has_minor: bool
    hash: str
    commits_since_tag: int


def _to_int(text: str, raw: str, field: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise MalformedDescribeOutputError(raw, f"{field} {text!r} is not a number")
    return int(text)


def parse_version_tag(tag: str, raw: Optional[str] = None) -> Tuple[int, int, bool]:
    """Split a version tag into ``(major, minor, has_minor)``.

    Everything after the last ``v`` is the version. It is split at its
    last ``.``; a dot in the first position does not count as a
    separator.
    """
    raw = tag if raw is None else raw
    major_and_minor = tag[tag.rfind("v") + 1:]
    minor_dot = major_and_minor.rfind(".")
    if minor_dot > 0:
        major = _to_int(major_and_minor[:minor_dot], raw, "major version")
        minor = _to_int(major_and_minor[minor_dot + 1:], raw, "minor version")
        return major, minor, True
    return _to_int(major_and_minor, raw, "major version"), 0, False


def parse_git_describe(raw: str) -> DescribeResult:
    """Parse the output of ``git describe --tags --long``.

    Raises
    ------
    MalformedDescribeOutputError
        If the text is not ``{tag}-{count}-{hash}`` or the tag carries no
        numeric version.
    """
    description = raw.strip()

    hash_dash = description.rfind("-")
    if hash_dash < 0:
        raise MalformedDescribeOutputError(raw, "missing '-' before the commit hash")
    commit_hash = description[hash_dash + 1:]
    description = description[:hash_dash]
    if not commit_hash:
        raise MalformedDescribeOutputError(raw, "empty commit hash")

    commits_dash = description.rfind("-")
    if commits_dash < 0:
        raise MalformedDescribeOutputError(raw, "missing '-' before the commit count")
    commits = _to_int(description[commits_dash + 1:], raw, "commit count")
    tag = description[:commits_dash]
    if not tag:
        raise MalformedDescribeOutputError(raw, "empty tag")

    major, minor, has_minor = parse_version_tag(tag, raw)
    return DescribeResult(
        tag=tag,
        major=major,
        minor=minor,
        has_minor=has_minor,
        hash=commit_hash,
        commits_since_tag=commits,
    )


def find_plastic_version_tag(
    lines: Sequence[str], tag_regex: Union[str, Pattern[str]]
) -> Optional[int]:
    """Return the index of the first version tag line, scanning from HEAD."""
    pattern = re.compile(tag_regex) if isinstance(tag_regex, str) else tag_regex
    for index, line in enumerate(lines):
        if pattern.search(line):
            return index
    return None


def parse_plastic_tag_line(
    lines: Sequence[str], index: int, changeset: str
) -> DescribeResult:
    """Build a :class:`DescribeResult` from the tag line at ``index``.

    The version is the text after the last ``:`` of the tag line. Commits
    since the tag are the changeset headers above it in the log, except
    the nearest one, which belongs to the tagged changeset itself.
    """
    line = lines[index]
    version = line[line.rfind(":") + 1:].strip()
    major, minor, has_minor = parse_version_tag(version, line)
    headers = sum(1 for entry in lines[:index] if entry.startswith(PLASTIC_CHANGESET_HEADER))
    commits = max(headers - 1, 0)
    return DescribeResult(
        tag=line,
        major=major,
        minor=minor,
        has_minor=has_minor,
        hash=changeset,
        commits_since_tag=commits,
    )


def parse_plastic_changeset(status_header: str) -> Optional[str]:
    """Extract the changeset id from ``cm status --header`` output."""
    matches = _PLASTIC_CHANGESET.findall(status_header)
    return matches[-1] if matches else None
