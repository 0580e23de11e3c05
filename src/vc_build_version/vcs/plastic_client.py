"""
Plastic SCM client implementation for vc_build_version.

Plastic SCM is queried through its ``cm`` command line. There is no
equivalent of ``git describe``: version tags are commit comment lines
matching a configurable regular expression, and the commits since a
tag are the log entries above the first such line. Every changeset in
the log is followed by a ``Branch:`` line which the main/branch counting
style relies on.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import List, Optional, Sequence, Tuple

from vc_build_version.config.settings import DEFAULT_PLASTIC_VERSION_TAG_REGEX
from vc_build_version.parsing.describe_parser import (
    DescribeResult,
    find_plastic_version_tag,
    parse_plastic_changeset,
    parse_plastic_tag_line,
)

from .base import NoVersionTagFoundError, VcsError, VcsUnavailableError, VersionControlClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


LOG_FORMAT = (
    "Changeset {changesetid} created on {date};{tab}Comments: "
    "{newline}{comment}{newline}Branch: {branch}"
)
BRANCH_PREFIX = "Branch:"
UNKNOWN_CHANGESET = "unknown"


class PlasticError(VcsError):
    """Raised when a Plastic SCM command fails."""

    pass


def branch_name(path: str) -> str:
    """Return the last segment of a Plastic branch path (``/main/task-7`` gives ``task-7``)."""
    return path.strip().rstrip("/").rsplit("/", 1)[-1]


class PlasticClient(VersionControlClient):
    """Client for querying a Plastic SCM workspace."""

    executable = "cm"
    metadata_dir = ".plastic"
    error_class = PlasticError

    def __init__(
        self, repo_root, version_tag_regex: str = DEFAULT_PLASTIC_VERSION_TAG_REGEX
    ) -> None:
        super().__init__(repo_root)
        self.version_tag_regex = re.compile(version_tag_regex)

    def _is_unavailable(self, result: subprocess.CompletedProcess) -> bool:
        output = f"{result.stdout}\n{result.stderr}".lower()
        return "not in a workspace" in output or "is not a workspace" in output

    def commit_log(self) -> List[str]:
        try:
            return self.run_lines(["log", f"--csformat={LOG_FORMAT}"])
        except PlasticError as exc:
            raise VcsUnavailableError.from_error(
                f"Could not read the log of {self.repo_root}. Is this a Plastic workspace? ({exc})",
                exc,
            ) from exc

    def head_changeset(self) -> str:
        """Return the id of the changeset the workspace is on."""
        header = self.run(["status", "--header"])
        changeset = parse_plastic_changeset(header)
        if changeset is None:
            logger.warning("No changeset id in status header: %r", header)
            return UNKNOWN_CHANGESET
        return changeset

    def describe(self) -> DescribeResult:
        """Return the first version tag found scanning the log from HEAD."""
        lines = self.commit_log()
        index = find_plastic_version_tag(lines, self.version_tag_regex)
        if index is None:
            logger.warning(
                "No version tag matching '%s' found", self.version_tag_regex.pattern
            )
            raise NoVersionTagFoundError(
                f"No version tag matching '{self.version_tag_regex.pattern}' found"
            )
        try:
            changeset = self.head_changeset()
        except PlasticError as exc:
            raise VcsUnavailableError.from_error(f"Could not read workspace status: {exc}", exc) from exc
        return parse_plastic_tag_line(lines, index, changeset)

    def log_since(self, description: DescribeResult) -> List[str]:
        lines = self.commit_log()
        index = find_plastic_version_tag(lines, self.version_tag_regex)
        return lines if index is None else lines[:index]

    def count_main_and_branch(
        self, main_branch: str, lines: Optional[Sequence[str]] = None
    ) -> Tuple[int, int]:
        """Count changesets on ``main_branch`` and on other branches.

        Uses the ``Branch:`` line of every changeset in ``lines`` (default:
        the full log). A changeset is on main when the last segment of its
        branch path is the last segment of ``main_branch``, so
        ``/main/domain`` is not main.
        """
        if lines is None:
            lines = self.commit_log()
        main = branch_name(main_branch)
        branches = [
            branch_name(line[len(BRANCH_PREFIX):]) for line in lines if line.startswith(BRANCH_PREFIX)
        ]
        on_main = sum(1 for branch in branches if branch == main)
        return on_main, len(branches) - on_main

    def status_lines(self) -> List[str]:
        return self.run_lines(["status", "--short"])
