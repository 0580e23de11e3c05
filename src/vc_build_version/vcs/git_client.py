"""
Git client implementation for vc_build_version.

This module wraps the Git queries required to derive a version: the
nearest version tag (``git describe``), the commit log, ancestry counts
relative to the main branch and the working tree status.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional, Sequence, Tuple

from vc_build_version.config.settings import DEFAULT_VERSION_TAG_PATTERN
from vc_build_version.parsing.describe_parser import DescribeResult, parse_git_describe

from .base import NoVersionTagFoundError, VcsError, VcsUnavailableError, VersionControlClient


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Exit status of ``git describe`` when no tag can describe HEAD.
NO_TAGS_EXIT_CODE = 128


class GitError(VcsError):
    """Raised when a Git command fails."""

    pass


def _has_no_commits(error: VcsError) -> bool:
    message = error.stderr.lower()
    return "does not have any commits" in message or "bad default revision" in message


class GitClient(VersionControlClient):
    """Client for querying a Git repository."""

    executable = "git"
    metadata_dir = ".git"
    error_class = GitError

    def __init__(self, repo_root, tag_pattern: str = DEFAULT_VERSION_TAG_PATTERN) -> None:
        super().__init__(repo_root)
        self.tag_pattern = tag_pattern

    def _is_unavailable(self, result: subprocess.CompletedProcess) -> bool:
        return "not a git repository" in result.stderr.lower()

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------
    def describe(self) -> DescribeResult:
        """Describe HEAD relative to the most recent matching version tag.

        Raises
        ------
        NoVersionTagFoundError
            If ``git describe`` exits with status 128 inside a repository.
        VcsUnavailableError
            If the directory is not a Git repository or ``git`` is missing.
        MalformedDescribeOutputError
            If the description cannot be parsed.
        """
        try:
            raw = self.run(["describe", "--tags", "--long", "--match", self.tag_pattern])
        except GitError as exc:
            if exc.exit_code == NO_TAGS_EXIT_CODE:
                logger.warning("No version tag matching '%s' found", self.tag_pattern)
                raise NoVersionTagFoundError.from_error(
                    f"No version tag matching '{self.tag_pattern}' found", exc
                ) from exc
            raise VcsUnavailableError.from_error(
                f"Could not describe {self.repo_root}. Is this a Git repository? ({exc})", exc
            ) from exc
        logger.debug("Git description: %s", raw)
        return parse_git_describe(raw)

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------
    def _log(self, args: List[str]) -> List[str]:
        try:
            return self.run_lines(["log"] + args)
        except GitError as exc:
            if _has_no_commits(exc):
                logger.debug("Repository has no commits yet")
                return []
            raise

    def commit_log(self) -> List[str]:
        return self._log([])

    def log_since(self, description: DescribeResult) -> List[str]:
        return self._log([f"{description.tag}..HEAD", "--"])

    # ------------------------------------------------------------------
    # Ancestry
    # ------------------------------------------------------------------
    def _count_revisions(self, revision: str) -> int:
        try:
            output = self.run(["rev-list", "--count", revision])
        except GitError as exc:
            logger.warning("Could not count commits for '%s': %s", revision, exc)
            return 0
        try:
            return int(output)
        except ValueError:
            logger.warning("Unexpected rev-list output for '%s': %r", revision, output)
            return 0

    def merge_base(self, main_branch: str) -> str:
        """Return the commit where HEAD forks from ``main_branch``."""
        return self.run(["merge-base", main_branch, "HEAD"])

    def count_main_and_branch(
        self, main_branch: str, lines: Optional[Sequence[str]] = None
    ) -> Tuple[int, int]:
        """Count commits on main up to the fork point and on HEAD since it.

        The counts come from the ancestry graph, so ``lines`` is ignored.
        Both counts fall back to 0 when the main branch cannot be
        resolved.
        """
        try:
            fork_point = self.merge_base(main_branch)
        except GitError as exc:
            logger.warning("Could not find where HEAD forks from '%s': %s", main_branch, exc)
            return 0, 0
        return (
            self._count_revisions(fork_point),
            self._count_revisions(f"{main_branch}..HEAD"),
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def status_lines(self) -> List[str]:
        return self.run_lines(["status", "--porcelain"])
