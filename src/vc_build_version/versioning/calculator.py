"""
Version computation.

The :class:`VersionCalculator` ties the pieces together: it asks the VCS
client for the nearest version tag and the commit log, classifies and
counts the commits with the configured strategies, and assembles the
results.

Two numbers are derived from the log:

* the *bundle version* ``major.minor.patch``, counted over the commits
  since the version tag with ``bundle_version_style``;
* the *build number*, counted over the full commit log with
  ``commit_counting_style`` so that it keeps increasing across tags.

When the repository has no version tag the version is ``0.0.{patch}``:
every commit counts as unreleased and minor commits never raise the
minor version.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from vc_build_version.config.settings import CountingStyle, VersionConfig
from vc_build_version.counting.counter import BranchCounts, CommitCount, build_number, count_commits
from vc_build_version.parsing.describe_parser import DescribeResult
from vc_build_version.vcs.base import NoVersionTagFoundError, VcsUnavailableError, VersionControlClient

from .assembler import (
    NO_TAGS_HASH,
    VersionResult,
    VersionStatus,
    assemble_version,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


NO_TAGS_DESCRIPTION = DescribeResult(
    tag="", major=0, minor=0, has_minor=False, hash=NO_TAGS_HASH, commits_since_tag=0
)


class VersionCalculator:
    """Derive versions for one repository with one configuration.

    Parameters
    ----------
    config : VersionConfig
        Read-only settings for every computation of this calculator.
    client : VersionControlClient
        Client for the repository's version control system.
    """

    def __init__(self, config: VersionConfig, client: VersionControlClient) -> None:
        self.config = config
        self.client = client

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------
    def describe(self) -> Tuple[DescribeResult, List[str], VersionStatus]:
        """Return the nearest version tag and the log lines since it.

        A repository without version tags yields the ``0.0`` baseline
        with the full commit log as unreleased commits.
        """
        try:
            description = self.client.describe()
        except NoVersionTagFoundError:
            logger.warning("No version tag found; counting from 0.0")
            return NO_TAGS_DESCRIPTION, self.client.commit_log(), VersionStatus.NO_VERSION_TAG
        return description, self.client.log_since(description), VersionStatus.OK

    def branch_counts(self, lines: Optional[List[str]] = None) -> BranchCounts:
        """Return commits on main up to the fork point and commits since it.

        Log-based backends count within ``lines`` (default: the full log).
        """
        return self.client.count_main_and_branch(self.config.main_branch_name, lines)

    def _count(
        self, lines: List[str], style: CountingStyle, branch_counts: Optional[BranchCounts]
    ) -> CommitCount:
        if style is CountingStyle.MAIN_AND_BRANCH and branch_counts is None:
            branch_counts = self.branch_counts(lines)
        return count_commits(lines, style, self.config, branch_counts)

    def _bundle_count(self, lines: List[str], status: VersionStatus) -> CommitCount:
        count = self._count(lines, self.config.bundle_version_style, None)
        if status is VersionStatus.NO_VERSION_TAG:
            # Before the first tag the version stays 0.0.{patch}
            return CommitCount(minor=0, patch=count.patch)
        return count

    def bundle_version(self) -> str:
        """Return ``major.minor.patch`` for HEAD."""
        description, lines, status = self.describe()
        count = self._bundle_count(lines, status)
        return assemble_version(description.major, description.minor + count.minor, count.patch)

    def build_number(self) -> int:
        """Return the integer build number for HEAD."""
        count = self._count(self.client.commit_log(), self.config.commit_counting_style, None)
        return build_number(count, self.config)

    def branch_count(self) -> str:
        """Return ``{commits on main to branch}.{commits since main}``."""
        main_to_branch, since_main = self.branch_counts()
        return f"{main_to_branch}.{since_main}"

    def change_count(self) -> int:
        """Return the number of uncommitted changes in the working tree."""
        return self.client.change_count()

    # ------------------------------------------------------------------
    # Full computation
    # ------------------------------------------------------------------
    def compute(
        self,
        include_branch_count: Optional[bool] = None,
        include_changes: Optional[bool] = None,
    ) -> VersionResult:
        """Compute the complete :class:`VersionResult` for HEAD.

        ``include_branch_count`` and ``include_changes`` default to the
        configuration values. When the VCS cannot be queried the result
        carries the ``unknown`` sentinel instead of raising.

        Raises
        ------
        MalformedDescribeOutputError
            If the VCS describes HEAD in an unexpected format.
        """
        config = self.config
        if include_branch_count is None:
            include_branch_count = config.include_branch_count
        if include_changes is None:
            include_changes = config.include_changes

        try:
            description, lines, status = self.describe()
            full_log = self.client.commit_log()
            branch_counts: Optional[BranchCounts] = None
            if include_branch_count:
                branch_counts = self.branch_counts(full_log)

            bundle = self._bundle_count(lines, status)
            build = self._count(full_log, config.commit_counting_style, branch_counts)
            changes = self.change_count() if include_changes else None
        except VcsUnavailableError as exc:
            logger.warning("Version control unavailable: %s", exc)
            return VersionResult(
                major=0,
                minor=0,
                patch=0,
                build_number=0,
                hash=f"not {config.version_control_system.value}",
                status=VersionStatus.VCS_UNAVAILABLE,
                message=str(exc),
            )

        result = VersionResult(
            major=description.major,
            minor=description.minor + bundle.minor,
            patch=bundle.patch,
            build_number=build_number(build, config),
            hash=description.hash,
            tag=description.tag,
            commits_since_tag=description.commits_since_tag,
            status=status,
            commits_on_main_to_branch=branch_counts[0] if include_branch_count else None,
            commits_since_main=branch_counts[1] if include_branch_count else None,
            change_count=changes,
        )
        logger.info(
            "Computed version %s build %d (%s)",
            assemble_version(result.major, result.minor, result.patch),
            result.build_number,
            result.hash,
        )
        return result

