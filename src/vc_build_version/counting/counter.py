"""
Commit counting strategies.

Each :class:`~vc_build_version.config.settings.CountingStyle` has exactly
one implementation here. A strategy turns a sequence of commit log
lines, ordered from HEAD backwards, into a :class:`CommitCount`: a
number of minor increments and a patch count. The same count feeds both
outputs of the calculator:

* the bundle version uses ``minor`` as an increment to the tagged minor
  version and ``patch`` as the patch component;
* the build number is ``max_patches_per_minor * minor + patch`` plus the
  configured offset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import takewhile
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vc_build_version.config.settings import CountingStyle, VersionConfig

from .classifier import CommitCategory, classify_line, count_categories


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass(frozen=True)
class CommitCount:
    """Result of a counting strategy."""

    minor: int = 0
    patch: int = 0


# (commits on main up to the fork point, commits since the fork point)
BranchCounts = Tuple[int, int]


def lines_before_first_minor(lines: Sequence[str], config: VersionConfig) -> List[str]:
    """Return the lines more recent than the first minor line seen from HEAD.

    The scan runs in log order (HEAD first) and stops, exclusively, at
    the first line classified as minor.
    """
    return list(
        takewhile(lambda line: classify_line(line, config) is not CommitCategory.MINOR, lines)
    )


def _both_minor_and_patch(lines, config, branch_counts) -> CommitCount:
    return CommitCount(
        patch=count_categories(lines, config, (CommitCategory.MINOR, CommitCategory.PATCH))
    )


def _minor_then(lines, config, patch_categories) -> CommitCount:
    minor = count_categories(lines, config, (CommitCategory.MINOR,))
    recent = lines_before_first_minor(lines, config)
    return CommitCount(minor=minor, patch=count_categories(recent, config, patch_categories))


def _minor_then_patch(lines, config, branch_counts) -> CommitCount:
    return _minor_then(lines, config, (CommitCategory.PATCH,))


def _minor_then_patch_and_build(lines, config, branch_counts) -> CommitCount:
    return _minor_then(lines, config, (CommitCategory.PATCH, CommitCategory.BUILD))


def _patch_and_build(lines, config, branch_counts) -> CommitCount:
    return CommitCount(
        patch=count_categories(lines, config, (CommitCategory.PATCH, CommitCategory.BUILD))
    )


def _minor_and_patch_and_build(lines, config, branch_counts) -> CommitCount:
    categories = (CommitCategory.MINOR, CommitCategory.PATCH, CommitCategory.BUILD)
    return CommitCount(patch=count_categories(lines, config, categories))


def _main_and_branch(lines, config, branch_counts) -> CommitCount:
    if branch_counts is None:
        raise ValueError("main_and_branch counting requires branch counts")
    main_to_branch, since_fork = branch_counts
    return CommitCount(patch=config.branch_commit_limit * main_to_branch + since_fork)


_Strategy = Callable[[Sequence[str], VersionConfig, Optional[BranchCounts]], CommitCount]

_STRATEGIES: Dict[CountingStyle, _Strategy] = {
    CountingStyle.BOTH_MINOR_AND_PATCH: _both_minor_and_patch,
    CountingStyle.MINOR_THEN_PATCH: _minor_then_patch,
    CountingStyle.MAIN_AND_BRANCH: _main_and_branch,
    CountingStyle.PATCH_AND_BUILD: _patch_and_build,
    CountingStyle.MINOR_THEN_PATCH_AND_BUILD: _minor_then_patch_and_build,
    CountingStyle.MINOR_AND_PATCH_AND_BUILD: _minor_and_patch_and_build,
}


def count_commits(
    lines: Sequence[str],
    style: CountingStyle,
    config: VersionConfig,
    branch_counts: Optional[BranchCounts] = None,
) -> CommitCount:
    """Count ``lines`` with the strategy selected by ``style``.

    Parameters
    ----------
    lines : Sequence[str]
        Commit log lines ordered from HEAD backwards.
    style : CountingStyle
        The counting strategy.
    config : VersionConfig
        Supplies the tag sets and weights.
    branch_counts : Optional[BranchCounts]
        Required for :attr:`CountingStyle.MAIN_AND_BRANCH`.
    """
    lines = list(lines)
    count = _STRATEGIES[style](lines, config, branch_counts)
    logger.debug("Counted %d lines with %s: %s", len(lines), style.value, count)
    return count


def build_number(count: CommitCount, config: VersionConfig) -> int:
    """Combine a :class:`CommitCount` into an integer build number.

    The offset is always added after the strategy-specific count.
    """
    return config.max_patches_per_minor * count.minor + count.patch + config.number_offset
