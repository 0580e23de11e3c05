"""
Commit classification and counting.

This package classifies commit log lines into minor, patch and build
categories and turns them into version numbers with one of several
counting strategies. See :mod:`vc_build_version.counting.classifier`
and :mod:`vc_build_version.counting.counter` for details.
"""

from .classifier import CommitCategory, classify_line, matches_any  # noqa: F401
from .counter import CommitCount, build_number, count_commits  # noqa: F401
