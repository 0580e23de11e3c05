"""
Parsing of VCS tag descriptions.

See :mod:`vc_build_version.parsing.describe_parser`.
"""

from .describe_parser import (  # noqa: F401
    DescribeResult,
    MalformedDescribeOutputError,
    find_plastic_version_tag,
    parse_git_describe,
    parse_plastic_changeset,
    parse_plastic_tag_line,
    parse_version_tag,
)
