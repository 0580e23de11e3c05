"""
Version of the vc_build_version package itself.

The package versions itself with its own calculator: when it runs from
a Git checkout, the version is derived from the checkout's tags and
commit history with the default configuration. Outside a checkout the
fallback version is used.

Format: {major}.{minor}.{patch}
Example: 0.3.7
"""

from pathlib import Path
from typing import Optional

from vc_build_version.config.settings import VersionConfig
from vc_build_version.vcs.git_client import GitClient
from vc_build_version.versioning.calculator import VersionCalculator


FALLBACK_VERSION = "0.0.0"


def find_checkout(start: Optional[Path] = None) -> Optional[Path]:
    """Return the Git checkout containing ``start`` (default: this package)."""
    return GitClient.find_repo_root(start or Path(__file__).parent)


def generate_version(repo_path: Optional[Path] = None) -> str:
    """
    Generate the package version from the Git history.

    Args:
        repo_path: Path inside the repository. If None, the directory of
            this package is used.

    Returns:
        The derived ``major.minor.patch`` version, or the fallback version
        when no checkout is found or Git is unavailable.
    """
    root = find_checkout(repo_path)
    if root is None:
        return FALLBACK_VERSION
    config = VersionConfig()
    calculator = VersionCalculator(config, GitClient(root, tag_pattern=config.version_tag_pattern))
    result = calculator.compute(include_branch_count=False, include_changes=False)
    return result.version if result.available else FALLBACK_VERSION
