"""
Tests for the package's own version derivation.
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import vc_build_version
from vc_build_version import _version
from vc_build_version.parsing.describe_parser import DescribeResult
from vc_build_version.vcs.base import NoVersionTagFoundError, VcsUnavailableError
from vc_build_version.vcs.git_client import GitClient


class TestVersionGeneration(unittest.TestCase):
    """Test dynamic version generation functionality."""

    def test_package_version_format(self):
        """The package version is always major.minor.patch."""
        parts = vc_build_version.__version__.split(".")
        self.assertEqual(len(parts), 3)
        self.assertTrue(all(part.isdigit() for part in parts))

    def test_fallback_outside_checkout(self):
        with patch.object(_version, "find_checkout", return_value=None):
            self.assertEqual(_version.generate_version(), _version.FALLBACK_VERSION)

    def test_find_checkout(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".git").mkdir()
            (root / "src").mkdir()
            self.assertEqual(_version.find_checkout(root / "src"), root)

    @patch.object(GitClient, "describe", return_value=DescribeResult("v0.3", 0, 3, True, "gabc", 2))
    @patch.object(GitClient, "log_since", return_value=["fix: b", "fix: a"])
    @patch.object(GitClient, "commit_log", return_value=["fix: b", "fix: a", "feat: c"])
    def test_version_from_history(self, mock_log, mock_since, mock_describe):
        with patch.object(_version, "find_checkout", return_value=Path("/repo")):
            self.assertEqual(_version.generate_version(), "0.3.2")

    @patch.object(GitClient, "describe", side_effect=NoVersionTagFoundError("No names found"))
    @patch.object(GitClient, "commit_log", return_value=["fix: a"])
    def test_version_without_tags(self, mock_log, mock_describe):
        with patch.object(_version, "find_checkout", return_value=Path("/repo")):
            self.assertEqual(_version.generate_version(), "0.0.1")

    @patch.object(GitClient, "describe", side_effect=VcsUnavailableError("git executable not found"))
    def test_git_unavailable(self, mock_describe):
        with patch.object(_version, "find_checkout", return_value=Path("/repo")):
            self.assertEqual(_version.generate_version(), _version.FALLBACK_VERSION)


if __name__ == "__main__":
    unittest.main()
