import tempfile
import unittest
from pathlib import Path

from vc_build_version.config.loader import UnsupportedVcsKindError
from vc_build_version.config.settings import VersionConfig, VersionControl
from vc_build_version.vcs.git_client import GitClient
from vc_build_version.vcs.plastic_client import PlasticClient
from vc_build_version.vcs.registry import client_class, create_client, find_repo_root


class TestRegistry(unittest.TestCase):
    def test_client_class(self) -> None:
        self.assertIs(client_class(VersionControl.GIT), GitClient)
        self.assertIs(client_class(VersionControl.PLASTIC_SCM), PlasticClient)

    def test_unknown_kind_is_config_error(self) -> None:
        with self.assertRaises(UnsupportedVcsKindError):
            client_class("svn")
        with self.assertRaises(UnsupportedVcsKindError):
            client_class(None)

    def test_create_git_client(self) -> None:
        config = VersionConfig(version_tag_pattern="release-*")
        client = create_client(config, Path("/repo"))
        self.assertIsInstance(client, GitClient)
        self.assertEqual(client.tag_pattern, "release-*")
        self.assertEqual(client.repo_root, Path("/repo"))

    def test_create_plastic_client(self) -> None:
        config = VersionConfig(
            version_control_system=VersionControl.PLASTIC_SCM,
            plastic_version_tag_regex=r"^v\d",
        )
        client = create_client(config, Path("/ws"))
        self.assertIsInstance(client, PlasticClient)
        self.assertEqual(client.version_tag_regex.pattern, r"^v\d")

    def test_find_repo_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".plastic").mkdir()
            (root / "Assets").mkdir()
            self.assertEqual(find_repo_root(VersionControl.PLASTIC_SCM, root / "Assets"), root)


if __name__ == "__main__":
    unittest.main()
