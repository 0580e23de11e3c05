import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import vc_build_version.cli as cli
from vc_build_version.config.loader import ConfigError
from vc_build_version.config.settings import CountingStyle, VersionConfig, VersionControl
from vc_build_version.parsing.describe_parser import DescribeResult, MalformedDescribeOutputError
from vc_build_version.vcs.base import NoVersionTagFoundError, VcsError, VcsUnavailableError
from vc_build_version.versioning.calculator import VersionCalculator


class DummyClient:
    def __init__(self):
        self.describe_error = None
        self.log = ["fix: z", "fix: y", "feat: x"]
        self.changes = 1

    def describe(self):
        if self.describe_error is not None:
            raise self.describe_error
        return DescribeResult("v1.4", 1, 4, True, "gabc1234", 3)

    def commit_log(self):
        return list(self.log)

    def log_since(self, description):
        return list(self.log)

    def count_main_and_branch(self, main_branch, lines=None):
        return 5, 2

    def change_count(self):
        return self.changes


CONFIG = VersionConfig(
    commit_counting_style=CountingStyle.MINOR_THEN_PATCH,
    bundle_version_style=CountingStyle.MINOR_THEN_PATCH,
)


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.client = DummyClient()

    def invoke(self, args, config=CONFIG):
        calculator = VersionCalculator(config, self.client)
        with patch.object(cli.CliState, "open", return_value=(config, calculator)):
            return self.runner.invoke(cli.main, args)

    def test_version(self) -> None:
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output.strip(), "1.5.2")

    def test_version_json(self) -> None:
        result = self.invoke(["version", "--json"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["version"], "1.5.2")
        self.assertEqual(data["build_number"], 22)
        self.assertEqual(data["status"], "ok")

    def test_build_number(self) -> None:
        result = self.invoke(["build-number"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output.strip(), "22")

    def test_build_number_targets(self) -> None:
        result = self.invoke(["build-number", "--target", "android", "--target", "ios"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output.splitlines(), ["android=22", "ios=22"])

    def test_build_number_invalid_target(self) -> None:
        result = self.invoke(["build-number", "--target", "windows"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_full(self) -> None:
        result = self.invoke(["full", "--hash", "--commit-status"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output.strip(), "1.5.2 gabc1234+2&1")

    def test_full_with_build_number(self) -> None:
        result = self.invoke(["full", "--build-number"])
        self.assertEqual(result.output.strip(), "1.5.2 (22)")

    def test_full_with_build_number_and_commit_status(self) -> None:
        result = self.invoke(["full", "--build-number", "--commit-status"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output.strip(), "1.5.2 (22)&1")

    def test_full_unavailable_strict(self) -> None:
        self.client.describe_error = VcsUnavailableError("not a git repository")
        result = self.invoke(["--strict", "full", "--hash"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_describe(self) -> None:
        result = self.invoke(["describe"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("tag: v1.4", result.output)
        self.assertIn("commits since tag: 3", result.output)
        self.assertIn("status: ok", result.output)

    def test_no_version_tag(self) -> None:
        self.client.describe_error = NoVersionTagFoundError("No names found")
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        # the no-tag warning goes to stderr; the version is the last line
        self.assertEqual(result.output.strip().splitlines()[-1], "0.0.2")
        self.assertNotIn("ERROR", result.output)

    def test_vcs_unavailable(self) -> None:
        self.client.describe_error = VcsUnavailableError("not a git repository")
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("unknown", result.output)

    def test_vcs_unavailable_strict(self) -> None:
        self.client.describe_error = VcsUnavailableError("not a git repository")
        result = self.invoke(["--strict", "version"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_describe_vcs_unavailable(self) -> None:
        self.client.describe_error = VcsUnavailableError("cm not found")
        result = self.invoke(["describe"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_malformed_describe(self) -> None:
        self.client.describe_error = MalformedDescribeOutputError("garbage", "missing '-'")
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_MALFORMED_DESCRIBE)
        self.assertIn("garbage", result.output)

    def test_vcs_failure(self) -> None:
        self.client.describe_error = VcsError("boom", command="git log", exit_code=2)
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)

    def test_unexpected_error(self) -> None:
        self.client.describe_error = RuntimeError("oops")
        result = self.invoke(["version"])
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)

    def test_config_error(self) -> None:
        with patch.object(cli.CliState, "open", side_effect=ConfigError("bad")):
            result = self.runner.invoke(cli.main, ["version"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("bad", result.output)

    def test_data_stdout(self) -> None:
        result = self.invoke(["data", "--debug-memo", "nightly"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["version"], "1.5.2")
        self.assertEqual(data["number"], 22)
        self.assertEqual(data["hash"], "gabc1234")
        self.assertEqual(data["debug"], "nightly")

    def test_data_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "version.json"
            output.write_text(json.dumps({"debug": "qa", "number": 3}))
            result = self.invoke(["data", "--output", str(output)])
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            data = json.loads(output.read_text())
            self.assertEqual(data["number"], 22)
            self.assertEqual(data["debug"], "qa")

            result = self.invoke(["data", "--output", str(output), "--clear"])
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            data = json.loads(output.read_text())
            self.assertEqual(data, {"version": "", "number": 0, "hash": "", "bonus": "", "debug": "qa"})

            result = self.invoke(["data", "--output", str(output), "--clear", "--clear-debug"])
            data = json.loads(output.read_text())
            self.assertEqual(data["debug"], "")

    def test_invalid_vcs_option(self) -> None:
        result = self.runner.invoke(cli.main, ["--vcs", "svn", "version"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)


class TestCliState(unittest.TestCase):
    def test_open_uses_detected_repository(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".plastic").mkdir()
            (root / ".buildversion.json").write_text(
                json.dumps({"version_control_system": "plastic_scm", "number_offset": 9})
            )
            state = cli.CliState(repo=root, config_path=None, vcs=None, strict=False)
            config, calculator = state.open()
        self.assertEqual(config.version_control_system, VersionControl.PLASTIC_SCM)
        self.assertEqual(config.number_offset, 9)
        self.assertEqual(calculator.client.repo_root, root)

    def test_vcs_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".git").mkdir()
            state = cli.CliState(repo=root, config_path=None, vcs="plastic_scm", strict=False)
            config, calculator = state.open()
        self.assertEqual(config.version_control_system, VersionControl.PLASTIC_SCM)
        self.assertEqual(calculator.client.executable, "cm")


class TestDetectRepository(unittest.TestCase):
    def test_nearest_repository_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".git").mkdir()
            workspace = root / "game"
            (workspace / ".plastic").mkdir(parents=True)
            self.assertEqual(
                cli.detect_repository(workspace), (VersionControl.PLASTIC_SCM, workspace)
            )
            self.assertEqual(cli.detect_repository(root), (VersionControl.GIT, root))


if __name__ == "__main__":
    unittest.main()
