"""
Command line interface for the vc_build_version tool.

This module defines the ``main`` click group used as the entry point of
the ``buildversion`` command. It orchestrates repository detection,
configuration loading and the version computation, prints the requested
form of the version, and maps every error family to a dedicated exit
code.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar

import click

from vc_build_version import __version__
from vc_build_version.config.loader import ConfigError, load_config, parse_vcs_kind
from vc_build_version.config.settings import VersionConfig, VersionControl
from vc_build_version.parsing.describe_parser import MalformedDescribeOutputError
from vc_build_version.vcs.base import VcsError, VcsUnavailableError
from vc_build_version.vcs.git_client import GitClient
from vc_build_version.vcs.plastic_client import PlasticClient
from vc_build_version.vcs.registry import create_client, find_repo_root
from vc_build_version.versioning.assembler import (
    MobileTarget,
    VersionResult,
    format_full_version,
    mobile_build_numbers,
)
from vc_build_version.versioning.calculator import VersionCalculator
from vc_build_version.versioning.version_data import (
    VersionData,
    VersionDataError,
    clear_almost_all,
    clear_debug,
    load_version_data,
    save_version_data,
    set_debug,
    update_version_data,
)

# Create a module-level logger. Attach a null handler and disable
# propagation; ``_configure_logging`` re-enables propagation for the
# package loggers once the CLI has configured the root logger.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_MALFORMED_DESCRIBE = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6

_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def _configure_logging(verbose: bool) -> None:
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    package = __name__.split(".")[0]
    for name in list(logging.root.manager.loggerDict):
        if name == package or name.startswith(package + "."):
            logging.getLogger(name).propagate = True


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def detect_repository(start_dir: Path) -> Tuple[Optional[VersionControl], Path]:
    """Detect the nearest Git repository or Plastic workspace.

    Parameters
    ----------
    start_dir : Path
        The directory from which to start searching.

    Returns
    -------
    Tuple[Optional[VersionControl], Path]
        The detected VCS kind and repository root, or ``(None, start_dir)``
        when neither is found. When both are found, the nearest one wins.
    """
    git_root = GitClient.find_repo_root(start_dir)
    plastic_root = PlasticClient.find_repo_root(start_dir)
    if git_root and plastic_root:
        if len(plastic_root.parts) > len(git_root.parts):
            return VersionControl.PLASTIC_SCM, plastic_root
        return VersionControl.GIT, git_root
    if git_root:
        return VersionControl.GIT, git_root
    if plastic_root:
        return VersionControl.PLASTIC_SCM, plastic_root
    return None, start_dir.resolve()


@dataclass
class CliState:
    """Options shared by all subcommands."""

    repo: Path
    config_path: Optional[Path]
    vcs: Optional[str]
    strict: bool

    def open(self) -> Tuple[VersionConfig, VersionCalculator]:
        """Load the configuration and create the calculator for the repository."""
        detected, root = detect_repository(self.repo)
        config = load_config(root, self.config_path)
        if self.vcs is not None:
            config = config.replace(version_control_system=parse_vcs_kind(self.vcs))
        kind = config.version_control_system
        repo_root = find_repo_root(kind, self.repo)
        if repo_root is None:
            logger.warning("No %s repository found above %s", kind.value, self.repo)
            repo_root = root
        logger.debug("VCS: %s (detected: %s), root: %s", kind.value, detected, repo_root)
        return config, VersionCalculator(config, create_client(config, repo_root))

    def check_available(self, result: VersionResult) -> None:
        """Report an unavailable VCS; fail the command in strict mode."""
        if result.available:
            return
        print_warning(f"Version control unavailable: {result.message}")
        if self.strict:
            raise click.exceptions.Exit(EXIT_NO_REPO)


def _execute(action: Callable[[], _T]) -> _T:
    """Run ``action`` and translate errors into exit codes."""
    try:
        return action()
    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    except MalformedDescribeOutputError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_MALFORMED_DESCRIBE)
    except VcsUnavailableError as exc:
        print_error(f"Version control unavailable: {exc}")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    except VcsError as exc:
        print_error(f"VCS error: {exc}")
        if exc.command:
            print_info(f"Command: {exc.command} (exit code {exc.exit_code})", indent=1)
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    except VersionDataError as exc:
        print_error(f"Version data error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


@click.group()
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory inside the repository (default: current directory).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: .buildversion.json in the repository root).",
)
@click.option("--vcs", type=click.Choice([kind.value for kind in VersionControl]), help="Force the VCS type.")
@click.option("--strict", is_flag=True, help="Fail when version control is unavailable instead of printing 'unknown'.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="buildversion")
@click.pass_context
def main(
    ctx: click.Context,
    repo: Optional[Path],
    config_path: Optional[Path],
    vcs: Optional[str],
    strict: bool,
    verbose: bool,
) -> None:
    """Derive version numbers from Git or Plastic SCM commit history."""
    _configure_logging(verbose)
    ctx.obj = CliState(repo=repo or Path.cwd(), config_path=config_path, vcs=vcs, strict=strict)


@main.command("version")
@click.option("--json", "as_json", is_flag=True, help="Print the complete result as JSON.")
@click.pass_obj
def version_command(state: CliState, as_json: bool) -> None:
    """Print the bundle version (major.minor.patch)."""

    def action() -> None:
        _, calculator = state.open()
        result = calculator.compute()
        state.check_available(result)
        if as_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            click.echo(result.short_version)

    _execute(action)


@main.command("build-number")
@click.option(
    "--target",
    "targets",
    multiple=True,
    type=click.Choice([target.value for target in MobileTarget]),
    help="Print the number for a mobile platform build-number field (repeatable).",
)
@click.pass_obj
def build_number_command(state: CliState, targets: Tuple[str, ...]) -> None:
    """Print the integer build number."""

    def action() -> None:
        _, calculator = state.open()
        result = calculator.compute(include_branch_count=False, include_changes=False)
        state.check_available(result)
        if not targets:
            click.echo(result.build_number)
            return
        for target, value in mobile_build_numbers(result.build_number, targets).items():
            click.echo(f"{target.value}={value}")

    _execute(action)


@main.command("full")
@click.option("--hash", "include_hash", is_flag=True, help="Append the commit hash.")
@click.option("--build-number", "include_build_number", is_flag=True, help="Append the build number.")
@click.option("--commit-status", is_flag=True, help="Append commits since main and uncommitted changes.")
@click.pass_obj
def full_command(
    state: CliState, include_hash: bool, include_build_number: bool, commit_status: bool
) -> None:
    """Print the version decorated with the selected fields."""

    def action() -> None:
        _, calculator = state.open()
        result = calculator.compute(
            include_branch_count=commit_status and not include_build_number,
            include_changes=commit_status,
        )
        state.check_available(result)
        click.echo(format_full_version(result, include_hash, include_build_number, commit_status))

    _execute(action)


@main.command("describe")
@click.pass_obj
def describe_command(state: CliState) -> None:
    """Print the nearest version tag and the commits since it."""

    def action() -> None:
        _, calculator = state.open()
        description, _, status = calculator.describe()
        click.echo(f"tag: {description.tag}")
        click.echo(f"major: {description.major}")
        click.echo(f"minor: {description.minor}")
        click.echo(f"hash: {description.hash}")
        click.echo(f"commits since tag: {description.commits_since_tag}")
        click.echo(f"status: {status.value}")

    _execute(action)


@main.command("data")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Version data JSON file to update (printed to stdout if omitted).",
)
@click.option("--debug-memo", default=None, help="Set the debug memo ('true' if empty).")
@click.option("--clear-debug", "clear_debug_memo", is_flag=True, help="Clear the debug memo.")
@click.option("--clear", is_flag=True, help="Clear everything except the debug memo.")
@click.pass_obj
def data_command(
    state: CliState,
    output: Optional[Path],
    debug_memo: Optional[str],
    clear_debug_memo: bool,
    clear: bool,
) -> None:
    """Fill the version data record (version, number, hash, bonus)."""

    def action() -> None:
        data = load_version_data(output) if output is not None else VersionData()
        if clear:
            data = clear_almost_all(data)
        else:
            config, calculator = state.open()
            result = calculator.compute()
            state.check_available(result)
            data = update_version_data(data, result, config)
        if clear_debug_memo:
            data = clear_debug(data)
        if debug_memo is not None:
            data = set_debug(data, debug_memo)

        if output is None:
            click.echo(json.dumps(data.to_dict(), indent=2))
            return
        save_version_data(data, output)
        print_success(f"Wrote version data to {output}: {data.version} Build: {data.number}")

    _execute(action)
