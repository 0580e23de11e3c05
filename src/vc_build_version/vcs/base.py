"""
Common base for version control clients.

A client knows how to run its VCS executable inside a repository and
exposes the handful of queries the version calculator needs: the
nearest version tag, the commit log (full and since a tag), the
main/branch commit counts and the working tree status. All output is
normalized into lists of stripped, non-empty lines.

All subprocess calls go through :meth:`VersionControlClient._run` so that
unit tests can mock a single method.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Type

from vc_build_version.parsing.describe_parser import DescribeResult


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class VcsError(Exception):
    """Raised when a VCS command cannot be executed or exits with an error.

    Attributes
    ----------
    command : Optional[str]
        The command line that was executed.
    exit_code : Optional[int]
        Exit status of the process, ``None`` if it never started.
    stdout, stderr : str
        Captured output of the process.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    @classmethod
    def from_error(cls, message: str, error: "VcsError") -> "VcsError":
        """Create an error of this class carrying the context of ``error``."""
        return cls(message, error.command, error.exit_code, error.stdout, error.stderr)


class VcsUnavailableError(VcsError):
    """The VCS executable is missing or the directory is not a repository."""

    pass


class NoVersionTagFoundError(VcsError):
    """The repository is valid but holds no matching version tag."""

    pass


def output_lines(text: str) -> List[str]:
    """Split command output into stripped, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class VersionControlClient(ABC):
    """Client for the version queries of one version control system."""

    #: Name of the VCS executable.
    executable: str = ""
    #: Directory marking the root of a repository or workspace.
    metadata_dir: str = ""
    #: Error raised when a command exits with a non-zero status.
    error_class: Type[VcsError] = VcsError

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Repository detection
    # ------------------------------------------------------------------
    @classmethod
    def is_repo(cls, path: Path) -> bool:
        """Return True if ``path`` is the root of a repository."""
        return (path / cls.metadata_dir).exists()

    @classmethod
    def find_repo_root(cls, start: Path) -> Optional[Path]:
        """Find the repository root starting from ``start``.

        Walk upwards until the metadata directory is found or the
        filesystem root is reached.
        """
        current = start.resolve()
        while True:
            if cls.is_repo(current):
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------
    def _run(self, args: Sequence[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a VCS command in the repository root and wait for it to exit.

        Raises
        ------
        VcsUnavailableError
            If the executable cannot be started.
        VcsError
            An instance of :attr:`error_class` if the command exits with a
            non-zero status and ``check`` is True.
        """
        full_cmd = [self.executable] + list(args)
        command = " ".join(full_cmd)
        logger.debug("Executing %s command: %s", self.executable, command)
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            logger.error("%s executable not found: %s", self.executable, exc)
            raise VcsUnavailableError(
                f"{self.executable} executable not found", command=command
            ) from exc
        except NotADirectoryError as exc:
            logger.error("Repository root is not a directory: %s", self.repo_root)
            raise VcsUnavailableError(
                f"Repository root is not a directory: {self.repo_root}", command=command
            ) from exc

        if check and result.returncode != 0:
            # Callers decide whether a failure is expected (e.g. no tags)
            logger.debug(
                "%s command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                self.executable,
                command,
                result.stdout,
                result.stderr,
            )
            error_class = VcsUnavailableError if self._is_unavailable(result) else self.error_class
            raise error_class(
                result.stderr.strip() or result.stdout.strip() or f"{command} failed",
                command=command,
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result

    def _is_unavailable(self, result: subprocess.CompletedProcess) -> bool:
        """Return True if a failed command shows the directory is not a repository."""
        return False

    def run(self, args: Sequence[str]) -> str:
        """Run a command and return its stripped standard output."""
        return self._run(args, check=True).stdout.strip()

    def run_lines(self, args: Sequence[str]) -> List[str]:
        """Run a command and return its output as normalized lines."""
        return output_lines(self._run(args, check=True).stdout)

    # ------------------------------------------------------------------
    # Version queries
    # ------------------------------------------------------------------
    @abstractmethod
    def describe(self) -> DescribeResult:
        """Return the nearest version tag of HEAD.

        Raises
        ------
        NoVersionTagFoundError
            If the repository has no matching version tag.
        VcsUnavailableError
            If the repository cannot be queried at all.
        """

    @abstractmethod
    def commit_log(self) -> List[str]:
        """Return the full commit log, HEAD first."""

    @abstractmethod
    def log_since(self, description: DescribeResult) -> List[str]:
        """Return the commit log lines more recent than the described tag."""

    @abstractmethod
    def count_main_and_branch(
        self, main_branch: str, lines: Optional[Sequence[str]] = None
    ) -> Tuple[int, int]:
        """Return commits on main up to the fork point and commits since it.

        Backends that count from the log use ``lines`` (default: the full
        commit log); backends that count ancestry ignore it.
        """

    @abstractmethod
    def status_lines(self) -> List[str]:
        """Return one line per uncommitted change in the working tree."""

    def change_count(self) -> int:
        """Return the number of uncommitted changes."""
        return len(self.status_lines())
