"""
Version control system (VCS) integrations.

This package contains the client abstraction and concrete clients for
Git and Plastic SCM. Each client exposes the queries needed to derive a
version: the nearest version tag, the commit log, main/branch ancestry
counts and the working tree status.
"""

from .base import (  # noqa: F401
    NoVersionTagFoundError,
    VcsError,
    VcsUnavailableError,
    VersionControlClient,
)
from .git_client import GitClient, GitError  # noqa: F401
from .plastic_client import PlasticClient, PlasticError  # noqa: F401
from .registry import create_client, find_repo_root  # noqa: F401
