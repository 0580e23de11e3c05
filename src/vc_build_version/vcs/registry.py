"""
Selection of the VCS client for a configuration.

The client class is chosen once, from
:attr:`VersionConfig.version_control_system`; an unknown kind is a
configuration error rather than a reason to guess.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Type

from vc_build_version.config.loader import UnsupportedVcsKindError
from vc_build_version.config.settings import VersionConfig, VersionControl

from .base import VersionControlClient
from .git_client import GitClient
from .plastic_client import PlasticClient


CLIENT_CLASSES: Dict[VersionControl, Type[VersionControlClient]] = {
    VersionControl.GIT: GitClient,
    VersionControl.PLASTIC_SCM: PlasticClient,
}


def client_class(kind: VersionControl) -> Type[VersionControlClient]:
    """Return the client class for ``kind``.

    Raises
    ------
    UnsupportedVcsKindError
        If no client implements ``kind``.
    """
    try:
        return CLIENT_CLASSES[kind]
    except (KeyError, TypeError):
        raise UnsupportedVcsKindError(kind) from None


def find_repo_root(kind: VersionControl, start: Path) -> Optional[Path]:
    """Find the repository root of kind ``kind`` above ``start``."""
    return client_class(kind).find_repo_root(start)


def create_client(config: VersionConfig, repo_root: Path) -> VersionControlClient:
    """Create the client selected by ``config`` for ``repo_root``."""
    kind = config.version_control_system
    cls = client_class(kind)
    if cls is GitClient:
        return GitClient(repo_root, tag_pattern=config.version_tag_pattern)
    if cls is PlasticClient:
        return PlasticClient(repo_root, version_tag_regex=config.plastic_version_tag_regex)
    return cls(repo_root)
