"""
Configuration for vc_build_version.

Provides the immutable :class:`VersionConfig` record and a loader for the
optional ``.buildversion.json`` file in the repository root. See
:mod:`vc_build_version.config.loader` for details.
"""

from .loader import ConfigError, UnsupportedVcsKindError, config_from_dict, load_config  # noqa: F401
from .settings import CountingStyle, VersionConfig, VersionControl  # noqa: F401
