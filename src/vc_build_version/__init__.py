"""
Top-level package for vc_build_version.

Derives a semantic version and an integer build number from the commit
history of a Git or Plastic SCM repository. The command line entry
point lives in :mod:`vc_build_version.cli`.
"""

__all__ = ["__version__"]

# Dynamically derived from this package's own Git history
try:
    from vc_build_version._version import generate_version
    __version__ = generate_version()
except Exception:
    # Fallback if version generation fails (e.g. malformed tags)
    __version__ = "0.0.0"
