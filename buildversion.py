#!/usr/bin/env python
"""
Thin wrapper script to invoke the vc_build_version CLI.

Running ``python buildversion.py`` is equivalent to running the
``buildversion`` console script installed via ``pyproject.toml``.
"""

from vc_build_version.cli import main


if __name__ == "__main__":
    main(prog_name="buildversion")
