"""
Version computation and formatting.

The :class:`VersionCalculator` derives a :class:`VersionResult` from a
VCS client and a configuration; the assembler functions format it, and
:class:`VersionData` is the record embedded in builds.
"""

from .assembler import (  # noqa: F401
    MobileTarget,
    VersionResult,
    VersionStatus,
    assemble_version,
    format_full_version,
    mobile_build_numbers,
)
from .calculator import VersionCalculator  # noqa: F401
from .version_data import (  # noqa: F401
    VersionData,
    VersionDataError,
    load_version_data,
    save_version_data,
    update_version_data,
)
