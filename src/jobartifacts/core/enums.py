"""
jobartifacts.core.enums - Type-Safe Enumerations
==================================================

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: DownloadMode.RUNS == "runs"
"""

from enum import Enum


# =============================================================================
# Download Mode Enumeration
# =============================================================================
# The three mutually exclusive ways of retrieving artifacts. When several are
# enabled in the job configuration, they are checked in declaration order:
#
#   RUNS   → this config's own history         → data/artifacts/in/runs/
#   CUSTOM → explicit branch/component/config  → data/artifacts/in/custom/
#   SHARED → orchestration-wide pool           → data/artifacts/in/shared/
# =============================================================================
class DownloadMode(str, Enum):
    """Download modes, in priority order.

    Usage:
        >>> mode = DownloadMode.RUNS
        >>> mode.value  # "runs"
    """

    RUNS = "runs"
    CUSTOM = "custom"
    SHARED = "shared"


# =============================================================================
# Upload Scope Enumeration
# =============================================================================
class UploadScope(str, Enum):
    """Staging directories under data/artifacts/out/ that get uploaded."""

    CURRENT = "current"     # This run's own output
    SHARED = "shared"       # Output offered to the rest of the orchestration
