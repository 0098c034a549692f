"""Core services for runmark."""

from runmark.core.updates import (
    ReleaseInfo,
    UpdateChecker,
    UpdateError,
    UpdateStatus,
    compare_versions,
)

__all__ = [
    "ReleaseInfo",
    "UpdateChecker",
    "UpdateError",
    "UpdateStatus",
    "compare_versions",
]
