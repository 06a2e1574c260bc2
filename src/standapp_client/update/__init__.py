"""Release feed polling and version comparison."""

from .checker import ReleaseInfo, UpdateDecision, VersionGate, fetch_latest_release
from .version import compare_versions, is_newer, parse_version

__all__ = [
    "ReleaseInfo",
    "UpdateDecision",
    "VersionGate",
    "compare_versions",
    "fetch_latest_release",
    "is_newer",
    "parse_version",
]
