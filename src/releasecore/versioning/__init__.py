"""Release version parsing and ordering.

- Semver grammar parsing with fail-fast errors
- Total ordering via an explicit comparator stage chain
- Stable ascending/descending sort
"""

from releasecore.versioning.comparator import (
    VERSION_STAGES,
    Ordering,
    SortDirection,
    compare_build,
    compare_core,
    compare_identifier,
    compare_identifiers,
    compare_prerelease,
    compare_versions,
    max_version,
    sort_versions,
    version_key,
)
from releasecore.versioning.version import (
    Version,
    VersioningError,
    VersionParseError,
    parse_version,
    try_parse_version,
)

__all__ = [
    "VERSION_STAGES",
    "Ordering",
    "SortDirection",
    "Version",
    "VersionParseError",
    "VersioningError",
    "compare_build",
    "compare_core",
    "compare_identifier",
    "compare_identifiers",
    "compare_prerelease",
    "compare_versions",
    "max_version",
    "parse_version",
    "sort_versions",
    "try_parse_version",
    "version_key",
]
