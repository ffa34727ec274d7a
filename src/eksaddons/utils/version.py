"""Version comparison utilities."""

from packaging.version import InvalidVersion, Version

from eksaddons.utils.errors import VersionComparisonError


def parse_version(version: str) -> Version:
    """Parse a Kubernetes style version string.

    A leading "v" is tolerated (v1.27 and 1.27 are equal).

    Args:
        version: Version string

    Returns:
        Parsed version

    Raises:
        VersionComparisonError: If the version cannot be parsed
    """
    if not version or not version.strip():
        raise VersionComparisonError("Version cannot be empty")

    try:
        return Version(version.strip().lstrip("v"))
    except InvalidVersion as e:
        raise VersionComparisonError(f"Invalid version {version!r}: {e}") from e


def is_min_version(min_version: str, version: str) -> bool:
    """Check whether version is at least min_version.

    Args:
        min_version: Minimum acceptable version
        version: Version to check

    Returns:
        True if version >= min_version

    Raises:
        VersionComparisonError: If either version cannot be parsed
    """
    return parse_version(version) >= parse_version(min_version)
