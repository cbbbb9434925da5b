"""Version management utilities"""

from typing import Optional, List

from packaging.version import parse, Version, InvalidVersion


def parse_version(version_str: str) -> Optional[Version]:
    """
    Parse version string

    Args:
        version_str: Version string

    Returns:
        Version object or None if invalid
    """
    try:
        return parse(version_str)
    except InvalidVersion:
        return None


def sort_versions(versions: List[str], reverse: bool = True) -> List[str]:
    """
    Sort version strings

    Invalid versions sort before every valid one.

    Args:
        versions: List of version strings
        reverse: Sort in descending order

    Returns:
        Sorted list
    """

    def version_key(v: str):
        parsed = parse_version(v)
        if parsed is None:
            return (0, parse("0"), v)
        return (1, parsed, v)

    return sorted(versions, key=version_key, reverse=reverse)


def get_latest_version(versions: List[str]) -> Optional[str]:
    """
    Get latest version from list

    Args:
        versions: List of version strings

    Returns:
        Latest version or None
    """
    if not versions:
        return None

    return sort_versions(versions, reverse=True)[0]
