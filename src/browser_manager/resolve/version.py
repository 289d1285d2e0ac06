"""
Version comparison for browser-manager.

Browser versions are dotted numeric strings of arbitrary length
("120.0.6099.109"). Comparison is numeric per segment, missing trailing
segments count as 0, and malformed segments degrade to 0 instead of raising.
"""

import re
from typing import Iterable, List, Optional, Tuple

_DIGITS_RX = re.compile(r"^\d+$")


def parse_version(version: Optional[str]) -> Tuple[int, ...]:
    """
    Split a dotted version string into integer segments.

    Non-numeric or empty segments parse as 0, so "1.x" becomes (1, 0) and an
    empty or missing string becomes (0,).

    Args:
        version: Version string such as "120.0.6099.109".

    Returns:
        Tuple of non-negative integers, one per dot-separated segment.
    """
    if not version:
        return (0,)
    segments = []
    for part in str(version).split("."):
        part = part.strip()
        segments.append(int(part) if _DIGITS_RX.match(part) else 0)
    return tuple(segments)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings segment by segment.

    The shorter operand is padded with zeros, so "1.2" equals "1.2.0.0" and
    "1.10.0" is newer than "1.9.0".

    Args:
        version1: First version string to compare
        version2: Second version string to compare

    Returns:
        int: 1 if version1 > version2, 0 if equal, -1 if version1 < version2
    """
    parts1 = parse_version(version1)
    parts2 = parse_version(version2)
    width = max(len(parts1), len(parts2))
    padded1 = parts1 + (0,) * (width - len(parts1))
    padded2 = parts2 + (0,) * (width - len(parts2))
    if padded1 > padded2:
        return 1
    if padded1 < padded2:
        return -1
    return 0


def version_key(version: str) -> Tuple[int, ...]:
    """
    Sort key consistent with compare_versions.

    Trailing zero segments are dropped so equal versions produce equal keys.
    """
    parts = list(parse_version(version))
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def sort_versions(versions: Iterable[str], newest_first: bool = False) -> List[str]:
    """Return versions ordered oldest-first (or newest-first)."""
    return sorted(versions, key=version_key, reverse=newest_first)


def find_closest_version(target: str, candidates: Iterable[str]) -> Optional[str]:
    """
    Pick the smallest candidate that is at least `target`.

    When every candidate is older than the target, the newest candidate is
    returned instead. Returns None only when there are no candidates.
    """
    ordered = sort_versions(candidates)
    if not ordered:
        return None
    for candidate in ordered:
        if compare_versions(candidate, target) >= 0:
            return candidate
    return ordered[-1]
