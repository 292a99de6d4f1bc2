"""Version reference format detection."""

import re

from packaging.version import InvalidVersion, Version

BRANCH_REFS = ("main", "master")

FORMAT_BRANCH = "branch"
FORMAT_SHA = "sha"
FORMAT_TAG = "tag"

_HEX_RE = re.compile(r"^[0-9a-fA-F]{7,41}$")


def is_branch(version: str) -> bool:
    return version in BRANCH_REFS


def identify(version: str) -> str:
    """Detect the format of a version reference.

    Args:
        version: Version string as written after the ``@``

    Returns:
        Detected format: 'branch', 'sha' or 'tag'
    """
    if is_branch(version):
        return FORMAT_BRANCH

    # 7-41 hex characters, never a "v" tag
    if not version.startswith("v") and _HEX_RE.match(version):
        return FORMAT_SHA

    return FORMAT_TAG


def extract_major(version: str) -> int:
    """Extract the major version number, 0 when there is none.

    Args:
        version: Version string such as "v4", "v4.2.1" or "2"

    Returns:
        Major version as an integer
    """
    if identify(version) != FORMAT_TAG:
        return 0

    try:
        return Version(version).major
    except InvalidVersion:
        pass

    # Not PEP 440, use the first dotted part when it is numeric
    major = version.removeprefix("v").split(".")[0]
    return int(major) if major.isdigit() else 0


def major_distance(current: str, latest: str) -> int:
    """Absolute distance between the major versions of two references."""
    return abs(extract_major(latest) - extract_major(current))
