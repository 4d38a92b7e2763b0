"""Version parsing and tag classification utilities.

Release versions look like ``2.0.0`` or ``2.0.0-rc0``. The prerelease part
decides whether a GitHub release is flagged as a pre-release and whether a
new stable branch is forked.
"""

from __future__ import annotations

from enum import Enum

import semver

STABLE_BRANCH_PREFIX = "stable-"


class TagKind(Enum):
    """What kind of release a version denotes."""

    RELEASE = "release"
    FIRST_CANDIDATE = "rc0"
    CANDIDATE = "rc"

    @property
    def is_prerelease(self) -> bool:
        return self is not TagKind.RELEASE


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Minor and patch may be omitted ("2" → 2.0.0, "2.1" → 2.1.0).

    Raises:
        ValueError: If the string is not a valid version.
    """
    return semver.Version.parse(version_str, optional_minor_and_patch=True)


def classify_tag(version_str: str) -> TagKind:
    """Classify a release version.

    Examples:
        "2.0.0" → RELEASE
        "2.0.0-rc0" → FIRST_CANDIDATE
        "2.0.0-rc3" → CANDIDATE
        "2.0.0-alpha1" → RELEASE (only release candidates are pre-releases)
    """
    prerelease = parse_version(version_str).prerelease or ""
    if prerelease == "rc0":
        return TagKind.FIRST_CANDIDATE
    if prerelease.startswith("rc"):
        return TagKind.CANDIDATE
    return TagKind.RELEASE


def stable_branch_name(version_str: str) -> str:
    """Name of the stable branch for a version's minor series.

    Examples:
        "3.1.0-rc0" → "stable-3.1"
    """
    v = parse_version(version_str)
    return f"{STABLE_BRANCH_PREFIX}{v.major}.{v.minor}"


def strip_comments(text: str) -> str:
    """Drop lines starting with '#' and return what remains.

    A VERSION file holds one version line, optionally preceded by
    comment lines. Trailing newlines are removed; nothing else is trimmed.
    """
    lines = [line for line in text.splitlines() if not line.startswith("#")]
    return "\n".join(lines).rstrip("\n")
