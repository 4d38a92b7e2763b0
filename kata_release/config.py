"""Release settings: built-in defaults and optional TOML overrides.

The defaults describe the Kata Containers repository set. A TOML file can
replace any top-level setting and the repository list::

    owner = "my-fork"

    [[repositories]]
    name = "runtime"

    [[repositories]]
    name = "packaging"
    version_file = false
    stable_branch = false
    tag_suffix = "-kernel-config"
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError

from .models import ReleaseSettings, Repository
from .shell import fatal

# Repositories with a VERSION file that must match the release version.
VERSIONED_REPOS = ("agent", "proxy", "runtime", "shim")

# Tagged with the release version but carrying no VERSION file.
TAG_ONLY_REPOS = ("tests", "packaging", "osbuilder", "ksm-throttler")

# Tags go straight onto the default branch; no stable branch is kept.
NOT_STABLE_BRANCH_REPOS = frozenset({"packaging", "osbuilder", "ksm-throttler"})

TAG_SUFFIXES = {"packaging": "-kernel-config"}


def default_repositories() -> list[Repository]:
    """The Kata Containers repository set, versioned repositories first."""
    return [
        Repository(
            name=name,
            version_file=name in VERSIONED_REPOS,
            stable_branch=name not in NOT_STABLE_BRANCH_REPOS,
            tag_suffix=TAG_SUFFIXES.get(name, ""),
        )
        for name in (*VERSIONED_REPOS, *TAG_ONLY_REPOS)
    ]


def load_config_file(path: Path) -> dict:
    """Parse a settings TOML file into plain Python values."""
    if not path.is_file():
        fatal(f"Config file not found: {path}")
    try:
        doc = tomlkit.parse(path.read_text())
    except ParseError as exc:
        fatal(f"Invalid TOML in {path}: {exc}")
    return doc.unwrap()


def load_settings(config: Path | None = None, owner: str | None = None) -> ReleaseSettings:
    """Build settings from defaults, an optional file, then the owner override.

    Args:
        config: Optional TOML file with overrides.
        owner: Hosting owner from the command line or OWNER; wins over the file.
    """
    values: dict = {"repositories": default_repositories()}
    if config is not None:
        values.update(load_config_file(config))
    if owner:
        values["owner"] = owner

    try:
        settings = ReleaseSettings.model_validate(values)
    except ValidationError as exc:
        fatal(f"Invalid release settings:\n{exc}")

    if not settings.repositories:
        fatal("No repositories configured")
    names = [r.name for r in settings.repositories]
    if len(names) != len(set(names)):
        fatal("Repository names must be unique")
    return settings
