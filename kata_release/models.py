"""Data models for kata-release.

These Pydantic models represent the repository set, the run settings and
the per-repository working context passed between release stages.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class Repository(BaseModel):
    """One component repository taking part in a release.

    Attributes:
        name: Repository name under the hosting owner (e.g., "runtime").
        version_file: True when the repository declares a VERSION file that
                      must match the release version. Tag-only repositories
                      set this to False.
        stable_branch: True when the repository maintains stable-X.Y
                       branches. Exempt repositories are tagged on their
                       default branch and never get a stable branch.
        tag_suffix: Appended to the release version to form the tag.
    """

    name: str
    version_file: bool = True
    stable_branch: bool = True
    tag_suffix: str = ""

    def tag_for(self, version: str) -> str:
        return f"{version}{self.tag_suffix}"


class ReleaseSettings(BaseModel):
    """Everything a release run needs to know besides the CLI flags.

    The URL templates are formatted with ``owner``, ``repo`` and (for raw
    files) ``branch`` and ``path``.
    """

    project: str = "Kata Containers"
    owner: str = "kata-containers"
    mainline: str = "master"
    canonical: str = "runtime"
    version_file: str = "VERSION"
    raw_url: str = "https://raw.githubusercontent.com/{owner}/{repo}/{branch}/{path}"
    clone_url: str = "https://github.com/{owner}/{repo}.git"
    push_url: str = "git@github.com:{owner}/{repo}.git"
    repositories: list[Repository] = Field(default_factory=list)

    @property
    def versioned(self) -> list[Repository]:
        """Repositories whose VERSION file is checked."""
        return [r for r in self.repositories if r.version_file]

    @property
    def tag_order(self) -> list[Repository]:
        """Versioned repositories first, then tag-only ones."""
        return self.versioned + [r for r in self.repositories if not r.version_file]

    def raw_file_url(self, repo: str, branch: str, path: str | None = None) -> str:
        return self.raw_url.format(
            owner=self.owner, repo=repo, branch=branch, path=path or self.version_file
        )

    def clone_url_for(self, repo: str) -> str:
        return self.clone_url.format(owner=self.owner, repo=repo)

    def push_url_for(self, repo: str) -> str:
        return self.push_url.format(owner=self.owner, repo=repo)

    def slug(self, repo: str) -> str:
        """owner/repo form used by the GitHub CLI."""
        return f"{self.owner}/{repo}"


class RepoCheckout(BaseModel):
    """Working context for one cloned repository during a tag run.

    Attributes:
        repo: The repository this clone belongs to.
        path: Clone directory inside the temporary workspace.
        tag: Tag computed for this repository.
        stable_branch: Stable branch created in this run, or None.
    """

    repo: Repository
    path: Path
    tag: str
    stable_branch: str | None = None
