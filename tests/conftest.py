"""Shared test fixtures."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path

import httpx
import pytest

from kata_release.config import default_repositories
from kata_release.models import ReleaseSettings, Repository
from kata_release.remote import raw_client


class FakeForge:
    """In-memory stand-in for the git hosting service and its GitHub releases.

    ``git``, ``gh`` and ``succeeds`` mimic the shell wrappers closely enough
    for the tagging and publishing stages: clones see the upstream refs,
    pushes publish local refs back upstream.
    """

    def __init__(self) -> None:
        self.tags: dict[str, set[str]] = defaultdict(set)
        self.branches: dict[str, set[str]] = defaultdict(set)
        self.releases: dict[str, dict[str, bool]] = defaultdict(dict)
        self.clones: dict[Path, dict] = {}
        self.calls: list[tuple[str, ...]] = []

    def git(self, *args: str, cwd: Path | None = None, check: bool = True) -> str:
        self.calls.append(("git", *args))
        cmd = args[0]
        if cmd == "clone":
            repo = args[2].rsplit("/", 1)[1].removesuffix(".git")
            self.clones[Path(args[3])] = {
                "repo": repo,
                "tags": set(),
                "branches": set(),
                "remote_branches": set(self.branches.get(repo, set())),
            }
            return ""

        clone = self.clones[cwd]
        if cmd == "fetch":
            clone["tags"] |= self.tags.get(clone["repo"], set())
        elif cmd == "rev-parse":
            ref = args[3]
            if ref.startswith("refs/tags/") and ref[len("refs/tags/") :] in clone["tags"]:
                return "0123abcd"
            prefix = "refs/remotes/origin/"
            if ref.startswith(prefix) and ref[len(prefix) :] in clone["remote_branches"]:
                return "0123abcd"
            return ""
        elif cmd == "tag":
            clone["tags"].add(args[2])
        elif cmd == "branch":
            clone["branches"].add(args[1])
        elif cmd == "push":
            name = args[2]
            if name in clone["tags"]:
                self.tags[clone["repo"]].add(name)
            elif name in clone["branches"]:
                self.branches[clone["repo"]].add(name)
        return ""

    def succeeds(self, *args: str, cwd: Path | None = None) -> bool:
        self.calls.append(("succeeds", *args))
        # gh release view <tag> --repo <owner>/<repo>
        repo = args[5].split("/", 1)[1]
        return args[3] in self.releases[repo]

    def gh(self, *args: str, cwd: Path | None = None, check: bool = True) -> str:
        self.calls.append(("gh", *args))
        # gh release create <tag> --repo <owner>/<repo> ...
        repo = args[4].split("/", 1)[1]
        self.releases[repo][args[2]] = "--prerelease" in args
        return ""

    def created(self, cmd: str) -> list[tuple[str, ...]]:
        """Mutating git calls of one kind (e.g. "tag", "branch", "push")."""
        return [c for c in self.calls if c[0] == "git" and c[1] == cmd]


@pytest.fixture
def settings() -> ReleaseSettings:
    """The default Kata Containers settings."""
    return ReleaseSettings(repositories=default_repositories())


@pytest.fixture
def small_settings() -> ReleaseSettings:
    """Two repositories: versioned runtime and tag-only, exempt packaging."""
    return ReleaseSettings(
        repositories=[
            Repository(name="runtime"),
            Repository(
                name="packaging",
                version_file=False,
                stable_branch=False,
                tag_suffix="-kernel-config",
            ),
        ]
    )


@pytest.fixture
def forge(monkeypatch: pytest.MonkeyPatch) -> FakeForge:
    """Route the pipeline's git/gh calls to a FakeForge."""
    fake = FakeForge()
    monkeypatch.setattr("kata_release.pipeline.git", fake.git)
    monkeypatch.setattr("kata_release.pipeline.gh", fake.gh)
    monkeypatch.setattr("kata_release.pipeline.succeeds", fake.succeeds)
    monkeypatch.setattr("kata_release.pipeline.shutil.which", lambda name: f"/usr/bin/{name}")
    return fake


class VersionFiles:
    """Serves VERSION files per repository and records what was requested."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.requested: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        # /<owner>/<repo>/<branch>/VERSION
        _, owner, repo, branch, _ = request.url.path.split("/", 4)
        self.requested.append(repo)
        if repo not in self.files:
            return httpx.Response(404, text="404: Not Found")
        return httpx.Response(200, text=self.files[repo])


@pytest.fixture
def version_files(monkeypatch: pytest.MonkeyPatch) -> VersionFiles:
    """Replace raw-content downloads with in-memory VERSION files."""
    files = VersionFiles()
    monkeypatch.setattr(
        "kata_release.pipeline.raw_client",
        lambda: raw_client(httpx.MockTransport(files.handler)),
    )
    return files
