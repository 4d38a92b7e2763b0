"""Release pipeline: resolve → verify → tag → publish.

This module coordinates a Kata Containers release across repositories:
1. Resolve the release version from the canonical repository's VERSION file
2. Verify every versioned repository reports that same version
3. Clone each repository into a temporary workspace and tag it, forking a
   stable-X.Y branch when the release is the first release candidate
4. Optionally push tags and stable branches and create GitHub releases

Every creation step checks for existing state first, so a failed run can
simply be re-run.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import httpx

from .models import ReleaseSettings, RepoCheckout, Repository
from .remote import fetch_version, raw_client
from .shell import fatal, gh, git, info, step, succeeds
from .versions import TagKind, classify_tag, parse_version, stable_branch_name

WORKSPACE_PREFIX = "tag-repos-tmp."


def resolve_release_version(
    client: httpx.Client, settings: ReleaseSettings, branch: str
) -> str:
    """Read the release version from the canonical repository.

    Returns:
        The VERSION file content without comment lines.

    Raises:
        SystemExit: If the resolved version is empty.
    """
    step(f"Resolving {settings.project} version from {settings.canonical} ({branch})")
    url = settings.raw_file_url(settings.canonical, branch)
    version = fetch_version(client, url)
    if not version:
        fatal(f"Could not resolve a version from {url}")
    info(f"{settings.canonical} is in {version}")
    return version


def check_versions(
    client: httpx.Client,
    settings: ReleaseSettings,
    branch: str,
    release_version: str,
    version_to_check: str | None = None,
) -> None:
    """Check every versioned repository reports the expected version.

    With ``version_to_check`` (pre-release mode) that version is expected
    instead and the canonical repository is not checked: the point is to
    confirm the other components already match the version the canonical
    repository is about to adopt.

    Stops at the first mismatch.
    """
    expected = version_to_check or release_version
    step(f"Checking all repos have version {expected} in {settings.version_file}")

    for repo in settings.versioned:
        if version_to_check and repo.name == settings.canonical:
            info(
                f"Not checking {repo.name} because we want the rest of repos "
                f"in {version_to_check}"
            )
            continue
        repo_version = fetch_version(client, settings.raw_file_url(repo.name, branch))
        info(f"{repo.name} is in {repo_version}")
        if repo_version != expected:
            fatal(f"{repo.name} is in version {repo_version!r}, expected {expected!r}")


def clone_repo(
    settings: ReleaseSettings,
    repo: Repository,
    workspace: Path,
    branch: str,
    version: str,
) -> RepoCheckout:
    """Clone a repository and prepare it for tagging.

    The push URL is switched to the authenticated SSH remote and all tags
    are fetched. Stable-branch-exempt repositories stay on their default
    branch.
    """
    path = workspace / repo.name
    git("clone", "--quiet", settings.clone_url_for(repo.name), str(path))
    git("remote", "set-url", "--push", "origin", settings.push_url_for(repo.name), cwd=path)
    git("fetch", "origin", "--tags", cwd=path)

    if repo.stable_branch:
        info(f"Checkout to {branch} in {repo.name}")
        git("checkout", branch, cwd=path)
    else:
        info(f"Checkout({branch}) not needed for {repo.name}")

    return RepoCheckout(repo=repo, path=path, tag=repo.tag_for(version))


def ref_exists(path: Path, ref: str) -> bool:
    """True when the ref (e.g. refs/tags/2.0.0) resolves in the clone."""
    return bool(git("rev-parse", "-q", "--verify", ref, cwd=path, check=False))


def tag_repo(
    settings: ReleaseSettings, checkout: RepoCheckout, branch: str, version: str
) -> None:
    """Create the release tag and, on an rc0 from mainline, the stable branch."""
    repo = checkout.repo
    if ref_exists(checkout.path, f"refs/tags/{checkout.tag}"):
        info(f"{repo.name} already has tag {checkout.tag}")
    else:
        info(f"Creating tag {checkout.tag} for {repo.name}")
        git(
            "tag",
            "-a",
            checkout.tag,
            "-s",
            "-m",
            f"{settings.project} release {checkout.tag}",
            cwd=checkout.path,
        )

    if not repo.stable_branch or branch != settings.mainline:
        return
    if classify_tag(version) is not TagKind.FIRST_CANDIDATE:
        return

    stable = stable_branch_name(version)
    if ref_exists(checkout.path, f"refs/remotes/origin/{stable}"):
        info(f"{repo.name} already has branch {stable}")
        return
    info(f"This is a rc0 for {branch} - creating branch {stable} for {repo.name}")
    git("branch", stable, branch, cwd=checkout.path)
    checkout.stable_branch = stable


def tag_repos(
    settings: ReleaseSettings, workspace: Path, branch: str, version: str
) -> list[RepoCheckout]:
    """Clone and tag every repository, versioned repositories first."""
    step(f"Creating tag {version} in all repos")

    checkouts: list[RepoCheckout] = []
    for repo in settings.tag_order:
        checkout = clone_repo(settings, repo, workspace, branch, version)
        tag_repo(settings, checkout, branch, version)
        checkouts.append(checkout)
    return checkouts


def create_github_release(
    settings: ReleaseSettings, checkout: RepoCheckout, version: str
) -> None:
    """Create a GitHub release for the checkout's tag unless one exists.

    Release candidates are flagged as pre-releases.
    """
    slug = settings.slug(checkout.repo.name)
    if succeeds("gh", "release", "view", checkout.tag, "--repo", slug):
        info(f"Github release {checkout.tag} already created for {slug}")
        return

    info(f"Creating Github release {checkout.tag} for {slug}")
    message = f"{settings.project} {checkout.tag}"
    args = ["release", "create", checkout.tag, "--repo", slug, "--verify-tag"]
    args += ["--title", message, "--notes", message]
    if classify_tag(version).is_prerelease:
        args.append("--prerelease")
    gh(*args, cwd=checkout.path)


def push_tags(
    settings: ReleaseSettings, checkouts: list[RepoCheckout], version: str
) -> None:
    """Push tags and new stable branches, then create GitHub releases."""
    step("Pushing tags to repos")

    if shutil.which("gh") is None:
        fatal("GitHub CLI (gh) not found on PATH; it is needed to create releases")

    for checkout in checkouts:
        name = checkout.repo.name
        info(f"Push tag {checkout.tag} for {name}")
        git("push", "origin", checkout.tag, cwd=checkout.path)
        create_github_release(settings, checkout, version)
        if checkout.stable_branch:
            info(f"Pushing stable {checkout.stable_branch} branch for {name}")
            git("push", "origin", checkout.stable_branch, cwd=checkout.path)


def run_status(settings: ReleaseSettings, branch: str) -> None:
    """Report whether all repositories match the resolved release version."""
    with raw_client() as client:
        version = resolve_release_version(client, settings, branch)
        check_versions(client, settings, branch, version)
    print(f"\nAll repos are in version {version}")


def run_pre_release(settings: ReleaseSettings, branch: str, version_to_check: str) -> None:
    """Check every repository but the canonical one is already at a version."""
    with raw_client() as client:
        version = resolve_release_version(client, settings, branch)
        check_versions(client, settings, branch, version, version_to_check)
    print(f"\nAll repos are ready for version {version_to_check}")


def run_tag(settings: ReleaseSettings, branch: str, *, push: bool = False) -> None:
    """Execute the full tagging run.

    Args:
        settings: Release settings.
        branch: Release branch to read versions from and tag.
        push: If True, push tags and create GitHub releases.
    """
    with raw_client() as client:
        version = resolve_release_version(client, settings, branch)
        check_versions(client, settings, branch, version)

    try:
        parse_version(version)
    except ValueError:
        fatal(f"Resolved version {version!r} is not a valid release version")

    with tempfile.TemporaryDirectory(prefix=WORKSPACE_PREFIX) as tmp:
        checkouts = tag_repos(settings, Path(tmp), branch, version)
        if push:
            push_tags(settings, checkouts, version)
        else:
            info("tags not pushed, use -p option to push the tags")

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
