"""CLI entry point for kata-release."""

from __future__ import annotations

import os
from pathlib import Path

import click

from kata_release.config import default_repositories, load_settings
from kata_release.pipeline import run_pre_release, run_status, run_tag


def _repo_listing() -> str:
    lines = ["It tags and creates releases for:", "", "\b"]
    lines += [f"  - {repo.name}" for repo in default_repositories()]
    return "\n".join(lines)


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_repo_listing(),
)
@click.version_option(package_name="kata-release")
@click.option(
    "-b",
    "--branch",
    default=None,
    help="Branch where versions are checked and tags applied. [default: master]",
)
@click.option(
    "-p",
    "--push",
    is_flag=True,
    help="Push tags and create GitHub releases (also PUSH=true).",
)
@click.option(
    "--owner",
    envvar="OWNER",
    default=None,
    help="GitHub owner of the repositories (also OWNER). [default: kata-containers]",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML file overriding the release settings.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    branch: str | None,
    push: bool,
    owner: str | None,
    config: Path | None,
) -> None:
    """Create a new Kata Containers release across all component repos."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    settings = load_settings(config, owner)
    ctx.obj = {
        "settings": settings,
        "branch": branch or settings.mainline,
        "push": push or os.environ.get("PUSH", "false") == "true",
    }


@cli.command()
@click.pass_obj
def status(obj: dict) -> None:
    """Get current Kata Containers tags status."""
    run_status(obj["settings"], obj["branch"])


@cli.command("pre-release")
@click.argument("version")
@click.pass_obj
def pre_release(obj: dict, version: str) -> None:
    """Check all repos but runtime are at VERSION."""
    run_pre_release(obj["settings"], obj["branch"], version)


@cli.command()
@click.pass_obj
def tag(obj: dict) -> None:
    """Create tags (and with -p push them and create releases)."""
    run_tag(obj["settings"], obj["branch"], push=obj["push"])


if __name__ == "__main__":
    cli()
