"""CLI entry point for standalone usage: lockkeeper.

Subcommands:
    lockkeeper update-lock /path/to/repo apps/web/mix.exs --dep phoenix
    lockkeeper update-lock /path/to/repo mix.exs --maintenance
    lockkeeper ecosystems
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

import click

from lockkeeper.core.config import RunConfig, cache_dir, exec_timeout
from lockkeeper.core.logging import setup_logging
from lockkeeper.engines.artifacts import (
    ARTIFACT_REGISTRY,
    ArtifactUpdater,
    UpdateArtifact,
    UpdateArtifactsResult,
)
from lockkeeper.engines.extraction.models import Dependency
from lockkeeper.exceptions import LockkeeperError, TemporaryError
from lockkeeper.util.exec import CommandExecutor
from lockkeeper.util.fs import LocalFileSystem
from lockkeeper.util.host_rules import HostRules


async def _update_lock(
    repo: Path,
    package_file: str,
    ecosystem: str,
    deps: tuple[str, ...],
    config: RunConfig,
) -> list[UpdateArtifactsResult] | None:
    fs = LocalFileSystem(repo, cache_dir())
    content = await fs.read_local_file(package_file)
    if content is None:
        raise click.ClickException(f"cannot read {package_file} in {repo}")

    updater = ArtifactUpdater(
        fs,
        CommandExecutor(repo, timeout=exec_timeout()),
        HostRules.from_env(),
    )
    request = UpdateArtifact(
        package_file_name=package_file,
        updated_deps=tuple(Dependency(dep_name=d, package_name=d) for d in deps),
        new_package_file_content=content,
        config=config,
    )
    return await updater.update_artifacts(ecosystem, request)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Lock file maintenance for dependency manifests."""
    try:
        setup_logging(level="DEBUG" if verbose else None)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


@main.command("ecosystems")
def ecosystems() -> None:
    """List ecosystems with lock file support."""
    for name, eco in sorted(ARTIFACT_REGISTRY.items()):
        click.echo(f"{name}\t{eco.lock_file_name}")


@main.command("update-lock")
@click.argument("repo", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("package_file")
@click.option("-e", "--ecosystem", default="mix", show_default=True, help="Ecosystem name")
@click.option("-d", "--dep", "deps", multiple=True, help="Dependency to update (repeatable)")
@click.option("--maintenance", is_flag=True, help="Regenerate the whole lock file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def update_lock(
    repo: Path,
    package_file: str,
    ecosystem: str,
    deps: tuple[str, ...],
    maintenance: bool,
    as_json: bool,
) -> None:
    """Regenerate the lock file for PACKAGE_FILE (relative to REPO)."""
    try:
        config = RunConfig.from_env(is_lock_file_maintenance=maintenance)
        results = asyncio.run(_update_lock(repo.resolve(), package_file, ecosystem, deps, config))
    except TemporaryError as e:
        click.echo(f"Temporary failure, retry later: {e}", err=True)
        sys.exit(75)
    except (LockkeeperError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps([asdict(r) for r in results or []], indent=2))
    elif not results:
        click.echo("Lock file unchanged.")
    else:
        for r in results:
            if r.file is not None:
                click.echo(f"Updated {r.file.path}")
            elif r.artifact_error is not None:
                click.echo(f"Failed {r.artifact_error.lock_file}:\n{r.artifact_error.stderr}", err=True)

    if any(r.artifact_error is not None for r in results or []):
        sys.exit(1)
