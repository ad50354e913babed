"""CLI commands for the repository cache"""

import sys

import click

from repocache.cli.utils.logging import logger
from repocache.git import (
    GitCacheError,
    LockManager,
    RepositoryRegistry,
    cleanup_cache,
    describe_cache,
)


def _lock_manager(ctx) -> LockManager:
    # Keep locks next to an explicitly chosen cache
    cache_dir = ctx.obj.get("CACHE_DIR")
    return LockManager(cache_dir / "locks" if cache_dir is not None else None)


def _registry(ctx, dry_run=None) -> RepositoryRegistry:
    return RepositoryRegistry(
        cache_dir=ctx.obj.get("CACHE_DIR"),
        lock_manager=_lock_manager(ctx),
        dry_run=dry_run,
    )


@click.command("fetch")
@click.argument("url")
@click.option("--branch", "-b", default=None, help="Branch to fetch (default: remote HEAD).")
@click.option("--name", "-n", default=None, help="Logical repository name.")
@click.option(
    "--no-fetch",
    "ignore_fetch",
    is_flag=True,
    help="Use the mirror as is when it already exists.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Clone if needed but never fetch.",
)
@click.pass_context
def fetch(ctx, url: str, branch, name, ignore_fetch: bool, dry_run):
    """Clone or update the mirror of a remote repository.

    Prints the mirror path and the latest commit of the branch.

    Example:

      repocache fetch https://github.com/user/repo.git --branch main
    """
    try:
        registry = _registry(ctx, dry_run=True if dry_run else None)
        repo = registry.get_or_create(url, branch, ignore_fetch=ignore_fetch, name=name)
        if branch is None:
            branch = repo.default_branch
        commit = repo.latest_commit(branch)
    except GitCacheError as e:
        logger.error(f"Failed to cache {url}: {e}")
        sys.exit(1)

    click.echo(f"{repo.path}")
    click.echo(f"{branch} {commit}")


@click.command("resolve")
@click.argument("url")
@click.argument("commit")
@click.option("--name", "-n", default=None, help="Logical repository name.")
@click.pass_context
def resolve(ctx, url: str, commit: str, name):
    """Look up a commit in the mirror of a remote repository.

    The mirror is cloned if missing but not fetched.
    """
    try:
        repo = _registry(ctx).create(url, name)
        found = repo.lookup_commit(commit)
    except GitCacheError as e:
        logger.error(f"{e}")
        sys.exit(1)

    summary = found.message.decode("utf-8", "replace").splitlines()
    click.echo(f"{found.id.decode('ascii')} {summary[0] if summary else ''}".rstrip())


@click.command("describe")
@click.pass_context
def describe(ctx):
    """List cached mirrors."""
    mirrors = describe_cache(ctx.obj.get("CACHE_DIR"))
    if not mirrors:
        logger.info("Cache is empty")
        return

    for mirror in mirrors:
        click.echo(f"{mirror['name']}")
        click.echo(f"  url:      {mirror['url']}")
        click.echo(f"  path:     {mirror['path']}")
        click.echo(f"  head:     {mirror['default_branch']}")
        click.echo(f"  branches: {', '.join(mirror['branches']) or '-'}")


@click.command("cleanup")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Only show what would be removed.",
)
@click.pass_context
def cleanup(ctx, dry_run):
    """Remove mirrors left behind by older cache versions.

    Safe to run while other repocache processes use the cache.
    """
    try:
        removed = cleanup_cache(
            ctx.obj.get("CACHE_DIR"),
            dry_run=True if dry_run else None,
            lock_manager=_lock_manager(ctx),
        )
    except GitCacheError as e:
        logger.error(f"Cleanup failed: {e}")
        sys.exit(1)

    if not removed:
        logger.info("Nothing to clean up")
    else:
        logger.info(f"Cleaned up {len(removed)} outdated cache version(s)")
