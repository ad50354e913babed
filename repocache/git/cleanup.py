"""
Housekeeping of the mirror cache on this host.

Mirrors live under ``<cache dir>/remote_git_repo/<cache version>/``. When the
cache version is bumped, trees of older versions are never read again;
`cleanup_cache` removes them. It only ever touches outdated versions and runs
under its own named lock, so it is safe to run while builds use the cache.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from dulwich.errors import NotGitRepository

from repocache.config import get_cache_dir, is_dry_run
from repocache.constants import CACHE_VERSION, LOCK_PREFIX, REMOTE_NAME, REMOTE_REPO_DIR
from repocache.git.backend import DulwichBackend
from repocache.git.lock import LockManager

logger = logging.getLogger(__name__)

CLEANUP_LOCK = f"{LOCK_PREFIX}.cleanup"


def outdated_cache_versions(cache_dir: Optional[Path] = None) -> List[Path]:
    """Version directories that do not belong to the current CACHE_VERSION."""
    if cache_dir is None:
        cache_dir = get_cache_dir()

    root = Path(cache_dir) / REMOTE_REPO_DIR
    if not root.is_dir():
        return []

    return sorted(
        p for p in root.iterdir() if p.is_dir() and p.name != str(CACHE_VERSION)
    )


def cleanup_cache(
    cache_dir: Optional[Path] = None,
    dry_run: Optional[bool] = None,
    lock_manager: Optional[LockManager] = None,
) -> List[Path]:
    """
    Remove mirrors created by older cache versions.

    Args:
        cache_dir: Base cache directory (defaults to the configured one)
        dry_run: Only report what would be removed (defaults to the configured run mode)
        lock_manager: Named lock service

    Returns:
        The removed directories (or the ones that would be removed in dry-run mode)
    """
    if dry_run is None:
        dry_run = is_dry_run()
    if lock_manager is None:
        lock_manager = LockManager()

    with lock_manager.lock(CLEANUP_LOCK):
        outdated = outdated_cache_versions(cache_dir)
        for path in outdated:
            if dry_run:
                logger.info(f"Would remove outdated cache {path}")
            else:
                logger.info(f"Removing outdated cache {path}")
                shutil.rmtree(path)

    return outdated


def _is_bare_repo(path: Path) -> bool:
    return (path / "HEAD").is_file() and (path / "objects").is_dir()


def describe_cache(
    cache_dir: Optional[Path] = None,
    backend: Optional[DulwichBackend] = None,
) -> list:
    """
    Describe the mirrors of the current cache version.

    Args:
        cache_dir: Base cache directory (defaults to the configured one)
        backend: Git backend used to read the mirrors

    Returns:
        List of dictionaries with repo information:
        - name: Logical repository name (e.g. "github.com/user/repo")
        - path: Mirror path
        - url: Remote URL recorded in the mirror ("unknown" if missing)
        - default_branch: Branch HEAD points at ("detached" if none)
        - branches: Remote-tracking branches present in the mirror
    """
    if cache_dir is None:
        cache_dir = get_cache_dir()
    if backend is None:
        backend = DulwichBackend()

    version_dir = Path(cache_dir) / REMOTE_REPO_DIR / str(CACHE_VERSION)
    if not version_dir.exists():
        return []

    results = []
    for head in sorted(version_dir.rglob("HEAD")):
        repo_path = head.parent
        if not _is_bare_repo(repo_path):
            continue

        try:
            results.append(
                {
                    "name": repo_path.relative_to(version_dir).as_posix(),
                    "path": repo_path,
                    "url": backend.get_remote_url(repo_path, REMOTE_NAME) or "unknown",
                    "default_branch": backend.head_branch(repo_path) or "detached",
                    "branches": backend.list_branches(repo_path, REMOTE_NAME),
                }
            )
        except (NotGitRepository, OSError, KeyError) as e:
            logger.debug(f"Failed to read repo at {repo_path}: {e}")

    return results
