"""
Registry of the remote repositories used by this process.

The registry maps a request ``(url, branch, ignore_fetch)`` to a
`RemoteRepository`. Two requests that differ only in ``ignore_fetch`` are
fetch-equivalent and share one mirror: whichever comes second adopts the
entry created by the first instead of building another one.
"""

import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

from repocache.git.backend import DulwichBackend
from repocache.git.remote import RemoteRepository
from repocache.git.urls import parse_repo_url
from repocache.git.lock import LockManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryKey:
    url: str
    branch: Optional[str]
    ignore_fetch: bool = False

    def inverse(self) -> "RegistryKey":
        """The fetch-equivalent key with the opposite fetch policy."""
        return replace(self, ignore_fetch=not self.ignore_fetch)


class RepositoryRegistry:
    """
    Get-or-create store of remote repository mirrors.

    Entries are never evicted; the registry lives as long as its owner
    (typically one build session). Calls for the same ``(url, branch)`` are
    serialized, so only one of them clones or fetches; calls for other
    repositories or branches proceed independently.

    Usage:
        registry = RepositoryRegistry()
        repo = registry.get_or_create("https://github.com/user/repo.git", "main")
        commit = repo.latest_commit("main")
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        backend: Optional[DulwichBackend] = None,
        lock_manager: Optional[LockManager] = None,
        dry_run: Optional[bool] = None,
    ):
        """
        Args:
            cache_dir: Base cache directory (defaults to the configured one)
            backend: Git backend shared by all entries
            lock_manager: Named lock service shared by all entries
            dry_run: Skip fetching (defaults to the configured run mode)
        """
        self.cache_dir = cache_dir
        self.backend = backend if backend is not None else DulwichBackend()
        self.lock_manager = lock_manager if lock_manager is not None else LockManager()
        self.dry_run = dry_run

        self._repositories: Dict[RegistryKey, RemoteRepository] = {}
        self._repositories_lock = threading.Lock()
        self._request_locks: Dict[Tuple[str, Optional[str]], threading.Lock] = {}

    def _get_request_lock(self, url: str, branch: Optional[str]) -> threading.Lock:
        """
        Get or create the lock shared by a key and its inverse key.
        """
        with self._repositories_lock:
            if (url, branch) not in self._request_locks:
                self._request_locks[(url, branch)] = threading.Lock()
            return self._request_locks[(url, branch)]

    def lookup(self, key: RegistryKey) -> Optional[RemoteRepository]:
        with self._repositories_lock:
            return self._repositories.get(key)

    def adopt(self, key: RegistryKey) -> Optional[RemoteRepository]:
        """Entry registered under the fetch-equivalent inverse of `key`, if any."""
        return self.lookup(key.inverse())

    def create(self, url: str, name: Optional[str] = None) -> RemoteRepository:
        """Build a new entry, cloning the remote if it has no mirror yet."""
        return RemoteRepository(
            name or parse_repo_url(url),
            url,
            cache_dir=self.cache_dir,
            backend=self.backend,
            lock_manager=self.lock_manager,
            dry_run=self.dry_run,
        )

    def _store(self, key: RegistryKey, repo: RemoteRepository) -> None:
        with self._repositories_lock:
            self._repositories[key] = repo

    def get_or_create(
        self,
        url: str,
        branch: Optional[str],
        ignore_fetch: bool = False,
        name: Optional[str] = None,
    ) -> RemoteRepository:
        """
        Get the mirror of `url`, creating and fetching it as needed.

        A repository already registered under the same key is returned as is,
        without fetching. One registered under the inverse key is reused and
        then fetched according to this call's `ignore_fetch`. Otherwise a new
        mirror is created and fetched the same way. Entries are registered
        only once construction and fetch succeeded.

        Args:
            url: Remote URL
            branch: Branch the caller is interested in (None for the
                remote's default branch)
            ignore_fetch: Accept a possibly stale mirror
            name: Logical repository name (defaults to one derived from the URL)

        Returns:
            The cached remote repository
        """
        key = RegistryKey(url, branch, ignore_fetch)

        with self._get_request_lock(url, branch):
            repo = self.lookup(key)
            if repo is not None:
                return repo

            repo = self.adopt(key)
            if repo is not None:
                logger.debug(f"Reusing mirror of {url} registered for {key.inverse()}")
            else:
                repo = self.create(url, name)

            repo.fetch(branch, ignore_fetch=ignore_fetch)

            self._store(key, repo)
            return repo

    def clear(self) -> None:
        with self._repositories_lock:
            self._repositories.clear()

    def __contains__(self, key: RegistryKey) -> bool:
        with self._repositories_lock:
            return key in self._repositories

    def __len__(self) -> int:
        with self._repositories_lock:
            return len(self._repositories)


_default_registry: Optional[RepositoryRegistry] = None
_default_registry_lock = threading.Lock()


def get_registry() -> RepositoryRegistry:
    """Process-wide registry, created on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = RepositoryRegistry()
        return _default_registry
