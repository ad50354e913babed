"""
Cached bare mirror of one remote git repository.

Cache Structure Example:
    ~/.cache/repocache/remote_git_repo/
    └── 1/                              # CACHE_VERSION
        ├── github.com/
        │   └── user/
        │       └── repo/               # bare mirror (HEAD, objects/, refs/, config)
        └── gitlab.com/
            └── group/
                └── project/

A mirror is cloned once, on first reference, and refreshed by fetching single
branches afterwards. Every clone and fetch runs under the named lock
``remote_git_repo.<name>``, so concurrent builds in other threads or processes
never clone or fetch the same mirror at the same time. A failed clone removes
whatever it wrote: the mirror directory either holds a complete clone or does
not exist.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from dulwich.objects import Commit

from repocache.config import get_remote_repo_dir, is_dry_run
from repocache.constants import (
    CACHE_VERSION,
    DEFAULT_BRANCH,
    LOCK_PREFIX,
    REMOTE_NAME,
    UrlProtocol,
)
from repocache.git.backend import DulwichBackend
from repocache.git.credentials import resolve_credentials
from repocache.git.exceptions import (
    BranchNotFoundError,
    CommitNotFoundError,
    ProtocolNotSupported,
    RemoteConnectionError,
)
from repocache.git.repo import GitRepository
from repocache.git.urls import url_protocol
from repocache.git.lock import LockManager

logger = logging.getLogger(__name__)

_UNRESOLVED = object()


def strip_remote_prefix(name: str, remote: str = REMOTE_NAME) -> str:
    """Drop one leading ``<remote>/`` from a branch name."""
    prefix = f"{remote}/"
    if name.startswith(prefix):
        return name[len(prefix) :]
    return name


def branch_format(name: str, remote: str = REMOTE_NAME) -> str:
    """
    Format a branch as a remote-tracking branch name.

    Examples:
        main -> origin/main
        origin/main -> origin/main
    """
    return f"{remote}/{strip_remote_prefix(name, remote)}"


class RemoteRepository(GitRepository):
    """
    Bare local mirror of a remote repository.

    Constructing the object clones the remote unless the mirror directory
    already exists; existence is the only freshness check at that point.
    Use `fetch` to bring a branch up to date.
    """

    def __init__(
        self,
        name: str,
        url: str,
        cache_dir: Optional[Path] = None,
        backend: Optional[DulwichBackend] = None,
        lock_manager: Optional[LockManager] = None,
        dry_run: Optional[bool] = None,
    ):
        """
        Args:
            name: Logical repository name; determines the mirror path and lock
            url: Remote URL
            cache_dir: Base cache directory (defaults to the configured one)
            backend: Git backend (defaults to a new DulwichBackend)
            lock_manager: Named lock service (defaults to a new LockManager)
            dry_run: Skip fetching (defaults to the configured run mode)

        Raises:
            LockTimeout: If the repository lock cannot be acquired
            ProtocolNotSupported: If the backend cannot reach the URL's protocol
            RemoteConnectionError: If cloning fails
        """
        super().__init__(
            name, get_remote_repo_dir(name, CACHE_VERSION, cache_dir), backend
        )
        self._url = url
        self._credentials = _UNRESOLVED
        self.lock_manager = lock_manager if lock_manager is not None else LockManager()
        self.dry_run = is_dry_run() if dry_run is None else dry_run

        if not self.exists():
            self._clone()

    @property
    def url(self) -> str:
        return self._url

    @property
    def lock_name(self) -> str:
        return f"{LOCK_PREFIX}.{self.name}"

    @property
    def credentials(self):
        """Credentials for the remote, resolved on first use."""
        if self._credentials is _UNRESOLVED:
            self._credentials = resolve_credentials(self.url)
        return self._credentials

    @property
    def default_branch(self) -> str:
        """Branch the mirror's HEAD points at, i.e. the remote's default branch."""
        return self.backend.head_branch(self.path) or DEFAULT_BRANCH

    def _with_lock(self):
        return self.lock_manager.lock(self.lock_name)

    def _clone(self) -> None:
        with self._with_lock():
            # Another thread or process may have cloned while we waited
            if self.exists():
                logger.debug(f"Mirror of {self.url} already present at {self.path}")
                return

            protocol = url_protocol(self.url)
            if protocol in (UrlProtocol.SSH, UrlProtocol.HTTPS):
                if not self.backend.supports(protocol):
                    raise ProtocolNotSupported(self.url, protocol.value)

            logger.info(f"Cloning {self.url} to {self.path}")
            try:
                try:
                    self.backend.clone_bare(self.url, self.path, self.credentials)
                except self.backend.remote_errors as e:
                    raise RemoteConnectionError(self.url, str(e).strip()) from e
            except BaseException:
                self._discard_partial_clone()
                raise

    def _discard_partial_clone(self) -> None:
        if self.path.exists():
            logger.warning(f"Removing incomplete clone at {self.path}")
            shutil.rmtree(self.path, ignore_errors=True)

    def _migrate_remote_url(self) -> None:
        old_url = self.backend.get_remote_url(self.path, REMOTE_NAME)
        if old_url and old_url != self.url:
            logger.info(f"Updating remote '{REMOTE_NAME}' url: {old_url} -> {self.url}")
            self.backend.set_remote_url(self.path, REMOTE_NAME, self.url)

    def fetch(self, branch: Optional[str] = None, ignore_fetch: bool = False) -> None:
        """
        Fetch one branch from the remote.

        Does nothing when `ignore_fetch` is set or in dry-run mode.

        Args:
            branch: Branch to fetch (defaults to the remote's default branch)
            ignore_fetch: Skip fetching

        Raises:
            LockTimeout: If the repository lock cannot be acquired
            RemoteConnectionError: If the fetch fails on the transport level
            BranchNotFoundError: If the remote does not have the branch
        """
        if ignore_fetch or self.dry_run:
            logger.debug(f"Skipping fetch of {self.url}")
            return

        with self._with_lock():
            if branch is None:
                branch = self.default_branch
            branch = strip_remote_prefix(branch)

            self._migrate_remote_url()

            logger.info(f"Fetching {self.url} ({branch})")
            try:
                fetched = self.backend.fetch(
                    self.path, REMOTE_NAME, [branch], self.credentials
                )
            except self.backend.remote_errors as e:
                raise RemoteConnectionError(self.url, str(e).strip()) from e

            if branch not in fetched or not self.branch_exists(branch):
                raise BranchNotFoundError(branch, self.url)

    def branch_exists(self, name: str) -> bool:
        return self.backend.branch_exists(self.path, branch_format(name))

    def branches(self) -> list:
        """Branches present as remote-tracking refs in the mirror."""
        return self.backend.list_branches(self.path, REMOTE_NAME)

    def latest_commit(self, name: str) -> str:
        """
        Commit id the remote-tracking branch `name` points at.

        Raises:
            BranchNotFoundError: If the mirror has no such branch
        """
        try:
            return self.backend.resolve_ref(
                self.path, f"refs/remotes/{branch_format(name)}"
            )
        except KeyError as e:
            raise BranchNotFoundError(strip_remote_prefix(name), self.url) from e

    def lookup_commit(self, commit: str) -> Commit:
        """
        Raises:
            CommitNotFoundError: If the mirror does not hold the commit
        """
        try:
            return super().lookup_commit(commit)
        except self.backend.object_errors as e:
            raise CommitNotFoundError(commit, self.url) from e
