"""
Git repository cache.

Keeps one bare mirror per remote repository under
``<cache dir>/remote_git_repo/<cache version>/<name>`` and resolves branches
and commits against it. Mirrors are obtained through a `RepositoryRegistry`,
which deduplicates requests for the same remote and serializes clones and
fetches.
"""

from .exceptions import (
    GitCacheError,
    ProtocolNotSupported,
    RemoteConnectionError,
    BranchNotFoundError,
    CommitNotFoundError,
    LockTimeout,
)
from .lock import LockManager
from .credentials import SshAgentCredentials, resolve_credentials
from .urls import parse_repo_url, url_protocol
from .repo import GitRepository
from .remote import RemoteRepository, branch_format
from .registry import RegistryKey, RepositoryRegistry, get_registry
from .cleanup import cleanup_cache, describe_cache

__all__ = [
    # Errors
    "GitCacheError",
    "ProtocolNotSupported",
    "RemoteConnectionError",
    "BranchNotFoundError",
    "CommitNotFoundError",
    "LockTimeout",
    # Locks, URLs and credentials
    "LockManager",
    "SshAgentCredentials",
    "resolve_credentials",
    "parse_repo_url",
    "url_protocol",
    # Repositories
    "GitRepository",
    "RemoteRepository",
    "branch_format",
    "RegistryKey",
    "RepositoryRegistry",
    "get_registry",
    # Housekeeping
    "cleanup_cache",
    "describe_cache",
]
