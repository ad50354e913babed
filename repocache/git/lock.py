"""
Named advisory locks shared between threads and processes.

Every lock name maps to one lock file in the lock directory. The file lock
excludes other processes as well as other threads of this process, so all
clone and fetch operations on the same mirror are totally ordered.
"""

import hashlib
import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from repocache.config import get_lock_dir, get_lock_timeout
from repocache.git.exceptions import LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Hands out named locks backed by lock files.

    Usage:
        locks = LockManager()
        with locks.lock("remote_git_repo.github.com/user/repo"):
            ...
    """

    def __init__(
        self,
        lock_dir: Optional[Path] = None,
        default_timeout: Optional[float] = None,
    ):
        """
        Args:
            lock_dir: Directory for lock files (defaults to the configured one)
            default_timeout: Seconds to wait for a lock (defaults to the configured one)
        """
        self.lock_dir = Path(lock_dir) if lock_dir is not None else get_lock_dir()
        self.default_timeout = (
            default_timeout if default_timeout is not None else get_lock_timeout()
        )

    def lock_path(self, name: str) -> Path:
        """
        Path of the lock file for `name`.

        Names may contain path separators, so the readable part is sanitized
        and a short digest keeps distinct names apart.
        """
        readable = re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_")
        digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:12]
        return self.lock_dir / f"{readable}.{digest}.lock"

    @contextmanager
    def lock(self, name: str, timeout: Optional[float] = None):
        """
        Hold the named lock for the duration of the block.

        Args:
            name: Lock name
            timeout: Seconds to wait before giving up (defaults to `default_timeout`)

        Raises:
            LockTimeout: If the lock cannot be acquired within the timeout
        """
        if timeout is None:
            timeout = self.default_timeout

        self.lock_dir.mkdir(parents=True, exist_ok=True)
        file_lock = FileLock(self.lock_path(name), timeout=timeout)

        try:
            file_lock.acquire()
        except Timeout as e:
            raise LockTimeout(name, timeout) from e

        logger.debug(f"Acquired lock {name}")
        try:
            yield
        finally:
            file_lock.release()
            logger.debug(f"Released lock {name}")
