from pathlib import Path
from typing import Optional

from dulwich.objects import Commit

from repocache.git.backend import DulwichBackend


class GitRepository:
    """A named git repository on local disk."""

    def __init__(self, name: str, path: Path, backend: Optional[DulwichBackend] = None):
        self.name = name
        self.path = Path(path)
        self.backend = backend if backend is not None else DulwichBackend()

    def exists(self) -> bool:
        return self.path.is_dir()

    def lookup_commit(self, commit: str) -> Commit:
        """
        Look up a commit in the local object store.

        Args:
            commit: Full or abbreviated commit id, or a ref name

        Raises:
            KeyError: If the commit is not in the object store
            ValueError: If the id names an object that is not a commit
        """
        return self.backend.lookup_object(self.path, commit)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, path='{self.path}')"
