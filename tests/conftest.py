import io
import logging
from pathlib import Path

import pytest
from dulwich import porcelain
from dulwich.repo import Repo

from repocache.git import LockManager, RepositoryRegistry

AUTHOR = b"Test <test@test>"


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("repocache")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


def commit_file(repo_dir: Path, name: str, content: str, message: str) -> str:
    """Write a file into a working tree repository and commit it."""
    (repo_dir / name).write_text(content)
    porcelain.add(str(repo_dir), paths=[str(repo_dir / name)])
    sha = porcelain.commit(
        str(repo_dir),
        message=message.encode("utf-8"),
        author=AUTHOR,
        committer=AUTHOR,
    )
    return sha.decode("ascii")


class SourceRepo:
    """A local repository standing in for a remote."""

    def __init__(self, path: Path):
        self.path = path
        self.url = str(path)

    def commit(self, name: str, content: str, message: str = "update") -> str:
        return commit_file(self.path, name, content, message)

    def create_branch(self, name: str) -> None:
        porcelain.branch_create(str(self.path), name)

    def delete_branch(self, name: str) -> None:
        porcelain.branch_delete(str(self.path), name)

    def head(self, branch: str = "main") -> str:
        with Repo(str(self.path)) as repo:
            return repo.refs[f"refs/heads/{branch}".encode()].decode("ascii")


@pytest.fixture
def source_repo(tmp_path) -> SourceRepo:
    """Local repository with a `main` branch and a `develop` branch."""
    repo_dir = tmp_path / "remote" / "project"
    repo_dir.mkdir(parents=True)
    with porcelain.init(str(repo_dir)) as repo:
        repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    source = SourceRepo(repo_dir)
    source.commit("hello.txt", "hello", "initial commit")
    source.create_branch("develop")
    return source


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def lock_manager(tmp_path) -> LockManager:
    return LockManager(tmp_path / "locks", default_timeout=10)


@pytest.fixture
def registry(cache_dir, lock_manager) -> RepositoryRegistry:
    return RepositoryRegistry(
        cache_dir=cache_dir, lock_manager=lock_manager, dry_run=False
    )
