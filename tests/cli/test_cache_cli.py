"""Tests for the repocache command line."""

import pytest
from click.testing import CliRunner

from repocache import __version__
from repocache.cli.main import cli
from repocache.git import RemoteRepository


@pytest.fixture
def run_cli(cache_dir):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, ["--cache-dir", str(cache_dir), *args], obj={})

    return _run


@pytest.mark.short
class TestFetchCommand:
    def test_fetch_prints_path_and_commit(self, run_cli, source_repo, cache_dir):
        result = run_cli("fetch", source_repo.url, "--branch", "main", "--name", "project")

        assert result.exit_code == 0, result.output
        mirror = cache_dir / "remote_git_repo" / "1" / "project"
        assert str(mirror) in result.output
        assert f"main {source_repo.head('main')}" in result.output
        assert (mirror / "HEAD").is_file()

    def test_fetch_default_branch(self, run_cli, source_repo):
        result = run_cli("fetch", source_repo.url, "--name", "project")

        assert result.exit_code == 0, result.output
        assert f"main {source_repo.head('main')}" in result.output

    def test_fetch_default_branch_builds_one_repository(
        self, run_cli, source_repo, monkeypatch
    ):
        built = []

        class RecordingRemoteRepository(RemoteRepository):
            def __init__(self, *args, **kwargs):
                built.append(args[0])
                super().__init__(*args, **kwargs)

        monkeypatch.setattr(
            "repocache.git.registry.RemoteRepository", RecordingRemoteRepository
        )

        result = run_cli("fetch", source_repo.url, "--name", "project")

        assert result.exit_code == 0, result.output
        assert built == ["project"]

    def test_fetch_missing_branch_fails(self, run_cli, source_repo):
        result = run_cli(
            "fetch", source_repo.url, "--branch", "nope", "--name", "project"
        )

        assert result.exit_code == 1

    def test_no_fetch_keeps_stale_mirror(self, run_cli, source_repo):
        run_cli("fetch", source_repo.url, "-b", "main", "-n", "project")
        old = source_repo.head("main")
        source_repo.commit("hello.txt", "newer")

        result = run_cli("fetch", source_repo.url, "-b", "main", "-n", "project", "--no-fetch")

        assert result.exit_code == 0, result.output
        assert f"main {old}" in result.output


@pytest.mark.short
class TestResolveCommand:
    def test_resolve_commit(self, run_cli, source_repo):
        sha = source_repo.head("main")

        result = run_cli("resolve", source_repo.url, sha[:8], "--name", "project")

        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"{sha} initial commit"

    def test_resolve_missing_commit(self, run_cli, source_repo):
        result = run_cli("resolve", source_repo.url, "0" * 40, "--name", "project")

        assert result.exit_code == 1


@pytest.mark.short
class TestDescribeAndCleanup:
    def test_describe_lists_mirrors(self, run_cli, source_repo):
        run_cli("fetch", source_repo.url, "-b", "main", "-n", "local/project")

        result = run_cli("describe")

        assert result.exit_code == 0, result.output
        assert "local/project" in result.output
        assert "develop, main" in result.output

    def test_cleanup(self, run_cli, cache_dir):
        outdated = cache_dir / "remote_git_repo" / "0" / "github.com" / "user" / "repo"
        outdated.mkdir(parents=True)

        dry = run_cli("cleanup", "--dry-run")
        assert dry.exit_code == 0, dry.output
        assert outdated.exists()

        result = run_cli("cleanup")
        assert result.exit_code == 0, result.output
        assert not (cache_dir / "remote_git_repo" / "0").exists()


@pytest.mark.short
def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
