"""Tests for URL classification and naming."""

import pytest

from repocache.constants import UrlProtocol
from repocache.git import parse_repo_url, url_protocol
from repocache.git.urls import is_scp_like, url_username


@pytest.mark.short
class TestParseRepoUrl:
    """Test URL parsing for Go-style repository names."""

    def test_https_github(self):
        assert parse_repo_url("https://github.com/user/repo.git") == "github.com/user/repo"

    def test_https_github_no_git_suffix(self):
        assert parse_repo_url("https://github.com/user/repo") == "github.com/user/repo"

    def test_ssh_github(self):
        assert parse_repo_url("git@github.com:user/repo.git") == "github.com/user/repo"

    def test_ssh_url_with_port(self):
        url = "ssh://git@gitlab.com:2222/group/project.git"
        assert parse_repo_url(url) == "gitlab.com/group/project"

    def test_gitlab_nested(self):
        url = "https://gitlab.com/group/subgroup/project.git"
        assert parse_repo_url(url) == "gitlab.com/group/subgroup/project"

    def test_trailing_slash(self):
        assert parse_repo_url("https://github.com/user/repo/") == "github.com/user/repo"

    def test_credentials_not_in_name(self):
        url = "https://token@github.com/user/repo.git"
        assert parse_repo_url(url) == "github.com/user/repo"

    def test_local_path(self):
        assert parse_repo_url("/srv/git/repo.git") == "srv/git/repo"

    def test_file_url(self):
        assert parse_repo_url("file:///srv/git/repo.git") == "srv/git/repo"

    def test_parent_segments_stay_inside_cache(self):
        assert parse_repo_url("https://host/../../x") == "host/x"
        assert parse_repo_url("git@host:../../etc/repo.git") == "host/etc/repo"
        assert parse_repo_url("/srv/../../repo") == "srv/repo"

    def test_current_dir_segments_dropped(self):
        assert parse_repo_url("./repo") == "repo"


@pytest.mark.short
class TestUrlProtocol:
    @pytest.mark.parametrize(
        "url,protocol",
        [
            ("git@github.com:user/repo.git", UrlProtocol.SSH),
            ("github.com:user/repo.git", UrlProtocol.SSH),
            ("ssh://git@github.com/user/repo.git", UrlProtocol.SSH),
            ("git+ssh://git@github.com/user/repo.git", UrlProtocol.SSH),
            ("https://github.com/user/repo.git", UrlProtocol.HTTPS),
            ("HTTPS://github.com/user/repo.git", UrlProtocol.HTTPS),
            ("http://example.com/repo.git", UrlProtocol.HTTP),
            ("git://example.com/repo.git", UrlProtocol.GIT),
            ("file:///srv/git/repo.git", UrlProtocol.FILE),
            ("/srv/git/repo.git", UrlProtocol.FILE),
            ("./repo", UrlProtocol.FILE),
            ("svn://example.com/repo", UrlProtocol.OTHER),
        ],
    )
    def test_protocol(self, url, protocol):
        assert url_protocol(url) == protocol

    def test_windows_drive_is_not_scp_like(self):
        assert not is_scp_like("C:/work/repo")


@pytest.mark.short
class TestUrlUsername:
    def test_scp_like(self):
        assert url_username("git@github.com:user/repo.git") == "git"

    def test_ssh_url(self):
        assert url_username("ssh://bob@host:2222/repo.git") == "bob"

    def test_absent(self):
        assert url_username("github.com:user/repo.git") is None
        assert url_username("ssh://host/repo.git") is None
