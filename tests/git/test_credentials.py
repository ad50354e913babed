import pytest

from repocache.git import SshAgentCredentials, resolve_credentials


@pytest.mark.short
class TestResolveCredentials:
    def test_ssh_uses_agent_with_url_user(self):
        creds = resolve_credentials("git@github.com:user/repo.git")

        assert creds == SshAgentCredentials(username="git")
        assert creds.transport_kwargs() == {"username": "git"}

    def test_ssh_url_scheme(self):
        assert resolve_credentials("ssh://deploy@example.com/repo.git") == (
            SshAgentCredentials(username="deploy")
        )

    def test_ssh_without_user_leaves_default_to_ssh(self):
        creds = resolve_credentials("ssh://example.com/repo.git")

        assert creds == SshAgentCredentials(username=None)
        assert creds.transport_kwargs() == {}

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/user/repo.git",
            "http://example.com/repo.git",
            "/srv/git/repo.git",
        ],
    )
    def test_other_protocols_are_anonymous(self, url):
        assert resolve_credentials(url) is None
