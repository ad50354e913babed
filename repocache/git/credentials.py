"""Authentication material for talking to remote repositories."""

from dataclasses import dataclass
from typing import Optional

from repocache.constants import UrlProtocol
from repocache.git.urls import url_protocol, url_username


@dataclass(frozen=True)
class SshAgentCredentials:
    """
    Identity served by the locally running SSH agent.

    Only the username is carried; keys are never read from disk and no
    passphrase is ever prompted for.
    """

    username: Optional[str] = None

    def transport_kwargs(self) -> dict:
        if self.username is None:
            return {}
        return {"username": self.username}


def resolve_credentials(url: str) -> Optional[SshAgentCredentials]:
    """
    Resolve credentials for a repository URL.

    ssh URLs authenticate through the agent as the user named in the URL
    (ssh picks its own default when the URL names none). Every other protocol
    is anonymous, so None is returned.
    """
    if url_protocol(url) == UrlProtocol.SSH:
        return SshAgentCredentials(username=url_username(url))
    return None
