"""Helpers to classify and name remote repository URLs."""

import re
from urllib.parse import urlparse

from repocache.constants import UrlProtocol

_SCP_LIKE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>.*)$")

_SCHEMES = {
    "ssh": UrlProtocol.SSH,
    "git+ssh": UrlProtocol.SSH,
    "ssh+git": UrlProtocol.SSH,
    "https": UrlProtocol.HTTPS,
    "http": UrlProtocol.HTTP,
    "git": UrlProtocol.GIT,
    "file": UrlProtocol.FILE,
}


def is_scp_like(url: str) -> bool:
    """
    Check for the scp-like ssh syntax, e.g. ``git@github.com:user/repo.git``.

    A single letter before the colon is a Windows drive, not a host.
    """
    if "://" in url:
        return False
    match = _SCP_LIKE.match(url)
    return bool(match) and len(match.group("host")) > 1


def url_protocol(url: str) -> UrlProtocol:
    """
    Determine the transport protocol of a repository URL.

    Examples:
        git@github.com:user/repo.git -> SSH
        ssh://git@github.com/user/repo.git -> SSH
        https://github.com/user/repo.git -> HTTPS
        /srv/git/repo.git -> FILE
    """
    url = url.strip()
    if "://" in url:
        scheme = url.split("://", 1)[0].lower()
        return _SCHEMES.get(scheme, UrlProtocol.OTHER)
    if is_scp_like(url):
        return UrlProtocol.SSH
    return UrlProtocol.FILE


def url_username(url: str):
    """
    Extract the user component preceding the host of a URL, or None if absent.

    Examples:
        git@github.com:user/repo.git -> "git"
        ssh://bob@host:2222/repo.git -> "bob"
        github.com:user/repo.git -> None
    """
    url = url.strip()
    if is_scp_like(url):
        return _SCP_LIKE.match(url).group("user")
    return urlparse(url).username


def _clean_name(name: str) -> str:
    # Mirror names are relative paths below the cache version directory
    parts = [p for p in name.replace("\\", "/").split("/") if p not in ("", ".", "..")]
    return "/".join(parts)


def parse_repo_url(url: str) -> str:
    """
    Parse a git repository URL into a Go-style logical name.

    Empty, ``.`` and ``..`` path segments are dropped, so the name always
    stays below the cache directory.

    Examples:
        https://github.com/user/repo.git -> github.com/user/repo
        git@github.com:user/repo.git -> github.com/user/repo
        ssh://git@gitlab.com:2222/group/project -> gitlab.com/group/project
        https://gitlab.com/group/subgroup/project -> gitlab.com/group/subgroup/project
        https://host/../../repo -> host/repo

    Args:
        url: Git repository URL

    Returns:
        Path-like string (e.g., "github.com/user/repo")
    """
    # Remove .git suffix if present
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]

    if is_scp_like(url):
        match = _SCP_LIKE.match(url)
        return _clean_name(f"{match.group('host')}/{match.group('path')}")

    parsed = urlparse(url)
    if parsed.scheme == "file":
        return _clean_name(parsed.path)
    if parsed.hostname and parsed.path:
        return _clean_name(f"{parsed.hostname}/{parsed.path}")

    # Local paths and anything unusual: keep a relative, colon-free name
    return _clean_name(url.replace("://", "/").replace(":", "/"))
