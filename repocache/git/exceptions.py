"""
Exception classes for the git cache.
"""


class GitCacheError(Exception):
    """Base exception for all git cache errors."""

    pass


class ProtocolNotSupported(GitCacheError):
    """Raised when the git backend cannot talk to a remote over its protocol."""

    def __init__(self, url: str, protocol: str):
        self.url = url
        self.protocol = protocol
        super().__init__(
            f"Protocol '{protocol}' is not supported by the git backend "
            f"(remote repository {url})"
        )


class RemoteConnectionError(GitCacheError):
    """Raised when a clone or fetch fails on the network, TLS or OS level."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"Remote git repository {url} error: {message}")


class BranchNotFoundError(GitCacheError):
    """Raised when a branch is not present in the remote repository."""

    def __init__(self, branch: str, url: str):
        self.branch = branch
        self.url = url
        super().__init__(
            f"Branch '{branch}' does not exist in remote git repository {url}"
        )


class CommitNotFoundError(GitCacheError):
    """Raised when a commit cannot be found in a cached remote repository."""

    def __init__(self, commit: str, url: str):
        self.commit = commit
        self.url = url
        super().__init__(
            f"Commit '{commit}' not found in remote git repository {url}"
        )


class LockTimeout(GitCacheError):
    """Raised when a named lock cannot be acquired in time."""

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(
            f"Could not acquire lock '{name}': timeout after {timeout} seconds"
        )
