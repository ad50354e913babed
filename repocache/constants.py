from enum import Enum


class UrlProtocol(Enum):
    SSH = "ssh"
    HTTPS = "https"
    HTTP = "http"
    GIT = "git"
    FILE = "file"
    OTHER = "other"


# Bump to invalidate every mirror created by an older layout
CACHE_VERSION = 1

REMOTE_REPO_DIR = "remote_git_repo"
LOCK_PREFIX = "remote_git_repo"

REMOTE_NAME = "origin"
DEFAULT_BRANCH = "master"

# seconds
DEFAULT_LOCK_TIMEOUT = 120
