"""Configuration of the local repository cache, lock directory and run mode"""

import configparser
import logging
import os
import platform
from typing import Optional, Any

from pathlib import Path

from repocache.constants import CACHE_VERSION, DEFAULT_LOCK_TIMEOUT, REMOTE_REPO_DIR

APP_NAME = "repocache"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")
xdg_cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(_home, ".cache")


default_cfg = {
    "dirs": {"cache": os.path.join(xdg_cache_home, APP_NAME)},
    "git": {"lock_timeout": str(DEFAULT_LOCK_TIMEOUT)},
    "run": {"dry_run": "false"},
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/repocache").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


def init_dirs():
    """Create the configuration directory if possible.

    A read-only home only produces a warning.
    """
    try:
        os.makedirs(config_dir, exist_ok=True)
    except OSError as e:
        logger.warning(f"Config directory {config_dir} not created: {e}")


class ConfigAccessor:
    """
    Read and write access to the repocache configuration file.

    Lookups of sections or keys that are not in the file return the supplied
    default instead of raising.

    Usage:
        config = ConfigAccessor()
        cache = config.get("dirs", "cache", default="~/.cache/repocache")
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Configuration file to use (defaults to the per-user file)
        """
        if config_path is not None:
            self.config_path = Path(config_path)
        else:
            init_dirs()
            self.config_path = get_config_file()

        self.config = configparser.ConfigParser()
        if self.config_path.is_file():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Raw string value of `key` in `section`, or `default`."""
        if not self.config.has_option(section, key):
            return default
        return self.config.get(section, key)

    def getboolean(self, section: str, key: str, default: bool = False) -> bool:
        """Boolean value of `key`, or `default` when missing or malformed."""
        try:
            return self.config.getboolean(section, key)
        except (configparser.Error, ValueError):
            return default

    def set(self, section: str, key: str, value: str) -> None:
        """Set `key` in `section`, creating the section on demand."""
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, value)

    def save(self) -> None:
        """
        Write the configuration back to `config_path`.

        An unwritable location only produces a warning; the in-memory values
        stay in effect for this process.
        """
        try:
            with open(self.config_path, "w") as fh:
                self.config.write(fh)
        except OSError as e:
            logger.warning(f"Configuration not saved to {self.config_path}: {e}")

    def sections(self) -> list:
        return self.config.sections()

    def options(self, section: str) -> list:
        if not self.config.has_section(section):
            return []
        return self.config.options(section)


# Process-wide configuration
config = ConfigAccessor()


def get_cache_dir() -> Path:
    """
    Get the configured base directory of the repository cache.

    Returns:
        Path to the cache directory (defaults to ~/.cache/repocache)
    """
    cache_dir_str = config.get("dirs", "cache", default_cfg["dirs"]["cache"])
    return Path(cache_dir_str).expanduser()


def get_lock_dir() -> Path:
    """
    Get the directory holding the named lock files.

    Returns:
        Path to the lock directory (defaults to <cache dir>/locks)
    """
    lock_dir_str = config.get("dirs", "locks")
    if lock_dir_str is None:
        return get_cache_dir() / "locks"
    return Path(lock_dir_str).expanduser()


def get_lock_timeout() -> float:
    """Get the named lock timeout in seconds."""
    value = config.get("git", "lock_timeout", default_cfg["git"]["lock_timeout"])
    try:
        return float(value)
    except ValueError:
        logger.warning(
            f"Invalid lock_timeout '{value}' in {config.config_path}, "
            f"using {DEFAULT_LOCK_TIMEOUT} seconds"
        )
        return float(DEFAULT_LOCK_TIMEOUT)


def is_dry_run() -> bool:
    """Whether fetching remote repositories is disabled for this process."""
    return config.getboolean("run", "dry_run", default=False)


def get_remote_repo_dir(
    name: str,
    cache_version: int = CACHE_VERSION,
    cache_dir: Optional[Path] = None,
) -> Path:
    """
    Map a repository's logical name to the path of its bare mirror.

    Structure:
        <cache dir>/remote_git_repo/<cache version>/<name>

    Args:
        name: Logical repository name (e.g. "github.com/user/repo")
        cache_version: Layout version of the cache
        cache_dir: Base cache directory (defaults to the configured one)

    Returns:
        Path of the mirror; the directory itself is not created
    """
    if cache_dir is None:
        cache_dir = get_cache_dir()
    return Path(cache_dir) / REMOTE_REPO_DIR / str(cache_version) / name
