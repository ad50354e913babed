"""
Git backend built on dulwich.

The backend performs the git object-store operations the cache needs and
nothing more: bare clone, fetch of single branches, ref and object lookup and
access to the remote section of a mirror's config. It raises dulwich's own
exceptions; translating them is up to the callers.
"""

import importlib.util
import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

import urllib3.exceptions
from dulwich import porcelain
from dulwich.client import HTTPProxyUnauthorized, HTTPUnauthorized
from dulwich.client import get_transport_and_path
from dulwich.errors import GitProtocolError, NotGitRepository
from dulwich.objects import ShaFile
from dulwich.objectspec import AmbiguousShortId, parse_commit
from dulwich.repo import Repo

from repocache.constants import UrlProtocol

logger = logging.getLogger(__name__)


def _transport_kwargs(credentials) -> dict:
    if credentials is None:
        return {}
    return credentials.transport_kwargs()


def _hex(sha: bytes) -> str:
    if len(sha) == 20:
        return sha.hex()
    return sha.decode("ascii")


class DulwichBackend:
    """Git object-store operations against bare mirrors on disk."""

    # Failures meaning the remote could not be reached or talked to
    remote_errors = (
        GitProtocolError,
        HTTPUnauthorized,
        HTTPProxyUnauthorized,
        NotGitRepository,
        urllib3.exceptions.HTTPError,
        OSError,
    )

    # Failures meaning a requested object is missing or of the wrong type
    object_errors = (KeyError, ValueError, TypeError, AmbiguousShortId)

    def supports(self, protocol: UrlProtocol) -> bool:
        """
        Whether remotes can be reached over `protocol` on this host.

        ssh goes through the system ssh client; https needs an interpreter
        built with ssl support.
        """
        if protocol == UrlProtocol.SSH:
            return shutil.which("ssh") is not None
        if protocol == UrlProtocol.HTTPS:
            return importlib.util.find_spec("ssl") is not None
        return True

    def clone_bare(self, url: str, path: Path, credentials=None) -> None:
        """
        Bare-clone `url` into `path`.

        dulwich removes the target directory again if the clone fails; the
        parent directory is created here.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"porcelain.clone {url} -> {path} (bare)")
        repo = porcelain.clone(
            source=url,
            target=str(path),
            bare=True,
            checkout=False,
            **_transport_kwargs(credentials),
        )
        repo.close()

    def fetch(
        self,
        path: Path,
        remote_name: str,
        branches: Iterable[str],
        credentials=None,
    ) -> List[str]:
        """
        Fetch exactly `branches` from the remote named `remote_name`.

        Remote-tracking refs ``refs/remotes/<remote>/<branch>`` are updated for
        every branch the remote advertises and removed for the ones it no
        longer has.

        Returns:
            The branches the remote advertised
        """
        wanted = {f"refs/heads/{b}".encode("utf-8"): b for b in branches}

        with Repo(str(path)) as repo:
            url = self.get_remote_url(path, remote_name)
            client, remote_path = get_transport_and_path(
                url,
                config=repo.get_config_stack(),
                **_transport_kwargs(credentials),
            )

            def determine_wants(refs, depth=None):
                return [
                    sha
                    for ref, sha in refs.items()
                    if ref in wanted and sha and sha not in repo.object_store
                ]

            result = client.fetch(
                remote_path.encode("utf-8"),
                repo,
                determine_wants=determine_wants,
                ref_prefix=list(wanted),
            )

            fetched = []
            for ref, branch in wanted.items():
                tracking_ref = f"refs/remotes/{remote_name}/{branch}".encode("utf-8")
                sha = result.refs.get(ref)
                if sha is None:
                    # Gone upstream: drop the stale tracking ref
                    if tracking_ref in repo.refs:
                        logger.debug(f"Pruning {tracking_ref.decode()} in {path}")
                        del repo.refs[tracking_ref]
                    continue
                repo.refs[tracking_ref] = sha
                fetched.append(branch)

            logger.debug(f"Fetched {fetched} from {url} into {path}")
            return fetched

    def branch_exists(self, path: Path, formatted_name: str) -> bool:
        """Check a remote-tracking branch given as ``<remote>/<branch>``."""
        with Repo(str(path)) as repo:
            return f"refs/remotes/{formatted_name}".encode("utf-8") in repo.refs

    def resolve_ref(self, path: Path, ref_path: str) -> str:
        """
        Resolve a full ref name to the hex id of its target.

        Raises:
            KeyError: If the ref does not exist
        """
        with Repo(str(path)) as repo:
            return _hex(repo.refs[ref_path.encode("utf-8")])

    def lookup_object(self, path: Path, object_id: str) -> ShaFile:
        """
        Look up a commit by id, short id or ref name.

        Raises:
            KeyError: If no such object exists
            ValueError: If the object is not a commit
            AmbiguousShortId: If a short id matches several commits
        """
        with Repo(str(path)) as repo:
            return parse_commit(repo, object_id.encode("ascii"))

    def head_branch(self, path: Path) -> Optional[str]:
        """Branch the mirror's HEAD points at, or None for a detached HEAD."""
        with Repo(str(path)) as repo:
            target = repo.refs.get_symrefs().get(b"HEAD")
        if target is None or not target.startswith(b"refs/heads/"):
            return None
        return target[len(b"refs/heads/") :].decode("utf-8")

    def get_remote_url(self, path: Path, remote_name: str) -> Optional[str]:
        with Repo(str(path)) as repo:
            cfg = repo.get_config()
            try:
                url = cfg.get((b"remote", remote_name.encode("utf-8")), b"url")
            except KeyError:
                return None
        return url.decode("utf-8") if url else None

    def set_remote_url(self, path: Path, remote_name: str, url: str) -> None:
        with Repo(str(path)) as repo:
            cfg = repo.get_config()
            cfg.set((b"remote", remote_name.encode("utf-8")), b"url", url.encode())
            cfg.write_to_path()

    def list_branches(self, path: Path, remote_name: str) -> List[str]:
        prefix = f"refs/remotes/{remote_name}/".encode("utf-8")
        with Repo(str(path)) as repo:
            return sorted(
                ref[len(prefix) :].decode("utf-8")
                for ref in repo.refs.keys()
                if ref.startswith(prefix) and ref != prefix + b"HEAD"
            )
