"""
Policy loading: read the policy file, consult the cache gate, compile on miss.

PolicyStore keeps the live index for a process. Reload builds a new index
and swaps the reference, so concurrent authorize() calls always see one
complete snapshot.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Iterable, Optional, Union

from .cache import policy_hash, read_cached_index, write_cached_index
from .errors import IndexNotLoaded, PolicyError, PolicyReadError
from .index import AuthorizationIndex
from .policy import parse_policy
from .resources import compile_resources
from .roles import compile_roles

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def compile_policy(raw: bytes) -> AuthorizationIndex:
    """Parse and fully compile raw policy bytes. Raises PolicyError subclasses."""
    policy = parse_policy(raw)
    try:
        roles = compile_roles(policy.roles)
    except PolicyError:
        logger.error("Failed to compile roles")
        raise
    try:
        users, groups = compile_resources(policy.resources, roles)
    except PolicyError:
        logger.error("Failed to compile resources")
        raise
    return AuthorizationIndex.build(policy_hash(raw), roles, users, groups)


def log_metrics(index: AuthorizationIndex) -> None:
    m = index.metrics()
    logger.info(
        "Metrics: %d roles (%d bytes), %d groups (%d bytes), %d users (%d bytes)",
        m["roles"], m["roles_bytes"],
        m["groups"], m["groups_bytes"],
        m["users"], m["users_bytes"],
    )


def load_index(policy_path: PathLike, cache_path: Optional[PathLike] = None) -> AuthorizationIndex:
    """
    Load the authorization index for the policy at policy_path.

    When cache_path is given, a cached index compiled from identical policy
    bytes is reused; otherwise the policy is compiled and the result written
    back to cache_path (best effort). With no cache_path nothing is read or
    written besides the policy file.
    """
    logger.info("Loading access control rules from %s...", policy_path)
    try:
        raw = Path(policy_path).read_bytes()
    except OSError as e:
        raise PolicyReadError(f"Failed to read policy file: {e}") from e

    source_hash = policy_hash(raw)
    if cache_path is not None:
        cached = read_cached_index(cache_path, source_hash)
        if cached is not None:
            log_metrics(cached)
            return cached

    start = time.perf_counter()
    index = compile_policy(raw)
    logger.info("Policy processing completed. Took %.3f ms", (time.perf_counter() - start) * 1000)

    if cache_path is not None:
        write_cached_index(cache_path, index)

    log_metrics(index)
    return index


class PolicyStore:
    """Holds the current AuthorizationIndex and swaps it atomically on reload."""

    def __init__(self, policy_path: PathLike, cache_path: Optional[PathLike] = None):
        self.policy_path = policy_path
        self.cache_path = cache_path
        self._lock = threading.Lock()
        self._index: Optional[AuthorizationIndex] = None

    @property
    def index(self) -> AuthorizationIndex:
        """The live snapshot. Never compiles; call reload() first."""
        index = self._index
        if index is None:
            raise IndexNotLoaded(f"No authorization index loaded for {self.policy_path}; call reload() first")
        return index

    def reload(self) -> AuthorizationIndex:
        """Build a fresh index; on failure the previous index stays live and the error propagates."""
        with self._lock:
            index = load_index(self.policy_path, self.cache_path)
            self._index = index
        return index

    def authorize(self, user: str, groups: Iterable[str], resource: str, permission: str) -> bool:
        return self.index.authorize(user, groups, resource, permission)
