"""
Cache validity gate for compiled indexes.

Decisions:
- Validity is an exact match between the SHA-256 of the raw source policy
  bytes and the `source_policy_hash` stored in the cached index. The hash of
  the cache file itself is never used.
- Reading the cache never raises: a missing, unreadable, undecodable or
  stale cache means "recompile".
- Writing the cache never raises either; the caller keeps the in-memory index.
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import MalformedIndex
from .index import AuthorizationIndex

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def policy_hash(raw: bytes) -> str:
    """Hex SHA-256 digest of the source policy bytes."""
    return hashlib.sha256(raw).hexdigest()


def read_cached_index(path: PathLike, source_hash: str) -> Optional[AuthorizationIndex]:
    """Return the cached index at `path` if it was compiled from `source_hash`, else None."""
    path = Path(path)
    if not path.exists():
        logger.info("Cache file %s not found", path)
        return None

    logger.info("Cache file %s found, checking hash...", path)
    try:
        cached = AuthorizationIndex.from_json(path.read_bytes())
    except (OSError, MalformedIndex) as e:
        logger.warning("Ignoring unusable cache file %s: %s", path, e)
        return None

    if cached.source_policy_hash != source_hash:
        logger.info("Hash on cache file differs from policy hash, re-processing...")
        return None

    logger.info("Hash on cache file matches policy hash, using authz data from cache")
    return cached


def write_cached_index(path: PathLike, index: AuthorizationIndex) -> bool:
    """Persist index as JSON. Returns False (and logs) if the write fails."""
    path = Path(path)
    try:
        path.write_text(index.to_json(), encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to save authorizer to %s: %s", path, e)
        return False
    logger.info("Saved authorizer cache as %s", path)
    return True
