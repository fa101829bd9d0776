"""
FastAPI authz router: /authorize, /index, /reload.

Builds an APIRouter around a PolicyStore that has already been loaded.
Queries are pure reads against the current index snapshot; /reload
recompiles (or reuses the cache) in a worker thread and swaps the snapshot.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from .config import AuthzSettings
from .errors import AuthzError
from .identity import require_permission
from .loader import PolicyStore

logger = logging.getLogger(__name__)


def create_authz_router(store: PolicyStore, settings: AuthzSettings):
    """Create an APIRouter with /authorize, /index and /reload endpoints."""
    router = APIRouter()

    @router.get("/authorize")
    async def authorize(
        user: str,
        resource: str,
        permission: str,
        group: List[str] = Query(default=[]),
    ):
        """Answer whether user (or any of the given groups) has permission on resource."""
        return {"allowed": store.authorize(user, group, resource, permission)}

    @router.get("/index")
    async def index_summary():
        """Return the source policy hash and entry counts of the live index."""
        index = store.index
        return {
            "source_policy_hash": index.source_policy_hash,
            "roles": len(index.roles),
            "users": len(index.users),
            "groups": len(index.groups),
        }

    # Sync handler: FastAPI runs it in the threadpool.
    @router.post("/reload")
    def reload(_=Depends(require_permission(store, settings, "authz", "reload"))):
        """Reload the policy; on failure the previous index keeps serving."""
        try:
            index = store.reload()
        except AuthzError as e:
            logger.error("Policy reload failed: %s", e)
            raise HTTPException(status_code=422, detail=str(e))
        return {"ok": True, "source_policy_hash": index.source_policy_hash}

    return router
