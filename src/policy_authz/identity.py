"""
Request identity helpers and FastAPI dependencies.

The caller's user name and groups are taken from request headers set by an
upstream component (gateway, proxy) that already authenticated the caller;
this module does no authentication of its own. Dependency factories protect
routes with a permission on a resource: require_permission and
require_any_permission.
"""

from typing import List, Optional, Tuple

from fastapi import HTTPException, Request

from .config import AuthzSettings
from .loader import PolicyStore


def get_identity(request: Request, settings: AuthzSettings) -> Tuple[Optional[str], List[str]]:
    """Return (user, groups) from the identity headers; user is None when absent."""
    user = request.headers.get(settings.user_header) or None
    raw_groups = request.headers.get(settings.groups_header, "")
    groups = [g.strip() for g in raw_groups.split(",") if g.strip()]
    return user, groups


def require_permission(store: PolicyStore, settings: AuthzSettings, resource: str, permission: str):
    """
    Dependency: caller must hold `permission` on `resource`.
    Use as: Depends(require_permission(store, settings, "reports", "read")).
    """

    async def _dep(request: Request):
        user, groups = get_identity(request, settings)
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        if not store.authorize(user, groups, resource, permission):
            raise HTTPException(status_code=403, detail="Forbidden (missing permission)")
        return user

    return _dep


def require_any_permission(store: PolicyStore, settings: AuthzSettings, resource: str, *permissions: str):
    """Dependency: caller must hold at least one of the given permissions on `resource` (OR semantics)."""
    required = [p for p in permissions if p]

    async def _dep(request: Request):
        user, groups = get_identity(request, settings)
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        index = store.index
        if not any(index.authorize(user, groups, resource, p) for p in required):
            raise HTTPException(status_code=403, detail="Forbidden (no acceptable permission)")
        return user

    return _dep
