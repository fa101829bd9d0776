"""
Policy compiler and authorization index.

Exposes the compiler (compile_policy, compile_roles, compile_resources), the
compiled AuthorizationIndex, the cache gate (policy_hash, read/write cached
index), load orchestration (load_index, PolicyStore), settings, and the
FastAPI router factory and dependencies.
"""

from .cache import policy_hash, read_cached_index, write_cached_index
from .config import AuthzSettings, load_settings
from .errors import (
    AuthzError,
    IndexNotLoaded,
    InheritanceCycle,
    MalformedIndex,
    MalformedPolicy,
    PolicyError,
    PolicyReadError,
    UnknownRole,
)
from .identity import get_identity, require_any_permission, require_permission
from .index import AuthorizationIndex, IndexSnapshot
from .loader import PolicyStore, compile_policy, load_index
from .policy import Policy, RoleDefinition, RoleGrant, parse_policy
from .resources import compile_resources
from .roles import compile_roles
from .router import create_authz_router
from .sets import PermissionSet

__all__ = [
    "AuthorizationIndex",
    "AuthzError",
    "AuthzSettings",
    "IndexNotLoaded",
    "IndexSnapshot",
    "InheritanceCycle",
    "MalformedIndex",
    "MalformedPolicy",
    "PermissionSet",
    "Policy",
    "PolicyError",
    "PolicyReadError",
    "PolicyStore",
    "RoleDefinition",
    "RoleGrant",
    "UnknownRole",
    "compile_policy",
    "compile_resources",
    "compile_roles",
    "create_authz_router",
    "get_identity",
    "load_index",
    "load_settings",
    "parse_policy",
    "policy_hash",
    "read_cached_index",
    "require_any_permission",
    "require_permission",
    "write_cached_index",
]
