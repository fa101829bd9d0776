"""
Compiled authorization index and the authorize() decision function.

The index is the flattened result of compiling a policy: role inheritance is
already resolved, so a query is a couple of dictionary lookups per identity.
Instances are immutable: the maps are read-only views over frozensets, and
indexes are not hashable. Reloading produces a new index.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping

from pydantic import BaseModel, Field, ValidationError

from .errors import MalformedIndex
from .sets import PermissionSet

FrozenGrants = Mapping[str, Mapping[str, FrozenSet[str]]]


class IndexSnapshot(BaseModel):
    """Serializable shape of an AuthorizationIndex (sets as sorted lists)."""

    source_policy_hash: str
    roles: Dict[str, List[str]] = Field(default_factory=dict)
    users: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)
    groups: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)


def has_permission_on_resource(
    identity: str,
    grants: Mapping[str, Mapping[str, FrozenSet[str]]],
    resource: str,
    permission: str,
) -> bool:
    """True if identity holds permission on resource; any missing level means False."""
    resource_perms = grants.get(identity)
    if resource_perms is None:
        return False
    perms = resource_perms.get(resource)
    if perms is None:
        return False
    return permission in perms


def _freeze_grants(grants: Mapping[str, Mapping[str, Iterable[str]]]) -> FrozenGrants:
    return MappingProxyType({
        identity: MappingProxyType({resource: frozenset(perms) for resource, perms in by_resource.items()})
        for identity, by_resource in grants.items()
    })


def _sorted_grants(grants: FrozenGrants) -> Dict[str, Dict[str, List[str]]]:
    return {
        identity: {resource: sorted(perms) for resource, perms in by_resource.items()}
        for identity, by_resource in grants.items()
    }


@dataclass(frozen=True)
class AuthorizationIndex:
    source_policy_hash: str
    roles: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    users: FrozenGrants = field(default_factory=dict)
    groups: FrozenGrants = field(default_factory=dict)

    # eq without hash: the maps are views, not hashable values.
    __hash__ = None

    def __post_init__(self):
        # Copy caller-supplied maps into read-only views.
        object.__setattr__(self, "roles", MappingProxyType({role: frozenset(perms) for role, perms in self.roles.items()}))
        object.__setattr__(self, "users", _freeze_grants(self.users))
        object.__setattr__(self, "groups", _freeze_grants(self.groups))

    @classmethod
    def build(
        cls,
        source_policy_hash: str,
        roles: Mapping[str, PermissionSet],
        users: Mapping[str, Mapping[str, PermissionSet]],
        groups: Mapping[str, Mapping[str, PermissionSet]],
    ) -> "AuthorizationIndex":
        """Freeze the compiler's mutable sets into a new index."""
        return cls(
            source_policy_hash=source_policy_hash,
            roles={role: perms.freeze() for role, perms in roles.items()},
            users={identity: {r: perms.freeze() for r, perms in grants.items()} for identity, grants in users.items()},
            groups={identity: {r: perms.freeze() for r, perms in grants.items()} for identity, grants in groups.items()},
        )

    def authorize(self, user: str, groups: Iterable[str], resource: str, permission: str) -> bool:
        """
        Check whether the user, or any of the given groups, has permission on resource.

        Cost: one lookup for the user plus one per group. Unknown users,
        groups, resources and permissions all simply yield False.
        """
        if has_permission_on_resource(user, self.users, resource, permission):
            return True
        return any(
            has_permission_on_resource(group, self.groups, resource, permission) for group in groups
        )

    def to_snapshot(self) -> IndexSnapshot:
        return IndexSnapshot(
            source_policy_hash=self.source_policy_hash,
            roles={role: sorted(perms) for role, perms in self.roles.items()},
            users=_sorted_grants(self.users),
            groups=_sorted_grants(self.groups),
        )

    @classmethod
    def from_snapshot(cls, snapshot: IndexSnapshot) -> "AuthorizationIndex":
        return cls(
            source_policy_hash=snapshot.source_policy_hash,
            roles=snapshot.roles,
            users=snapshot.users,
            groups=snapshot.groups,
        )

    def to_json(self) -> str:
        return self.to_snapshot().model_dump_json()

    @classmethod
    def from_json(cls, data) -> "AuthorizationIndex":
        """Decode an index from JSON text or bytes; raises MalformedIndex."""
        try:
            snapshot = IndexSnapshot.model_validate_json(data)
        except ValidationError as e:
            raise MalformedIndex(f"Failed to unmarshal authorization index: {e}") from e
        return cls.from_snapshot(snapshot)

    def metrics(self) -> dict:
        """Entry counts and serialized sizes (bytes) of the role, user and group maps."""
        snapshot = self.to_snapshot()
        return {
            "roles": len(self.roles),
            "roles_bytes": len(snapshot.model_dump_json(include={"roles"})),
            "users": len(self.users),
            "users_bytes": len(snapshot.model_dump_json(include={"users"})),
            "groups": len(self.groups),
            "groups_bytes": len(snapshot.model_dump_json(include={"groups"})),
        }
