"""
Resource compiler: projects compiled role permissions onto users and groups.

Output maps identity -> resource -> PermissionSet. Identities without any
grant have no entry at all; the query path treats that as "no permissions".
"""

from typing import Dict, Mapping, Tuple

from .errors import UnknownRole
from .policy import RoleGrant
from .sets import PermissionSet

ResourceGrants = Dict[str, Dict[str, PermissionSet]]


def _grant(grants: ResourceGrants, identity: str, resource: str, permissions: PermissionSet) -> None:
    by_resource = grants.setdefault(identity, {})
    by_resource.setdefault(resource, PermissionSet()).union(permissions)


def compile_resources(
    resources: Mapping[str, Mapping[str, RoleGrant]],
    compiled_roles: Mapping[str, PermissionSet],
) -> Tuple[ResourceGrants, ResourceGrants]:
    """
    Build (users, groups) grant maps from resource rules.

    The same identity receiving roles on one resource through several rules
    accumulates the union of their permissions. Raises UnknownRole (chain:
    resource, role) when a rule names a role missing from compiled_roles.
    """
    users: ResourceGrants = {}
    groups: ResourceGrants = {}

    for resource, rules in resources.items():
        for role, identities in rules.items():
            permissions = compiled_roles.get(role)
            if permissions is None:
                raise UnknownRole(role, [resource, role])
            for user in identities.users:
                _grant(users, user, resource, permissions)
            for group in identities.groups:
                _grant(groups, group, resource, permissions)

    return users, groups
