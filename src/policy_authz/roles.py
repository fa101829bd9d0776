"""
Role compiler: flattens role inheritance into one permission set per role.

Each role is resolved with an iterative depth-first traversal (explicit
stack, so long `extends` chains are not bounded by the interpreter's
recursion limit). Two separate structures are kept:
- `compiled`: roles already fully resolved (memo, global to the compile).
- `on_path`: roles on the current traversal path only; a role is marked
  when pushed and unmarked when popped.

A role reachable through several paths (diamond) is legal and resolved once;
only a path that revisits itself is an inheritance cycle.
"""

from typing import Dict, Iterator, List, Mapping, Set

from .errors import InheritanceCycle, UnknownRole
from .policy import RoleDefinition
from .sets import PermissionSet


class _Frame:
    __slots__ = ("role", "permissions", "pending")

    def __init__(self, role: str, definition: RoleDefinition):
        self.role = role
        self.permissions = PermissionSet(*definition.permissions)
        self.pending: Iterator[str] = iter(definition.extends)


def _resolve(
    definitions: Mapping[str, RoleDefinition],
    root: str,
    compiled: Dict[str, PermissionSet],
) -> None:
    stack: List[_Frame] = [_Frame(root, definitions[root])]
    on_path: Set[str] = {root}

    while stack:
        frame = stack[-1]
        extended = next(frame.pending, None)

        if extended is None:
            stack.pop()
            on_path.discard(frame.role)
            compiled[frame.role] = frame.permissions
            if stack:
                stack[-1].permissions.union(frame.permissions)
            continue

        if extended not in definitions:
            raise UnknownRole(extended, [f.role for f in stack] + [extended])
        if extended in on_path:
            raise InheritanceCycle([f.role for f in stack] + [extended])
        if extended in compiled:
            frame.permissions.union(compiled[extended])
            continue

        stack.append(_Frame(extended, definitions[extended]))
        on_path.add(extended)


def compile_roles(definitions: Mapping[str, RoleDefinition]) -> Dict[str, PermissionSet]:
    """
    Return role name -> effective PermissionSet (own plus transitively inherited).

    Raises UnknownRole when an `extends` entry names an undefined role and
    InheritanceCycle when the inheritance graph has a cycle. When several
    cycles exist, which one is reported depends on traversal order.
    """
    compiled: Dict[str, PermissionSet] = {}
    for role in definitions:
        if role not in compiled:
            _resolve(definitions, role, compiled)
    return compiled
