"""
Exception types raised while loading and compiling an access-control policy.

Compilation is all-or-nothing: any PolicyError aborts the compile and no
partial index is returned. Cache problems are not represented here because
they never abort a load (see cache.py).
"""

from typing import Sequence


def format_chain(chain: Sequence[str]) -> str:
    """Render a role chain as "a --> b --> c" for error messages."""
    return " --> ".join(chain)


class AuthzError(Exception):
    """Base class for every error raised by policy_authz."""


class PolicyReadError(AuthzError):
    """The source policy file could not be read."""


class PolicyError(AuthzError):
    """The source policy is invalid and cannot be compiled."""


class MalformedPolicy(PolicyError):
    """The policy document is not valid YAML or does not match the policy schema."""


class IndexNotLoaded(AuthzError):
    """A PolicyStore was queried before its first successful reload()."""


class MalformedIndex(AuthzError):
    """A serialized authorization index could not be decoded."""


class UnknownRole(PolicyError):
    """A role referenced via `extends` or a resource rule is not defined."""

    def __init__(self, role: str, chain: Sequence[str]):
        self.role = role
        self.chain = list(chain)
        super().__init__(f"Role {role} not defined. Stack: {format_chain(self.chain)}")


class InheritanceCycle(PolicyError):
    """A role's `extends` graph revisits a role already on the current path."""

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__(f"Inheritance cycle detected. Stack: {format_chain(self.path)}")
