"""
Policy document model and YAML parsing.

A policy declares roles (permissions + extended roles) and, per resource,
which users and groups receive each role:

    roles:
      viewer:
        permissions: [read]
      editor:
        permissions: [write]
        extends: [viewer]
    resources:
      doc1:
        editor:
          users: [alice]
          groups: [writers]
"""

from typing import Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedPolicy


class RoleDefinition(BaseModel):
    """A named bundle of permissions, optionally extending other roles."""

    model_config = ConfigDict(extra="forbid")

    permissions: List[str] = Field(default_factory=list)
    extends: List[str] = Field(default_factory=list)


class RoleGrant(BaseModel):
    """Users and groups that receive a role on one resource."""

    model_config = ConfigDict(extra="forbid")

    users: List[str] = Field(default_factory=list)
    groups: List[str] = Field(default_factory=list)


class Policy(BaseModel):
    model_config = ConfigDict(extra="forbid")

    roles: Dict[str, RoleDefinition] = Field(default_factory=dict)
    # resource -> role -> grant
    resources: Dict[str, Dict[str, RoleGrant]] = Field(default_factory=dict)


def _none_to_empty(doc: dict) -> dict:
    # YAML turns "editor:" with no body into None; treat it as an empty mapping.
    roles = doc.get("roles")
    if isinstance(roles, dict):
        doc["roles"] = {name: body if body is not None else {} for name, body in roles.items()}
    resources = doc.get("resources")
    if isinstance(resources, dict):
        for resource, rules in resources.items():
            if rules is None:
                resources[resource] = {}
            elif isinstance(rules, dict):
                resources[resource] = {role: grant if grant is not None else {} for role, grant in rules.items()}
    return doc


def parse_policy(raw: bytes) -> Policy:
    """
    Parse raw policy bytes (YAML, or JSON as a YAML subset) into a Policy.

    Raises MalformedPolicy on syntax errors, a non-mapping document, or
    schema violations. An empty document is an empty policy.
    """
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise MalformedPolicy(f"Failed to unmarshal policy file: {e}") from e

    if doc is None:
        return Policy()
    if not isinstance(doc, dict):
        raise MalformedPolicy(f"Policy document must be a mapping, got {type(doc).__name__}")

    try:
        return Policy.model_validate(_none_to_empty(doc))
    except ValidationError as e:
        raise MalformedPolicy(f"Invalid policy: {e}") from e
