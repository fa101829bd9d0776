import pytest

from policy_authz import (
    MalformedPolicy,
    PermissionSet,
    RoleGrant,
    UnknownRole,
    compile_policy,
    compile_resources,
    parse_policy,
    policy_hash,
)

EXAMPLE_POLICY = b"""
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
"""


def test_example_scenario():
    index = compile_policy(EXAMPLE_POLICY)

    assert index.authorize("alice", [], "doc1", "read") is True
    assert index.authorize("alice", [], "doc1", "write") is True
    assert index.authorize("bob", [], "doc1", "read") is False


def test_index_records_source_hash():
    assert compile_policy(EXAMPLE_POLICY).source_policy_hash == policy_hash(EXAMPLE_POLICY)


def test_recompiling_is_deterministic():
    assert compile_policy(EXAMPLE_POLICY) == compile_policy(EXAMPLE_POLICY)
    assert compile_policy(EXAMPLE_POLICY).to_json() == compile_policy(EXAMPLE_POLICY).to_json()


def test_grants_accumulate_across_roles():
    compiled = {"viewer": PermissionSet("read"), "editor": PermissionSet("write", "read")}
    resources = {
        "doc1": {
            "viewer": RoleGrant(users=["alice"], groups=["staff"]),
            "editor": RoleGrant(users=["alice"]),
        },
        "doc2": {"viewer": RoleGrant(groups=["staff"])},
    }

    users, groups = compile_resources(resources, compiled)

    assert users == {"alice": {"doc1": PermissionSet("read", "write")}}
    assert groups == {"staff": {"doc1": PermissionSet("read"), "doc2": PermissionSet("read")}}


def test_grants_do_not_alias_role_sets():
    compiled = {"viewer": PermissionSet("read")}
    users, _ = compile_resources({"doc1": {"viewer": RoleGrant(users=["alice"])}}, compiled)

    users["alice"]["doc1"].add("write")

    assert compiled["viewer"] == {"read"}


def test_resource_rule_with_unknown_role():
    policy = b"""
roles:
  viewer:
    permissions: [read]
resources:
  doc1:
    ghost:
      users: [alice]
"""
    with pytest.raises(UnknownRole) as exc:
        compile_policy(policy)
    assert exc.value.role == "ghost"
    assert exc.value.chain == ["doc1", "ghost"]


def test_parse_accepts_empty_bodies():
    policy = parse_policy(b"""
roles:
  nobody:
resources:
  doc1:
    nobody:
""")
    assert policy.roles["nobody"].permissions == []
    assert policy.resources["doc1"]["nobody"].users == []


def test_parse_empty_document():
    policy = parse_policy(b"")
    assert policy.roles == {}
    assert policy.resources == {}


def test_parse_json_document():
    policy = parse_policy(b'{"roles": {"viewer": {"permissions": ["read"]}}}')
    assert policy.roles["viewer"].permissions == ["read"]


@pytest.mark.parametrize(
    "raw",
    [
        b"roles: [unclosed",
        b"- just\n- a list\n",
        b"roles:\n  viewer:\n    permissions: read\n",
        b"roles:\n  viewer:\n    grants: [read]\n",
    ],
    ids=["bad-yaml", "not-a-mapping", "wrong-type", "unknown-key"],
)
def test_malformed_policy(raw):
    with pytest.raises(MalformedPolicy):
        parse_policy(raw)
