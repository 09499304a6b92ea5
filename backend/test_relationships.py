from diagram_engine.compiler.relationships import (
    RelationshipRegistry,
    classify,
    is_junction_name,
)
from diagram_engine.ir.graph import RelationType
from diagram_engine.ir.records import FieldRecord, FieldReference

REF = FieldReference(table="users", field="id")


def test_plain_foreign_key_is_one_to_many():
    field = FieldRecord(name="user_id", references=REF)
    assert classify("posts", "users", field) == RelationType.ONE_TO_MANY


def test_unique_foreign_key_is_one_to_one():
    field = FieldRecord(name="user_id", unique=True, references=REF)
    assert classify("profiles", "users", field) == RelationType.ONE_TO_ONE


def test_junction_names_on_both_sides_are_many_to_many():
    field = FieldRecord(name="role_id", unique=True, references=REF)
    assert classify("user_roles", "role_groups", field) == RelationType.MANY_TO_MANY
    # one side alone is not enough
    assert classify("user_roles", "roles", field) == RelationType.ONE_TO_ONE


def test_junction_pattern_is_configurable():
    assert is_junction_name("UserRoleLink", r"Link$")
    assert not is_junction_name("user_roles", r"Link$")


def test_registry_reports_first_sighting_only():
    registry = RelationshipRegistry()
    key = ("table-posts", "table-users", "user_id")
    assert registry.dedupe(key)
    assert not registry.dedupe(key)
    assert key in registry
    assert len(registry) == 1
