from diagram_engine.compiler.normalize import (
    DEFAULT_GROUP,
    normalize_endpoints,
    normalize_request,
    normalize_schemas,
)


def test_field_length_and_defaults():
    [table] = normalize_schemas([
        {"name": "users", "fields": [{"name": "email", "type": "VARCHAR", "length": 255}, {"name": "bio"}]}
    ])
    email, bio = table.fields
    assert email.type == "VARCHAR(255)"
    assert bio.type == "VARCHAR"
    assert bio.nullable is True
    assert not bio.is_foreign_key


def test_malformed_and_duplicate_tables_dropped():
    schemas = normalize_schemas([
        {"name": "users", "fields": [{"name": "id"}]},
        {"name": "Users", "fields": [{"name": "other"}]},
        {"name": "empty", "fields": []},
        {"fields": [{"name": "id"}]},
        "not a table",
    ])
    assert [s.name for s in schemas] == ["users"]
    assert schemas[0].fields[0].name == "id"


def test_duplicate_fields_keep_first():
    [table] = normalize_schemas([
        {"name": "posts", "fields": [{"name": "id", "primary": True}, {"name": "id"}]}
    ])
    assert len(table.fields) == 1
    assert table.fields[0].primary


def test_indexes_and_constraints_flattened():
    [table] = normalize_schemas([
        {
            "name": "orders",
            "fields": [{"name": "id"}],
            "indexes": [{"fields": ["a", "b"]}, "UNIQUE on code"],
            "constraints": [{"type": "CHECK", "name": "positive_total"}, {"definition": "total > 0"}],
        }
    ])
    assert table.indexes == ["INDEX on a, b", "UNIQUE on code"]
    assert table.constraints == ["CHECK: positive_total", "total > 0"]


def test_grouped_and_flat_endpoints_merge_by_group():
    groups = normalize_endpoints([
        {"group": "Users", "endpoints": [{"method": "get", "path": "/users"}]},
        {"method": "POST", "path": "/users", "group": "users", "auth": True},
        {"method": "GET", "path": "/users", "group": "Users"},
        {"method": "GET", "path": "/health"},
        {"method": "GET"},
    ])
    assert [g.name for g in groups] == ["Users", DEFAULT_GROUP]
    users = groups[0]
    assert [(e.method, e.path) for e in users.endpoints] == [("GET", "/users"), ("POST", "/users")]
    assert users.methods == ["GET", "POST"]


def test_normalize_request_keeps_optional_analysis():
    request = normalize_request({
        "projectName": "  Shop ",
        "schemas": [{"name": "orders", "fields": [{"name": "id"}]}],
        "endpoints": [],
        "analysis": {"complexity": "Simple"},
        "description": 42,
    })
    assert request.project_name == "Shop"
    assert request.analysis == {"complexity": "Simple"}
    assert request.description is None
    assert request.endpoints == []


def test_normalize_request_skips_unused_lists():
    request = normalize_request(
        {"projectName": "Demo", "schemas": [{"name": "users", "fields": [{"name": "id"}]}], "endpoints": 5},
        ("schemas",),
    )
    assert [s.name for s in request.schemas] == ["users"]
    assert request.groups == []


def test_non_list_records_are_ignored():
    assert normalize_schemas({"name": "users"}) == []
    assert normalize_endpoints(5) == []
