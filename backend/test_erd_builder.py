import pytest

from diagram_engine.compiler.normalize import normalize_request
from diagram_engine.config import DiagramConfig, LayoutConfig
from diagram_engine.ir.errors import GenerationError
from diagram_engine.ir.graph import RelationType
from diagram_engine.ir.records import BuildInput, FieldRecord, FieldReference, SchemaRecord
from diagram_engine.pipeline.erd_builder import ERDBuilder

from conftest import POSTS, USERS


def build(schemas, config=None):
    request = normalize_request({"projectName": "Demo", "schemas": schemas})
    return ERDBuilder(config).build(request)


def test_single_table():
    diagram = build([
        {"name": "users", "fields": [{"name": "id", "primary": True}, {"name": "email", "unique": True}]}
    ])
    assert [n.id for n in diagram.nodes] == ["table-users"]
    assert len(diagram.nodes[0].data.fields) == 2
    assert diagram.edges == ()
    assert diagram.metadata["totalFields"] == 2
    assert diagram.metadata["totalNodes"] == 1
    assert diagram.metadata["totalEdges"] == 0
    assert diagram.name == "Demo - Entity Relationship Diagram"


def test_foreign_key_becomes_one_to_many_edge():
    diagram = build([USERS, POSTS])
    assert len(diagram.edges) == 1
    edge = diagram.edges[0]
    assert edge.id == "rel-1"
    assert (edge.source, edge.target) == ("table-posts", "table-users")
    assert edge.label == "user_id"
    assert edge.data.relation_type == RelationType.ONE_TO_MANY
    assert edge.data.target_field == "id"
    # edges take the referenced table's color
    assert edge.color == diagram.nodes[0].data.color


def test_duplicate_reference_yields_one_edge():
    ref = FieldReference(table="users", field="id")
    request = BuildInput(
        project_name="Demo",
        schemas=[
            SchemaRecord(name="users", fields=[FieldRecord(name="id", primary=True)]),
            SchemaRecord(
                name="posts",
                fields=[
                    FieldRecord(name="user_id", references=ref),
                    FieldRecord(name="user_id", references=ref),
                ],
            ),
        ],
    )
    diagram = ERDBuilder().build(request)
    assert len(diagram.edges) == 1


def test_reference_to_unknown_table_is_skipped():
    diagram = build([
        {"name": "posts", "fields": [{"name": "author_id", "references": {"table": "authors", "field": "id"}}]}
    ])
    assert len(diagram.nodes) == 1
    assert diagram.edges == ()


def test_junction_tables_animate_many_to_many():
    diagram = build([
        {"name": "role_groups", "fields": [{"name": "id", "primary": True}]},
        {"name": "user_roles", "fields": [{"name": "group_id", "references": {"table": "role_groups", "field": "id"}}]},
    ])
    [edge] = diagram.edges
    assert edge.data.relation_type == RelationType.MANY_TO_MANY
    assert edge.animated


def test_description_falls_back_to_table_name():
    diagram = build([USERS, POSTS])
    users, posts = diagram.nodes
    assert users.description == "Data table for users"
    assert posts.description == "Blog posts written by users"
    assert posts.data.indexes == ["INDEX on user_id"]


def test_builder_is_idempotent():
    first = build([USERS, POSTS])
    second = build([USERS, POSTS])
    assert first.nodes == second.nodes
    assert first.edges == second.edges


def test_colors_are_deterministic_by_name():
    builder = ERDBuilder()
    assert builder.table_color("users") == builder.table_color("users") == "#3B82F6"
    assert builder.table_color("UserProfiles") == "#3B82F6"
    assert builder.table_color("widgets") == "#6B7280"


def test_layout_comes_from_config():
    config = DiagramConfig(erd_layout=LayoutConfig(start_x=0, start_y=0, max_per_row=1))
    diagram = build([USERS, POSTS], config)
    assert [(n.position.x, n.position.y) for n in diagram.nodes] == [(0, 0), (0, 350)]


def test_no_valid_tables_is_generation_error():
    with pytest.raises(GenerationError):
        build([{"name": "broken", "fields": []}])
