from diagram_engine.compiler.normalize import normalize_request
from diagram_engine.pipeline.lld_builder import (
    DEFAULT_COMPLEXITY,
    DEFAULT_DESIGN_PATTERN,
    LLDBuilder,
    pascal,
)

from conftest import GROUPED_ENDPOINTS, POSTS, USERS


def build(**extra):
    payload = {"projectName": "Blog", "schemas": [USERS, POSTS], "endpoints": GROUPED_ENDPOINTS}
    payload.update(extra)
    return LLDBuilder().build(normalize_request(payload))


def test_layers_and_components():
    diagram = build()
    by_layer = diagram.metadata["componentsByLayer"]
    assert by_layer == {
        "Controllers Layer": 2,
        "Services Layer": 2,
        "Repositories Layer": 2,
        "Models/Entities Layer": 2,
        "Middleware Layer": 4,
        "External Integrations": 3,
        "Infrastructure Layer": 4,
    }
    assert diagram.metadata["componentsCount"] == len(diagram.nodes) == 19

    controller = diagram.nodes[0]
    assert controller.id == "users-controller-1"
    assert controller.label == "UsersController"
    assert controller.data.methods == ["GET /users", "POST /users"]
    assert controller.data.dependencies == ["users-service-1"]


def test_call_chain():
    diagram = build()
    pairs = [(e.source, e.target) for e in diagram.edges]
    assert ("users-controller-1", "users-service-1") in pairs
    assert ("users-service-1", "users-repository-1") in pairs
    assert ("users-repository-1", "users-entity-1") in pairs
    assert ("users-repository-1", "db-connection-1") in pairs
    assert ("error-handler-1", "logger-util-1") in pairs
    assert len(diagram.edges) == diagram.metadata["connectionsCount"] == 14


def test_layers_are_columns():
    diagram = build()
    xs = {n.data.layer_index: n.position.x for n in diagram.nodes}
    assert sorted(xs) == list(range(7))
    assert [xs[i] for i in range(7)] == sorted(xs.values())


def test_analysis_overrides_summary():
    default = build()
    assert default.metadata["complexity"] == DEFAULT_COMPLEXITY
    assert default.metadata["designPattern"] == DEFAULT_DESIGN_PATTERN

    custom = build(analysis={"complexity": "Simple", "designPattern": "Hexagonal"})
    assert custom.metadata["complexity"] == "Simple"
    assert custom.metadata["designPattern"] == "Hexagonal"


def test_methods_count_matches_nodes():
    diagram = build()
    assert diagram.metadata["methodsCount"] == sum(len(n.data.methods) for n in diagram.nodes)


def test_pascal():
    assert pascal("user profiles") == "UserProfiles"
    assert pascal("order_items") == "OrderItems"
    assert pascal("APIKeys") == "APIKeys"


def test_empty_layers_are_reported():
    request = normalize_request({"projectName": "Blog", "schemas": [USERS]}, ("schemas",))
    by_layer = LLDBuilder().build(request).metadata["componentsByLayer"]
    assert len(by_layer) == 7
    assert by_layer["Controllers Layer"] == 0
    assert by_layer["Services Layer"] == 0
    assert by_layer["Repositories Layer"] == 1
