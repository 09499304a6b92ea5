import pytest

from diagram_engine.inference.base import ExplanationGenerator
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import DiagramKind
from diagram_engine.pipeline.controller import DiagramService, required_fields
from diagram_engine.pipeline.enricher import ExplanationEnricher

from conftest import USERS


class BrokenGenerator(ExplanationGenerator):
    name = "broken"

    def explain(self, node, context, kind):
        raise EnrichmentError("upstream unavailable")


@pytest.mark.parametrize("kind", list(DiagramKind))
def test_metadata_matches_arrays(template_service, blog_payload, kind):
    status, body = template_service.generate(kind, blog_payload)
    assert status == 200
    assert body["success"] is True

    diagram = body[kind.response_key]
    metadata = body["metadata"]
    assert metadata["totalNodes"] == len(diagram["nodes"])
    assert metadata["totalEdges"] == len(diagram["edges"])
    assert "generatedAt" in metadata
    assert all("aiExplanation" in n["data"] for n in diagram["nodes"])


def test_erd_envelope_shape(template_service, blog_payload):
    status, body = template_service.generate(DiagramKind.ERD, blog_payload)
    assert status == 200
    erd = body["erd"]
    assert erd["type"] == "erd"
    assert body["metadata"]["totalFields"] == sum(len(n["data"]["fields"]) for n in erd["nodes"])

    users = erd["nodes"][0]
    assert users["id"] == "table-users"
    assert users["type"] == "table"
    assert set(users["position"]) == {"x", "y"}
    assert users["data"]["fields"][0]["isPrimaryKey"] is True
    assert set(users["data"]["aiExplanation"]) == {"whyChosen", "howItFits", "tradeoffs", "bestPractices"}

    [edge] = erd["edges"]
    assert edge["type"] == "smoothstep"
    assert edge["data"]["relationType"] == "one-to-many"
    assert edge["data"]["kind"] == "relationship"
    assert edge["style"]["strokeWidth"] == 2


def test_enrichment_failure_is_not_request_failure(blog_payload):
    service = DiagramService(enricher=ExplanationEnricher(BrokenGenerator()))
    status, body = service.generate(DiagramKind.ERD, blog_payload)
    assert status == 200
    assert body["success"] is True
    assert all("aiExplanation" not in n["data"] for n in body["erd"]["nodes"])


def test_empty_schemas_is_validation_error(template_service):
    status, body = template_service.generate(DiagramKind.ERD, {"projectName": "Demo", "schemas": []})
    assert status == 400
    assert body["success"] is False
    assert body["details"]["field"] == "schemas"
    assert "empty" in body["details"]["reason"]


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"schemas": [USERS]}, "projectName"),
        ({"projectName": "   ", "schemas": [USERS]}, "projectName"),
        ({"projectName": "Demo", "schemas": {"name": "users"}}, "schemas"),
        ({"projectName": "Demo"}, "schemas"),
    ],
)
def test_required_fields(template_service, payload, field):
    result = template_service.validate(DiagramKind.ERD, payload)
    assert not result.is_valid
    assert result.first_error.field == field


def test_dataflow_needs_endpoints(template_service):
    result = template_service.validate(DiagramKind.DATA_FLOW, {"projectName": "Demo", "schemas": [USERS]})
    assert [i.field for i in result.errors] == ["endpoints"]
    assert required_fields(DiagramKind.DATA_FLOW) == ["schemas", "endpoints", "projectName"]


def test_non_object_analysis_rejected(template_service, blog_payload):
    blog_payload["analysis"] = "complex"
    status, body = template_service.generate(DiagramKind.LLD, blog_payload)
    assert status == 400
    assert body["details"]["field"] == "analysis"


def test_all_records_filtered_is_generation_error(template_service):
    status, body = template_service.generate(
        DiagramKind.ERD, {"projectName": "Demo", "schemas": [{"name": "broken", "fields": []}]}
    )
    assert status == 500
    assert body["success"] is False
    assert "no nodes" in body["error"]


def test_unexpected_builder_failure_is_500(template_service, blog_payload, monkeypatch):
    def explode(self, request):
        raise KeyError("boom")

    monkeypatch.setattr("diagram_engine.pipeline.erd_builder.ERDBuilder.build_graph", explode)
    status, body = template_service.generate(DiagramKind.ERD, blog_payload)
    assert status == 500
    assert body["error"].startswith("Failed to generate Entity Relationship Diagram")


def test_unused_list_is_ignored_for_erd(template_service):
    status, body = template_service.generate(
        DiagramKind.ERD, {"projectName": "Demo", "schemas": [USERS], "endpoints": 5}
    )
    assert status == 200
    assert body["success"] is True
    assert [n["id"] for n in body["erd"]["nodes"]] == ["table-users"]


def test_non_array_optional_schemas_is_validation_error(template_service):
    payload = {
        "projectName": "Demo",
        "endpoints": [{"method": "GET", "path": "/users"}],
        "schemas": 7,
    }
    status, body = template_service.generate(DiagramKind.API_MAP, payload)
    assert status == 400
    assert body["success"] is False
    assert body["details"]["field"] == "schemas"
    assert "array" in body["details"]["reason"]
