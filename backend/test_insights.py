import json

import pytest
import requests

from diagram_engine.compiler.normalize import normalize_request
from diagram_engine.inference import chat_completions_client
from diagram_engine.inference.chat_completions_client import ChatCompletionsClient
from diagram_engine.inference.insights import InsightGenerator, build_insight_messages
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import DiagramKind
from diagram_engine.pipeline.controller import DiagramService
from diagram_engine.pipeline.erd_builder import ERDBuilder
from diagram_engine.pipeline.insights import InsightsStage

from conftest import POSTS, USERS

ERD_INSIGHTS = {
    "relationships": [
        {"from": "users", "to": "posts", "type": "one-to-many", "description": "authors"}
    ],
    "indexRecommendations": [{"table": "posts", "fields": ["user_id"], "reason": "joins"}],
    "normalizationIssues": [],
    "performanceWarnings": ["posts will grow quickly"],
}


class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return {"choices": [{"message": {"content": self.content}}]}


@pytest.fixture
def llm(monkeypatch):
    calls = []

    def install(content, status=200):
        def fake_post(url, json=None, timeout=None):
            calls.append(json)
            return FakeResponse(content, status)

        monkeypatch.setattr(chat_completions_client.requests, "post", fake_post)
        return calls

    return install


def generator():
    return InsightGenerator(ChatCompletionsClient("http://llm:8001/v1", "test-model", timeout=5))


def blog_erd():
    request = normalize_request({"projectName": "Blog", "schemas": [USERS, POSTS]}, ("schemas",))
    return ERDBuilder().build(request), request


class StaticInsights:
    def generate(self, diagram, request):
        return {"performanceWarnings": [f"{len(diagram.nodes)} tables reviewed"]}


class FailingInsights:
    def generate(self, diagram, request):
        raise EnrichmentError("upstream unavailable")


def test_messages_describe_project():
    diagram, request = blog_erd()
    system, user = build_insight_messages(diagram, request)
    assert "database architect" in system["content"]
    assert "indexRecommendations" in system["content"]
    assert "Project: Blog" in user["content"]
    assert "posts.user_id -> users.id" in user["content"]


def test_fenced_insights_keep_known_keys(llm):
    calls = llm("```json\n" + json.dumps({**ERD_INSIGHTS, "chatter": "hi"}) + "\n```")
    diagram, request = blog_erd()

    insights = generator().generate(diagram, request)

    assert insights == ERD_INSIGHTS
    [call] = calls
    assert call["model"] == "test-model"


def test_unusable_output_raises(llm):
    llm(json.dumps({"restIssues": ["wrong kind"]}))
    diagram, request = blog_erd()
    with pytest.raises(EnrichmentError):
        generator().generate(diagram, request)


def test_stage_degrades_on_malformed_output(llm):
    llm("I cannot review that")
    diagram, request = blog_erd()
    result = InsightsStage(generator()).analyze(diagram, request)
    assert not result.ok
    assert result.insights == {}


def test_stage_degrades_on_http_error(llm):
    llm("", status=503)
    diagram, request = blog_erd()
    result = InsightsStage(generator()).analyze(diagram, request)
    assert not result.ok
    assert "HTTPError" in result.error


def test_disabled_stage_never_calls_generator():
    diagram, request = blog_erd()
    stage = InsightsStage(FailingInsights(), enabled=False)
    assert not stage.enabled
    result = stage.analyze(diagram, request)
    assert not result.ok
    assert result.error == "Insights are disabled"
    assert not InsightsStage().enabled


def test_service_attaches_insights(template_service, blog_payload):
    service = DiagramService(enricher=template_service.enricher, insights=InsightsStage(StaticInsights()))
    status, body = service.generate(DiagramKind.ERD, blog_payload)
    assert status == 200
    assert body["erd"]["aiInsights"] == {"performanceWarnings": ["2 tables reviewed"]}
    assert all("aiExplanation" in n["data"] for n in body["erd"]["nodes"])


def test_service_without_insights_on_failure(template_service, blog_payload):
    service = DiagramService(enricher=template_service.enricher, insights=InsightsStage(FailingInsights()))
    status, body = service.generate(DiagramKind.ERD, blog_payload)
    assert status == 200
    assert body["success"] is True
    assert "aiInsights" not in body["erd"]
