import json
import logging
from typing import Any, Dict, List, Tuple

from diagram_engine.inference.chat_completions_client import ChatCompletionsClient
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import Diagram, DiagramKind
from diagram_engine.ir.records import BuildInput
from diagram_engine.utils.json_extract import extract_json

logger = logging.getLogger(__name__)

# Keeps prompts short for large projects
MAX_TABLES = 8
MAX_ENDPOINTS = 20

# -------------------------
# Per-kind reviewer role and the keys it must answer with
# -------------------------

INSIGHT_PROMPTS: Dict[DiagramKind, Tuple[str, Dict[str, Any]]] = {
    DiagramKind.ERD: (
        "You are a database architect. Review the schema for relationship "
        "correctness, missing indexes, normalization issues and performance "
        "bottlenecks.",
        {
            "relationships": [
                {"from": "table1", "to": "table2", "type": "one-to-many", "description": "why"}
            ],
            "indexRecommendations": [
                {"table": "table1", "fields": ["field1"], "reason": "why"}
            ],
            "normalizationIssues": [
                {"table": "table1", "issue": "description", "suggestion": "fix"}
            ],
            "performanceWarnings": ["warning"],
        },
    ),
    DiagramKind.API_MAP: (
        "You are an API architect. Review the endpoints for REST compliance, "
        "security, missing endpoints, rate limiting and versioning. Reference "
        "endpoints by path.",
        {
            "restIssues": ["issue"],
            "securityRecommendations": ["recommendation"],
            "missingEndpoints": ["METHOD /path"],
            "rateLimiting": "string",
            "versioning": "string",
        },
    ),
    DiagramKind.DATA_FLOW: (
        "You are a systems architect. Review how data moves between clients, "
        "services and stores.",
        {
            "bottlenecks": ["description"],
            "securityIssues": ["issue"],
            "cachingOpportunities": ["opportunity"],
            "transformationPoints": ["point"],
        },
    ),
    DiagramKind.LLD: (
        "You are a software architect. Review the layered low-level design.",
        {
            "complexity": "Simple|Moderate|Detailed",
            "designPatterns": ["pattern"],
            "recommendations": ["recommendation"],
            "testCoverage": "string",
        },
    ),
}

SYSTEM_RULES = """
Rules:
- Output ONLY valid JSON
- No markdown, no commentary
- Use exactly the keys of the schema below
"""


def _describe_tables(request: BuildInput) -> List[str]:
    lines = []
    for schema in request.schemas[:MAX_TABLES]:
        lines.append(
            f"{schema.name} ({len(schema.fields)} fields, {len(schema.indexes)} indexes)"
        )
    return lines


def _describe_references(request: BuildInput) -> List[str]:
    return [
        f"{schema.name}.{f.name} -> {f.references.table}.{f.references.field}"
        for schema in request.schemas[:MAX_TABLES]
        for f in schema.fields
        if f.references is not None
    ]


def _describe_endpoints(request: BuildInput) -> List[str]:
    return [
        f"{ep.method} {ep.path} [{ep.group}]{' (auth)' if ep.auth else ''}"
        for ep in request.endpoints[:MAX_ENDPOINTS]
    ]


def build_insight_messages(diagram: Diagram, request: BuildInput) -> List[Dict[str, str]]:
    role, schema = INSIGHT_PROMPTS[diagram.kind]
    system = f"{role}\n{SYSTEM_RULES}\nJSON schema:\n{json.dumps(schema, indent=2)}"

    user = (
        f"Project: {request.project_name}\n"
        f"Description: {request.description or 'n/a'}\n"
        f"Diagram: {diagram.kind.title} with {len(diagram.nodes)} nodes "
        f"and {len(diagram.edges)} edges\n"
        f"Tables: {', '.join(_describe_tables(request)) or 'n/a'}\n"
        f"Relationships: {', '.join(_describe_references(request)) or 'n/a'}\n"
        f"Endpoints: {', '.join(_describe_endpoints(request)) or 'n/a'}\n"
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


class InsightGenerator:
    """Asks the chat-completions endpoint for a review of one whole diagram."""

    def __init__(self, client: ChatCompletionsClient):
        self.client = client

    def generate(self, diagram: Diagram, request: BuildInput) -> Dict[str, Any]:
        raw = self.client.generate(build_insight_messages(diagram, request))
        data = extract_json(raw)

        _, schema = INSIGHT_PROMPTS[diagram.kind]
        known = {k: v for k, v in data.items() if k in schema}
        if not known:
            logger.debug("[Insights] Unusable response for %s: %r", diagram.kind.value, raw[:200])
            raise EnrichmentError(f"No usable insights for {diagram.kind.title}")

        return known
