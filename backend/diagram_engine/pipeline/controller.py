import logging
import traceback
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from diagram_engine.api.serializers import serialize_diagram
from diagram_engine.compiler.normalize import normalize_request
from diagram_engine.config import DiagramConfig, enrichment_settings, is_production
from diagram_engine.inference.base import EnrichmentContext
from diagram_engine.inference.config import get_explanation_generator, get_insight_generator
from diagram_engine.ir.errors import (
    DiagramError,
    GenerationError,
    RequestValidationError,
    ValidationIssue,
)
from diagram_engine.ir.graph import Diagram, DiagramKind
from diagram_engine.ir.validation import ValidationResult
from diagram_engine.pipeline import get_builder
from diagram_engine.pipeline.builder import GraphBuilder, utc_timestamp
from diagram_engine.pipeline.enricher import ExplanationEnricher
from diagram_engine.pipeline.insights import InsightsStage

logger = logging.getLogger(__name__)

# Non-empty arrays each kind needs; projectName is required everywhere
REQUIRED_LISTS: Dict[DiagramKind, Tuple[str, ...]] = {
    DiagramKind.ERD: ("schemas",),
    DiagramKind.API_MAP: ("endpoints",),
    DiagramKind.DATA_FLOW: ("schemas", "endpoints"),
    DiagramKind.LLD: ("schemas", "endpoints"),
}

# Arrays a kind reads when present
OPTIONAL_LISTS: Dict[DiagramKind, Tuple[str, ...]] = {
    DiagramKind.ERD: (),
    DiagramKind.API_MAP: ("schemas",),
    DiagramKind.DATA_FLOW: (),
    DiagramKind.LLD: (),
}

OPTIONAL_FIELDS: Dict[DiagramKind, Tuple[str, ...]] = {
    DiagramKind.ERD: ("description",),
    DiagramKind.API_MAP: ("schemas", "description"),
    DiagramKind.DATA_FLOW: ("description",),
    DiagramKind.LLD: ("description", "analysis"),
}


def required_fields(kind: DiagramKind) -> List[str]:
    return list(REQUIRED_LISTS[kind]) + ["projectName"]


def used_lists(kind: DiagramKind) -> Tuple[str, ...]:
    return REQUIRED_LISTS[kind] + OPTIONAL_LISTS[kind]


def default_enricher() -> ExplanationEnricher:
    settings = enrichment_settings()
    return ExplanationEnricher(
        generator=get_explanation_generator(settings),
        max_concurrency=settings.max_concurrency,
        timeout=settings.timeout,
        enabled=settings.enabled,
    )


def default_insights() -> InsightsStage:
    if not enrichment_settings().insights_enabled:
        return InsightsStage(enabled=False)
    return InsightsStage(get_insight_generator())


def error_body(error: DiagramError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error.message}
    if error.details is not None:
        body["details"] = error.details
    return body


class DiagramService:
    """
    validate -> normalize -> build -> enrich -> insights -> envelope

    One call per request, no state shared between calls. Returns
    ``(status_code, body)`` so the HTTP layer only has to wrap it.
    """

    def __init__(
        self,
        config: Optional[DiagramConfig] = None,
        enricher: Optional[ExplanationEnricher] = None,
        insights: Optional[InsightsStage] = None,
    ):
        self.config = config
        self.enricher = enricher or default_enricher()
        self.insights = insights or default_insights()

    # -------------------------
    # Validation
    # -------------------------

    def validate(self, kind: DiagramKind, payload: Any) -> ValidationResult:
        if not isinstance(payload, dict):
            return ValidationResult.failure(
                [ValidationIssue("body", "Request body must be a JSON object")]
            )

        issues: List[ValidationIssue] = []

        for name in REQUIRED_LISTS[kind]:
            value = payload.get(name)
            if value is None:
                issues.append(ValidationIssue(name, f"{name} is required"))
            elif not isinstance(value, list):
                issues.append(ValidationIssue(name, f"{name} must be an array"))
            elif not value:
                issues.append(ValidationIssue(name, f"{name} must not be empty"))

        for name in OPTIONAL_LISTS[kind]:
            value = payload.get(name)
            if value is not None and not isinstance(value, list):
                issues.append(ValidationIssue(name, f"{name} must be an array"))

        project_name = payload.get("projectName")
        if project_name is None:
            issues.append(ValidationIssue("projectName", "projectName is required"))
        elif not isinstance(project_name, str) or not project_name.strip():
            issues.append(
                ValidationIssue("projectName", "projectName must be a non-empty string")
            )

        analysis = payload.get("analysis")
        if analysis is not None and not isinstance(analysis, dict):
            issues.append(ValidationIssue("analysis", "analysis must be an object"))

        if issues:
            return ValidationResult.failure(issues)
        return ValidationResult.success()

    # -------------------------
    # Generation
    # -------------------------

    def _build(self, kind: DiagramKind, payload: Dict[str, Any]) -> Diagram:
        request = normalize_request(payload, used_lists(kind))
        builder: GraphBuilder = get_builder(kind, self.config)
        diagram = builder.build(request)

        context = EnrichmentContext(
            name=request.project_name,
            description=request.description or "",
            schemas=request.schemas,
            endpoints=request.endpoints,
        )
        result = self.enricher.enrich(list(diagram.nodes), context, kind)

        if result.ok:
            diagram = builder.with_nodes(diagram, result.nodes, request)
        elif self.enricher.enabled:
            logger.warning("[Service] %s built without explanations: %s", kind.value, result.error)

        review = self.insights.analyze(diagram, request)
        if review.ok:
            diagram = replace(diagram, insights=review.insights)
        elif self.insights.enabled:
            logger.warning("[Service] %s built without insights: %s", kind.value, review.error)

        return diagram

    def generate(self, kind: DiagramKind, payload: Any) -> Tuple[int, Dict[str, Any]]:
        validation = self.validate(kind, payload)
        if not validation.is_valid:
            issue = validation.first_error
            error = RequestValidationError(
                issue.field,
                issue.message,
                details={
                    "field": issue.field,
                    "reason": issue.message,
                    "issues": [i.to_dict() for i in validation.errors],
                },
            )
            logger.info("[Service] Rejected %s request: %s", kind.value, error.message)
            return error.status_code, error_body(error)

        try:
            diagram = self._build(kind, payload)
        except DiagramError as e:
            logger.warning("[Service] %s generation failed: %s", kind.value, e.message)
            return e.status_code, error_body(e)
        except Exception as e:
            logger.exception("[Service] Unexpected failure generating %s", kind.value)
            error = GenerationError(
                f"Failed to generate {kind.title}: {e}",
                details=None if is_production() else traceback.format_exc(),
            )
            return error.status_code, error_body(error)

        body = {
            "success": True,
            kind.response_key: serialize_diagram(diagram),
            "metadata": {"generatedAt": utc_timestamp(), **diagram.metadata},
        }
        logger.info(
            "[Service] %s ready: %d nodes, %d edges",
            kind.value,
            len(diagram.nodes),
            len(diagram.edges),
        )
        return 200, body
