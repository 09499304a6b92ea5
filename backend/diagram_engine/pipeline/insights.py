import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from diagram_engine.inference.insights import InsightGenerator
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import Diagram
from diagram_engine.ir.records import BuildInput

logger = logging.getLogger(__name__)


@dataclass
class InsightsResult:
    ok: bool
    insights: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def success(cls, insights: Dict[str, Any]):
        return cls(ok=True, insights=insights)

    @classmethod
    def failure(cls, error: str):
        return cls(ok=False, error=error)


class InsightsStage:
    """
    Best-effort review of a finished diagram.

    Must:
    - never raise; every failure becomes InsightsResult.failure
    - never touch nodes or edges
    """

    def __init__(self, generator: Optional[InsightGenerator] = None, enabled: bool = True):
        self.generator = generator
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled and self.generator is not None

    def analyze(self, diagram: Diagram, request: BuildInput) -> InsightsResult:
        if not self.enabled:
            return InsightsResult.failure("Insights are disabled")

        try:
            insights = self.generator.generate(diagram, request)
        except EnrichmentError as e:
            return InsightsResult.failure(str(e))
        except Exception as e:
            return InsightsResult.failure(f"{type(e).__name__}: {e}")

        logger.debug("[Insights] %d sections for %s", len(insights), diagram.kind.value)
        return InsightsResult.success(insights)
