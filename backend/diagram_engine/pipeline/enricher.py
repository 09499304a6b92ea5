import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from diagram_engine.inference.base import EnrichmentContext, ExplanationGenerator
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import DiagramKind, GraphNode, NodeExplanation

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    ok: bool
    nodes: List[GraphNode]
    error: Optional[str] = None

    @classmethod
    def success(cls, nodes: Sequence[GraphNode]):
        return cls(ok=True, nodes=list(nodes))

    @classmethod
    def failure(cls, nodes: Sequence[GraphNode], error: str):
        return cls(ok=False, nodes=list(nodes), error=error)


class ExplanationEnricher:
    """
    Attaches an explanation to every node, or to none of them.

    Per-node calls fan out over a thread pool capped at ``max_concurrency``
    and the whole batch shares one ``timeout``. Any failure returns the
    original nodes untouched.
    """

    def __init__(
        self,
        generator: ExplanationGenerator,
        max_concurrency: int = 4,
        timeout: float = 30,
        enabled: bool = True,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.generator = generator
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.enabled = enabled

    def enrich(
        self,
        nodes: Sequence[GraphNode],
        context: EnrichmentContext,
        kind: DiagramKind,
    ) -> EnrichmentResult:
        if not self.enabled:
            return EnrichmentResult.failure(nodes, "Explanations are disabled")
        if not nodes:
            return EnrichmentResult.success(nodes)

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_concurrency, len(nodes)),
            thread_name_prefix="explain",
        )
        try:
            futures = [
                executor.submit(self.generator.explain, node, context, kind)
                for node in nodes
            ]
            _, pending = wait(futures, timeout=self.timeout)

            if pending:
                return EnrichmentResult.failure(
                    nodes,
                    f"Timed out after {self.timeout}s with {len(pending)} of {len(nodes)} explanations pending",
                )

            enriched = []
            for node, future in zip(nodes, futures):
                error = future.exception()
                if error is not None:
                    kind_name = "" if isinstance(error, EnrichmentError) else f"{type(error).__name__}: "
                    return EnrichmentResult.failure(
                        nodes, f"Explanation for '{node.id}' failed: {kind_name}{error}"
                    )
                explanation = future.result()
                if not isinstance(explanation, NodeExplanation):
                    return EnrichmentResult.failure(
                        nodes, f"Explanation for '{node.id}' has unexpected type {type(explanation).__name__}"
                    )
                enriched.append(replace(node, explanation=explanation))

        finally:
            # Abandoned calls keep running in the background; their results are discarded
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug(
            "[Enricher] %d explanations via %s", len(enriched), self.generator.name
        )
        return EnrichmentResult.success(enriched)
