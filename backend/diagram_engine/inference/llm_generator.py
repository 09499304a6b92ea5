import logging

from diagram_engine.inference.base import EnrichmentContext, ExplanationGenerator
from diagram_engine.inference.chat_completions_client import ChatCompletionsClient
from diagram_engine.inference.prompt import SYSTEM_PROMPT, build_user_prompt
from diagram_engine.ir.errors import EnrichmentError
from diagram_engine.ir.graph import DiagramKind, GraphNode, NodeExplanation
from diagram_engine.utils.json_extract import extract_json

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("whyChosen", "howItFits", "tradeoffs", "bestPractices")

# Keeps prompts short for large schemas
MAX_RELATED = 12


class LLMExplanationGenerator(ExplanationGenerator):
    name = "llm"

    def __init__(self, client: ChatCompletionsClient):
        self.client = client

    def _related(self, context: EnrichmentContext) -> str:
        names = [s.name for s in context.schemas]
        names += [f"{ep.method} {ep.path}" for ep in context.endpoints]
        return ", ".join(names[:MAX_RELATED])

    def explain(
        self,
        node: GraphNode,
        context: EnrichmentContext,
        kind: DiagramKind,
    ) -> NodeExplanation:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_user_prompt(
                    project_name=context.name,
                    project_description=context.description,
                    diagram_title=kind.title,
                    node_label=node.label,
                    node_type=node.kind,
                    node_description=node.description,
                    related=self._related(context),
                ),
            },
        ]

        raw = self.client.generate(messages)
        data = extract_json(raw)

        missing = [k for k in REQUIRED_KEYS if not isinstance(data.get(k), str) or not data[k].strip()]
        if missing:
            logger.debug("[LLM] Unusable explanation for %s: %r", node.id, raw[:200])
            raise EnrichmentError(
                f"Explanation for '{node.id}' is missing {', '.join(missing)}"
            )

        return NodeExplanation(
            why_chosen=data["whyChosen"].strip(),
            how_it_fits=data["howItFits"].strip(),
            tradeoffs=data["tradeoffs"].strip(),
            best_practices=data["bestPractices"].strip(),
        )
