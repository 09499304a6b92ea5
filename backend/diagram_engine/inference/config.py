from diagram_engine.config import (
    LLM_BASE_URL,
    LLM_MODEL,
    LLM_REQUEST_TIMEOUT,
    EnrichmentSettings,
)
from .base import ExplanationGenerator
from .chat_completions_client import ChatCompletionsClient
from .insights import InsightGenerator
from .llm_generator import LLMExplanationGenerator
from .templates import TemplateExplanationGenerator


def get_llm_client() -> ChatCompletionsClient:
    return ChatCompletionsClient(
        base_url=LLM_BASE_URL,
        model=LLM_MODEL,
        timeout=LLM_REQUEST_TIMEOUT,
    )


def get_explanation_generator(settings: EnrichmentSettings) -> ExplanationGenerator:
    if settings.backend == "llm":
        return LLMExplanationGenerator(get_llm_client())
    if settings.backend != "template":
        raise ValueError(f"Unknown explanation backend '{settings.backend}'")
    return TemplateExplanationGenerator()


def get_insight_generator() -> InsightGenerator:
    return InsightGenerator(get_llm_client())
