import os
from dataclasses import dataclass
from typing import List, Tuple

from dotenv import load_dotenv

from diagram_engine.visual.visual_style import (
    DEFAULT_COLOR,
    GROUP_COLORS,
    METHOD_COLORS,
    TABLE_COLORS,
)

# Load .env from project root
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

EXPLANATIONS_ENABLED = _env_flag("EXPLANATIONS_ENABLED", "true")
EXPLANATION_BACKEND = os.getenv("EXPLANATION_BACKEND", "template")
EXPLANATION_MAX_CONCURRENCY = int(os.getenv("EXPLANATION_MAX_CONCURRENCY", "4"))
EXPLANATION_TIMEOUT = float(os.getenv("EXPLANATION_TIMEOUT", "30"))

LLM_BASE_URL = os.getenv("LLM_BASE_URL", "http://llama:8001")
LLM_MODEL = os.getenv("LLM_MODEL", "mistral-7b-instruct")
LLM_REQUEST_TIMEOUT = float(os.getenv("LLM_REQUEST_TIMEOUT", "60"))

# Diagram-level insights always go through the LLM endpoint
AI_INSIGHTS_ENABLED = _env_flag("AI_INSIGHTS_ENABLED", "false")


def is_production() -> bool:
    return APP_ENV.strip().lower() == "production"


# -------------------------
# Layout
# -------------------------

@dataclass(frozen=True)
class LayoutConfig:
    """Grid layout: rows of at most ``max_per_row`` nodes, centered."""
    horizontal_spacing: float = 450
    vertical_spacing: float = 350
    start_x: float = 50
    start_y: float = 50
    max_per_row: int = 4


@dataclass(frozen=True)
class LayeredLayoutConfig:
    """Column-per-layer layout used by the data-flow and LLD diagrams."""
    horizontal_spacing: float = 500
    vertical_spacing: float = 200
    start_x: float = 50
    start_y: float = 50
    band_height: float = 800


ERD_LAYOUT = LayoutConfig()

API_LAYOUT = LayoutConfig(
    horizontal_spacing=450,
    vertical_spacing=360,
    start_x=100,
    start_y=100,
    max_per_row=4,
)

DATAFLOW_LAYOUT = LayeredLayoutConfig()

LLD_LAYOUT = LayeredLayoutConfig(
    horizontal_spacing=350,
    vertical_spacing=180,
    start_x=100,
    start_y=100,
    band_height=0,
)


# -------------------------
# Builder limits
# -------------------------

@dataclass(frozen=True)
class BuilderLimits:
    max_services: int = 6
    max_stores: int = 6
    max_controllers: int = 4
    max_lld_services: int = 5
    max_repositories: int = 4
    max_entities: int = 4
    max_controller_methods: int = 5
    max_entity_fields: int = 6


@dataclass(frozen=True)
class DiagramConfig:
    """Everything a builder needs besides its input records."""
    erd_layout: LayoutConfig = ERD_LAYOUT
    api_layout: LayoutConfig = API_LAYOUT
    dataflow_layout: LayeredLayoutConfig = DATAFLOW_LAYOUT
    lld_layout: LayeredLayoutConfig = LLD_LAYOUT
    table_colors: Tuple[Tuple[str, str], ...] = TABLE_COLORS
    group_colors: Tuple[Tuple[str, str], ...] = GROUP_COLORS
    method_colors: Tuple[Tuple[str, str], ...] = METHOD_COLORS
    default_color: str = DEFAULT_COLOR
    junction_pattern: str = r"_"
    limits: BuilderLimits = BuilderLimits()


def default_config() -> DiagramConfig:
    return DiagramConfig()


@dataclass(frozen=True)
class EnrichmentSettings:
    enabled: bool = EXPLANATIONS_ENABLED
    backend: str = EXPLANATION_BACKEND
    max_concurrency: int = EXPLANATION_MAX_CONCURRENCY
    timeout: float = EXPLANATION_TIMEOUT
    insights_enabled: bool = AI_INSIGHTS_ENABLED


def enrichment_settings() -> EnrichmentSettings:
    return EnrichmentSettings()


def describe_settings() -> List[str]:
    return [
        f"APP_ENV={APP_ENV}",
        f"EXPLANATIONS_ENABLED={EXPLANATIONS_ENABLED}",
        f"EXPLANATION_BACKEND={EXPLANATION_BACKEND}",
        f"EXPLANATION_MAX_CONCURRENCY={EXPLANATION_MAX_CONCURRENCY}",
        f"AI_INSIGHTS_ENABLED={AI_INSIGHTS_ENABLED}",
    ]
