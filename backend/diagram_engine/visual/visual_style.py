from typing import Iterable, Tuple

DEFAULT_COLOR = "#6B7280"

# Ordered: the first keyword contained in the name wins.
TABLE_COLORS: Tuple[Tuple[str, str], ...] = (
    ("user", "#3B82F6"),
    ("auth", "#F59E0B"),
    ("task", "#8B5CF6"),
    ("product", "#10B981"),
    ("order", "#EF4444"),
    ("category", "#06B6D4"),
    ("priority", "#EC4899"),
    ("setting", "#6B7280"),
    ("log", "#CA8A04"),
    ("audit", "#DC2626"),
    ("permission", "#7C3AED"),
)

GROUP_COLORS: Tuple[Tuple[str, str], ...] = (
    ("auth", "#F59E0B"),
    ("user", "#3B82F6"),
    ("task", "#8B5CF6"),
    ("product", "#10B981"),
    ("order", "#EF4444"),
    ("category", "#06B6D4"),
    ("admin", "#EC4899"),
)

METHOD_COLORS: Tuple[Tuple[str, str], ...] = (
    ("GET", "#10B981"),
    ("POST", "#3B82F6"),
    ("PUT", "#F59E0B"),
    ("DELETE", "#EF4444"),
    ("PATCH", "#8B5CF6"),
)

DATAFLOW_COLORS = {
    "external-entity": "#3B82F6",
    "process": "#8B5CF6",
    "data-store": "#EF4444",
    "gateway": "#10B981",
    "external-service": "#F59E0B",
}

COMPONENT_COLORS = {
    "database": "#EF4444",
    "api-service": "#8B5CF6",
    "authentication": "#F59E0B",
    "external-service": "#6B7280",
    "cache": "#DC2626",
    "queue": "#F97316",
    "api-gateway": "#059669",
    "logging": "#CA8A04",
    "notification-service": "#8B5CF6",
    "secrets-manager": "#374151",
    "backup-storage": "#4B5563",
}

LAYER_COLORS = {
    "Controllers Layer": "#E3F2FD",
    "Services Layer": "#F3E5F5",
    "Repositories Layer": "#FFF3E0",
    "Models/Entities Layer": "#E8F5E9",
    "Middleware Layer": "#FFF9C4",
    "External Integrations": "#E0F2F1",
    "Infrastructure Layer": "#ECEFF1",
}


def keyword_color(
    name: str,
    table: Iterable[Tuple[str, str]],
    default: str = DEFAULT_COLOR,
) -> str:
    """Case-insensitive substring lookup; deterministic for a given name."""
    lowered = (name or "").lower()
    for keyword, color in table:
        if keyword.lower() in lowered:
            return color
    return default


def exact_color(
    key: str,
    table: Iterable[Tuple[str, str]],
    default: str = DEFAULT_COLOR,
) -> str:
    wanted = (key or "").upper()
    for candidate, color in table:
        if candidate.upper() == wanted:
            return color
    return default
