from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ValidationIssue:
    field: str
    message: str
    object_id: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "field": self.field,
            "message": self.message,
            "objectId": self.object_id,
        }


class DiagramError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class RequestValidationError(DiagramError):
    """Missing, empty or malformed required input. Raised before any builder runs."""

    status_code = 400

    def __init__(self, field: str, reason: str, details: Optional[Any] = None):
        super().__init__(f"Invalid field '{field}': {reason}", details)
        self.field = field
        self.reason = reason


class GenerationError(DiagramError):
    """A builder produced no nodes, or failed while constructing the graph."""

    status_code = 500


class EnrichmentError(Exception):
    """The explanation capability failed. Never reaches the caller."""
