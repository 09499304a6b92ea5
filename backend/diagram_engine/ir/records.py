from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import re


def slugify(value: str) -> str:
    """Lowercase and hyphenate whitespace, e.g. ``User Profiles`` -> ``user-profiles``."""
    return re.sub(r"\s+", "-", (value or "").strip().lower())


@dataclass(frozen=True)
class FieldReference:
    table: str
    field: str


@dataclass(frozen=True)
class FieldRecord:
    name: str
    type: str = "VARCHAR"
    primary: bool = False
    unique: bool = False
    nullable: bool = True
    references: Optional[FieldReference] = None

    @property
    def is_foreign_key(self) -> bool:
        return self.references is not None


@dataclass(frozen=True)
class SchemaRecord:
    name: str
    fields: List[FieldRecord] = field(default_factory=list)
    indexes: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)
    comment: Optional[str] = None

    @property
    def node_id(self) -> str:
        return f"table-{self.name.lower()}"


@dataclass(frozen=True)
class EndpointRecord:
    method: str
    path: str
    group: str
    auth: bool = False
    description: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    response: Optional[str] = None


@dataclass(frozen=True)
class EndpointGroup:
    name: str
    endpoints: List[EndpointRecord] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return slugify(self.name)

    @property
    def methods(self) -> List[str]:
        seen: List[str] = []
        for ep in self.endpoints:
            if ep.method not in seen:
                seen.append(ep.method)
        return seen


@dataclass(frozen=True)
class BuildInput:
    """Normalized request handed to a graph builder."""
    project_name: str
    schemas: List[SchemaRecord] = field(default_factory=list)
    groups: List[EndpointGroup] = field(default_factory=list)
    description: Optional[str] = None
    analysis: Dict[str, Any] = field(default_factory=dict)

    @property
    def endpoints(self) -> List[EndpointRecord]:
        return [ep for group in self.groups for ep in group.endpoints]
