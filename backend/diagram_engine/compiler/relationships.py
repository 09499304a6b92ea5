"""
Relationship inference and deduplication for graph edges.
"""

from __future__ import annotations

import re
from typing import Hashable, Set

from diagram_engine.ir.graph import RelationType
from diagram_engine.ir.records import FieldRecord

DEFAULT_JUNCTION_PATTERN = r"_"


def is_junction_name(name: str, pattern: str = DEFAULT_JUNCTION_PATTERN) -> bool:
    """Naming heuristic for junction tables, e.g. ``user_roles``."""
    return bool(re.search(pattern, name or ""))


def classify(
    source_entity: str,
    target_entity: str,
    referencing_field: FieldRecord,
    junction_pattern: str = DEFAULT_JUNCTION_PATTERN,
) -> RelationType:
    """Infer the relationship a foreign key expresses.

    Order matters:
    1. both entity names look like junction tables -> many-to-many
    2. the referencing field is unique -> one-to-one
    3. otherwise -> one-to-many
    """
    if (
        is_junction_name(source_entity, junction_pattern)
        and is_junction_name(target_entity, junction_pattern)
    ):
        return RelationType.MANY_TO_MANY

    if referencing_field.unique:
        return RelationType.ONE_TO_ONE

    return RelationType.ONE_TO_MANY


class RelationshipRegistry:
    """
    Tracks keys already turned into edges.

    Usage:
        registry = RelationshipRegistry()
        if registry.dedupe((source_id, target_id, field_name)):
            edges.append(...)
    """

    def __init__(self):
        self._seen: Set[Hashable] = set()

    def dedupe(self, key: Hashable) -> bool:
        """Return True the first time ``key`` is seen, False on every repeat."""
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: Hashable) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)
