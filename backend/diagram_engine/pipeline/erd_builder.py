import logging
from typing import Any, Dict, List, Sequence

from diagram_engine.compiler.layout import compute_position
from diagram_engine.compiler.relationships import RelationshipRegistry, classify
from diagram_engine.ir.graph import (
    DiagramKind,
    ErdField,
    GraphEdge,
    GraphNode,
    RelationType,
    RelationshipData,
    TableData,
)
from diagram_engine.ir.records import BuildInput, FieldRecord, SchemaRecord
from diagram_engine.pipeline.builder import Graph, GraphBuilder
from diagram_engine.visual.visual_style import keyword_color

logger = logging.getLogger(__name__)


def _erd_field(field: FieldRecord) -> ErdField:
    return ErdField(
        name=field.name,
        type=field.type,
        is_primary_key=field.primary,
        is_foreign_key=field.is_foreign_key,
        is_unique=field.unique,
        is_nullable=field.nullable,
        references=field.references,
    )


class ERDBuilder(GraphBuilder):
    kind = DiagramKind.ERD
    id_prefix = "erd"

    def table_color(self, table_name: str) -> str:
        return keyword_color(
            table_name, self.config.table_colors, self.config.default_color
        )

    def _table_node(self, schema: SchemaRecord, index: int, total: int) -> GraphNode:
        return GraphNode(
            id=schema.node_id,
            kind="table",
            position=compute_position(index, total, self.config.erd_layout),
            label=schema.name,
            description=schema.comment or f"Data table for {schema.name.lower()}",
            data=TableData(
                fields=[_erd_field(f) for f in schema.fields],
                color=self.table_color(schema.name),
                indexes=list(schema.indexes),
                constraints=list(schema.constraints),
            ),
        )

    def build_graph(self, request: BuildInput) -> Graph:
        schemas = request.schemas
        nodes: List[GraphNode] = [
            self._table_node(schema, index, len(schemas))
            for index, schema in enumerate(schemas)
        ]
        node_ids = {n.id for n in nodes}

        edges: List[GraphEdge] = []
        registry = RelationshipRegistry()

        for schema in schemas:
            source_id = schema.node_id

            for field in schema.fields:
                if field.references is None:
                    continue

                target_id = f"table-{field.references.table.lower()}"
                if target_id not in node_ids:
                    logger.warning(
                        "[ERD] %s.%s references unknown table %s, skipped",
                        schema.name,
                        field.name,
                        field.references.table,
                    )
                    continue

                if not registry.dedupe((source_id, target_id, field.name)):
                    continue

                relation_type = classify(
                    schema.name,
                    field.references.table,
                    field,
                    self.config.junction_pattern,
                )
                target_color = self.table_color(field.references.table)

                edges.append(
                    GraphEdge(
                        id=f"rel-{len(edges) + 1}",
                        source=source_id,
                        target=target_id,
                        kind="relationship",
                        label=field.name,
                        data=RelationshipData(
                            source_field=field.name,
                            target_field=field.references.field,
                            relation_type=relation_type,
                        ),
                        color=target_color,
                        animated=relation_type == RelationType.MANY_TO_MANY,
                    )
                )

        return nodes, edges

    def summarize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        return {
            "totalTables": len(nodes),
            "totalRelationships": len(edges),
            "totalFields": sum(len(n.data.fields) for n in nodes),
        }
