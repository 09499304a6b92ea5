from diagram_engine.inference.base import EnrichmentContext, ExplanationGenerator
from diagram_engine.ir.graph import DiagramKind, GraphNode, NodeExplanation, TableData


def _plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


def _role(node_type: str) -> str:
    if "service" in node_type:
        return "business logic"
    if "database" in node_type:
        return "data persistence"
    if "gateway" in node_type:
        return "request routing"
    if "cache" in node_type:
        return "performance optimization"
    return "overall functionality"


def _tradeoff(node_type: str) -> str:
    if "service" in node_type:
        return "Microservice isolation provides flexibility but adds network overhead."
    if "database" in node_type:
        return "Centralized data storage ensures consistency but may become a bottleneck."
    if "cache" in node_type:
        return "Caching improves speed but requires cache invalidation strategy."
    return "Consider monitoring and scaling strategies as load increases."


def _practices(node_type: str) -> str:
    if "service" in node_type:
        return "implement health checks, use circuit breakers, ensure proper error handling"
    if "database" in node_type:
        return "optimize queries, implement backup strategies, use connection pooling"
    if "gateway" in node_type:
        return "configure rate limiting, implement authentication, enable logging"
    if "cache" in node_type:
        return "set appropriate TTLs, implement cache warming, monitor hit rates"
    return "ensure proper monitoring, logging, and alerting"


class TemplateExplanationGenerator(ExplanationGenerator):
    """
    Deterministic, offline explanations built from the node's own payload.
    Used when no language model is configured.
    """

    name = "template"

    def explain(
        self,
        node: GraphNode,
        context: EnrichmentContext,
        kind: DiagramKind,
    ) -> NodeExplanation:
        if kind == DiagramKind.ERD and isinstance(node.data, TableData):
            return self._explain_table(node, context)
        return self._explain_component(node, context)

    def _explain_table(self, node: GraphNode, context: EnrichmentContext) -> NodeExplanation:
        data: TableData = node.data
        field_count = len(data.fields)
        has_relationships = any(f.is_foreign_key for f in data.fields)
        primary_keys = [f.name for f in data.fields if f.is_primary_key]
        project = context.name

        if has_relationships:
            why_tail = "It maintains relationships with other tables through foreign keys."
            fit_tail = "Its foreign key relationships ensure data integrity across the system."
            trade_tail = "Foreign key relationships ensure data integrity but may impact write performance."
        else:
            why_tail = "It operates as an independent entity in the database schema."
            fit_tail = "It stores self-contained data without direct dependencies."
            trade_tail = "Independence from other tables simplifies queries but may require data duplication."

        if primary_keys:
            key_note = f"using {', '.join(primary_keys)} as primary key{'s' if len(primary_keys) > 1 else ''}"
        else:
            key_note = "supporting the overall data structure"

        if field_count > 15:
            size_note = "Large number of fields may indicate need for normalization. "
        elif field_count < 3:
            size_note = "Minimal fields suggest a focused, single-purpose table. "
        else:
            size_note = "Balanced field count supports maintainability. "

        checks = ["✓ Primary key defined" if primary_keys else "⚠️ Add a primary key"]
        if data.indexes:
            checks.append(f"✓ {_plural(len(data.indexes), 'index', 'es')} defined")
        else:
            checks.append("⚠️ Consider adding indexes for frequently queried columns")
        if has_relationships:
            checks.append("✓ Referential integrity via foreign keys")

        return NodeExplanation(
            why_chosen=(
                f'The "{node.label}" table is essential for storing '
                f"{(node.description or '').lower() or 'data'} in {project}. {why_tail}"
            ),
            how_it_fits=(
                f"This table integrates into the {project} data model with "
                f"{_plural(field_count, 'field')}, {key_note}. {fit_tail}"
            ),
            tradeoffs=f"{size_note}{trade_tail}",
            best_practices=(
                "Follow standard database best practices: "
                + ", ".join(checks)
                + ", ensure proper data types, add constraints where needed, and document the schema."
            ),
        )

    def _explain_component(self, node: GraphNode, context: EnrichmentContext) -> NodeExplanation:
        node_type = node.kind or "component"
        project = context.name
        if node.description:
            purpose = f"It {node.description.lower()}."
        else:
            purpose = "It handles critical system operations."

        return NodeExplanation(
            why_chosen=f'"{node.label}" provides essential {node_type} functionality for {project}. {purpose}',
            how_it_fits=(
                f"This {node_type} integrates with other components to handle {node_type} "
                f"responsibilities in the {project} architecture. It serves as a key part "
                f"of the system's {_role(node_type)}."
            ),
            tradeoffs=(
                "Selected for its balance of performance, scalability, and ease of "
                f"integration. {_tradeoff(node_type)}"
            ),
            best_practices=(
                f"Follow standard {node_type} best practices for configuration and "
                f"deployment: {_practices(node_type)}."
            ),
        )
