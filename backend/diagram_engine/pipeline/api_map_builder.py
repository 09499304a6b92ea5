import logging
from typing import Any, Dict, List, Optional, Sequence

from diagram_engine.compiler.layout import compute_position
from diagram_engine.compiler.relationships import RelationshipRegistry
from diagram_engine.ir.graph import (
    ApiLinkData,
    DiagramKind,
    EndpointSummary,
    GraphEdge,
    GraphNode,
    GroupData,
)
from diagram_engine.ir.records import (
    BuildInput,
    EndpointGroup,
    EndpointRecord,
    SchemaRecord,
)
from diagram_engine.pipeline.builder import Graph, GraphBuilder
from diagram_engine.visual.visual_style import exact_color, keyword_color

logger = logging.getLogger(__name__)

AUTH_GROUP_KEYWORDS = ("auth", "login", "session", "identity")


def _singular(word: str) -> str:
    word = word.lower()
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith("s") and not word.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def related_resources(group: EndpointGroup, schemas: Sequence[SchemaRecord]) -> List[str]:
    """Tables whose (singularized) name appears in the group name or its paths."""
    haystack = " ".join(
        [group.name.lower()] + [ep.path.lower() for ep in group.endpoints]
    )
    resources = []
    for schema in schemas:
        if _singular(schema.name) in haystack:
            resources.append(schema.name)
    return resources


def is_auth_group(group: EndpointGroup) -> bool:
    name = group.name.lower()
    return any(k in name for k in AUTH_GROUP_KEYWORDS)


def describe_endpoint(ep: EndpointRecord) -> str:
    suffix = " (Auth Required)" if ep.auth else ""
    if ep.description:
        return f"{ep.description} - {ep.method} {ep.path}{suffix}"
    return f"{ep.method} {ep.path}{suffix}"


class APIMapBuilder(GraphBuilder):
    kind = DiagramKind.API_MAP
    id_prefix = "api-map"

    def _group_node(
        self,
        group: EndpointGroup,
        node_id: str,
        index: int,
        total: int,
        schemas: Sequence[SchemaRecord],
    ) -> GraphNode:
        endpoint_prefix = node_id.replace("group-", "endpoint-", 1)
        summaries = [
            EndpointSummary(
                id=f"{endpoint_prefix}-{i}",
                method=ep.method,
                path=ep.path,
                description=describe_endpoint(ep),
                requires_auth=ep.auth,
                color=exact_color(
                    ep.method, self.config.method_colors, self.config.default_color
                ),
                request_body=ep.body,
                response_type=ep.response or "JSON",
            )
            for i, ep in enumerate(group.endpoints)
        ]
        paths = [f"{s.method} {s.path}" for s in summaries]
        auth_count = sum(1 for s in summaries if s.requires_auth)
        plural = "s" if len(summaries) != 1 else ""

        return GraphNode(
            id=node_id,
            kind="api-group",
            position=compute_position(index, total, self.config.api_layout),
            label=group.name,
            description=f"{group.name} - {len(summaries)} endpoint{plural}",
            data=GroupData(
                endpoints=summaries,
                color=keyword_color(
                    group.name, self.config.group_colors, self.config.default_color
                ),
                endpoint_paths=paths,
                formatted_endpoints="\n".join(
                    f"{i + 1}. {p}" for i, p in enumerate(paths)
                ),
                auth_endpoints=auth_count,
                public_endpoints=len(summaries) - auth_count,
                resources=related_resources(group, schemas),
            ),
        )

    def build_graph(self, request: BuildInput) -> Graph:
        groups = request.groups
        nodes: List[GraphNode] = []
        used_ids = RelationshipRegistry()

        for index, group in enumerate(groups):
            node_id = f"group-{group.slug}"
            suffix = 2
            while not used_ids.dedupe(node_id):
                node_id = f"group-{group.slug}-{suffix}"
                suffix += 1
            nodes.append(
                self._group_node(group, node_id, index, len(groups), request.schemas)
            )

        edges: List[GraphEdge] = []
        registry = RelationshipRegistry()

        def link(source: GraphNode, target: GraphNode, kind: str, label: str, auth: bool):
            if source.id == target.id:
                return
            if not registry.dedupe((source.id, target.id, kind)):
                return
            edges.append(
                GraphEdge(
                    id=f"flow-{len(edges) + 1}",
                    source=source.id,
                    target=target.id,
                    kind=kind,
                    label=label,
                    data=ApiLinkData(protocol="HTTP", requires_auth=auth),
                    dashed=auth,
                )
            )

        # -------------------------
        # Workflow: consecutive groups
        # -------------------------
        for previous, current in zip(nodes, nodes[1:]):
            link(
                previous,
                current,
                "workflow",
                f"{previous.label} → {current.label}: API workflow connection",
                False,
            )

        # -------------------------
        # Auth: protected groups -> authentication group
        # -------------------------
        auth_node: Optional[GraphNode] = next(
            (n for n, g in zip(nodes, groups) if is_auth_group(g)), None
        )
        protected = [n for n in nodes if n.data.auth_endpoints > 0]
        if auth_node is not None:
            for node in protected:
                link(node, auth_node, "auth", "Requires authentication", True)
        elif protected:
            logger.debug(
                "[API Map] %d protected groups but no authentication group", len(protected)
            )

        return nodes, edges

    def summarize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        auth = sum(n.data.auth_endpoints for n in nodes)
        public = sum(n.data.public_endpoints for n in nodes)
        return {
            "totalGroups": len(nodes),
            "totalEndpoints": auth + public,
            "authEndpoints": auth,
            "publicEndpoints": public,
            "totalFlows": len(edges),
            "authFlows": sum(1 for e in edges if e.kind == "auth"),
        }
