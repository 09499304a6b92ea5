import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from diagram_engine.compiler.layout import compute_layered_position
from diagram_engine.compiler.relationships import RelationshipRegistry
from diagram_engine.ir.graph import (
    DiagramKind,
    FlowData,
    FlowNodeData,
    GraphEdge,
    GraphNode,
)
from diagram_engine.ir.records import BuildInput
from diagram_engine.pipeline.api_map_builder import related_resources
from diagram_engine.pipeline.builder import Graph, GraphBuilder
from diagram_engine.visual.visual_style import DATAFLOW_COLORS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedNode:
    id: str
    label: str
    description: str
    technology: str
    operations: Tuple[str, ...] = field(default_factory=tuple)


# Layer order is also the x order of the columns.
LAYER_EXTERNAL = 0
LAYER_GATEWAY = 1
LAYER_SERVICE = 2
LAYER_STORE = 3
LAYER_EXTERNAL_SERVICE = 4

CLIENTS = (
    FixedNode(
        "client-web",
        "Web Client",
        "Browser-based users accessing the application",
        "HTTP/HTTPS Client",
        ("Browse", "Create Records", "Manage Data"),
    ),
    FixedNode(
        "client-mobile",
        "Mobile App",
        "Mobile users with iOS/Android apps",
        "HTTP/HTTPS Client",
        ("View Records", "Quick Actions", "Notifications"),
    ),
    FixedNode(
        "client-admin",
        "Admin Panel",
        "System administrators managing the platform",
        "HTTP/HTTPS Client",
        ("Configure", "Monitor", "User Management"),
    ),
)

GATEWAYS = (
    FixedNode(
        "load-balancer",
        "Load Balancer",
        "Distributes incoming traffic across services",
        "Nginx / AWS ALB",
        ("Route", "Validate", "Authenticate"),
    ),
    FixedNode(
        "api-gateway",
        "API Gateway",
        "Central entry point for all API requests",
        "Express.js / Kong",
        ("Route", "Validate", "Authenticate"),
    ),
    FixedNode(
        "auth-service",
        "Authentication Service",
        "Handles user authentication and JWT validation",
        "JWT / OAuth2",
        ("Route", "Validate", "Authenticate"),
    ),
)

EXTERNAL_SERVICES = (
    FixedNode(
        "cache-redis",
        "Redis Cache",
        "High-speed caching layer for frequently accessed data",
        "Redis",
        ("GET", "SET", "PUBLISH"),
    ),
    FixedNode(
        "file-storage",
        "File Storage",
        "Cloud storage for uploads and static files",
        "AWS S3 / CloudFlare R2",
        ("GET", "SET", "PUBLISH"),
    ),
    FixedNode(
        "notification-service",
        "Notification Service",
        "Sends email and push notifications",
        "SendGrid / FCM",
        ("GET", "SET", "PUBLISH"),
    ),
)


class DataFlowBuilder(GraphBuilder):
    kind = DiagramKind.DATA_FLOW
    id_prefix = "dfd"

    def _position(self, layer: int, index: int, total: int):
        return compute_layered_position(layer, index, total, self.config.dataflow_layout)

    def _fixed_nodes(
        self, fixed_nodes: Sequence[FixedNode], kind: str, color_key: str, layer: int
    ) -> List[GraphNode]:
        return [
            GraphNode(
                id=fixed.id,
                kind=kind,
                position=self._position(layer, i, len(fixed_nodes)),
                label=fixed.label,
                description=fixed.description,
                data=FlowNodeData(
                    color=DATAFLOW_COLORS[color_key],
                    technology=fixed.technology,
                    operations=list(fixed.operations),
                ),
            )
            for i, fixed in enumerate(fixed_nodes)
        ]

    def build_graph(self, request: BuildInput) -> Graph:
        limits = self.config.limits
        groups = request.groups[: limits.max_services]
        tables = request.schemas[: limits.max_stores]

        if not groups and not tables:
            return [], []

        nodes: List[GraphNode] = []
        nodes.extend(self._fixed_nodes(CLIENTS, "external-entity", "external-entity", LAYER_EXTERNAL))
        nodes.extend(self._fixed_nodes(GATEWAYS, "process", "gateway", LAYER_GATEWAY))

        # -------------------------
        # Services (one per endpoint group)
        # -------------------------
        used_ids = RelationshipRegistry()
        service_ids: List[str] = []
        for i, group in enumerate(groups):
            service_id = f"service-{group.slug}"
            suffix = 2
            while not used_ids.dedupe(service_id):
                service_id = f"service-{group.slug}-{suffix}"
                suffix += 1
            service_ids.append(service_id)

            nodes.append(
                GraphNode(
                    id=service_id,
                    kind="process",
                    position=self._position(LAYER_SERVICE, i, len(groups)),
                    label=f"{group.name} Service",
                    description=f"Handles {group.name.lower()} business logic",
                    data=FlowNodeData(
                        color=DATAFLOW_COLORS["process"],
                        technology="REST Service",
                        operations=group.methods,
                        data_types=["JSON", "REST API"],
                    ),
                )
            )

        # -------------------------
        # Data stores (one per table)
        # -------------------------
        store_ids: Dict[str, str] = {}
        for i, table in enumerate(tables):
            store_id = f"db-{table.name.lower()}"
            store_ids[table.name] = store_id
            nodes.append(
                GraphNode(
                    id=store_id,
                    kind="data-store",
                    position=self._position(LAYER_STORE, i, len(tables)),
                    label=f"{table.name} Table",
                    description=table.comment or f"Stores {table.name.lower()} records",
                    data=FlowNodeData(
                        color=DATAFLOW_COLORS["data-store"],
                        technology="PostgreSQL",
                        operations=["SELECT", "INSERT", "UPDATE", "DELETE"],
                        data_types=[f.type for f in table.fields[:3]],
                    ),
                )
            )

        nodes.extend(
            self._fixed_nodes(
                EXTERNAL_SERVICES, "data-store", "external-service", LAYER_EXTERNAL_SERVICE
            )
        )

        edges = self._flows(request, groups, tables, service_ids, store_ids)
        return nodes, edges

    def _flows(self, request, groups, tables, service_ids, store_ids) -> List[GraphEdge]:
        edges: List[GraphEdge] = []
        registry = RelationshipRegistry()

        def flow(source, target, label, data: FlowData, color, animated=False, dashed=False):
            if not registry.dedupe((source, target, label)):
                return
            edges.append(
                GraphEdge(
                    id=f"flow-{len(edges) + 1}",
                    source=source,
                    target=target,
                    kind="flow",
                    label=label,
                    data=data,
                    color=color,
                    animated=animated,
                    dashed=dashed,
                )
            )

        # Clients -> load balancer
        for client in CLIENTS:
            flow(
                client.id,
                "load-balancer",
                "HTTPS Request",
                FlowData(protocol="HTTPS", data_type="JSON", is_encrypted=True, is_bidirectional=True),
                "#10B981",
                animated=True,
            )

        flow(
            "load-balancer",
            "api-gateway",
            "Routed Traffic",
            FlowData(protocol="HTTP"),
            "#3B82F6",
        )
        flow(
            "api-gateway",
            "auth-service",
            "Auth Check",
            FlowData(protocol="HTTPS", data_type="JWT Token", is_encrypted=True),
            "#F59E0B",
            dashed=True,
        )

        # Gateway -> services
        for service_id in service_ids:
            flow(
                "api-gateway",
                service_id,
                "API Calls",
                FlowData(protocol="HTTP", data_type="JSON"),
                "#8B5CF6",
            )

        # Services -> data stores, matched by resource name first
        for i, (group, service_id) in enumerate(zip(groups, service_ids)):
            targets = [
                store_ids[name]
                for name in related_resources(group, tables)
                if name in store_ids
            ]
            if not targets and i < len(tables):
                targets = [store_ids[tables[i].name]]

            for store_id in targets:
                flow(
                    service_id,
                    store_id,
                    "SQL Queries",
                    FlowData(protocol="SQL", data_type="SQL", is_bidirectional=True),
                    "#EF4444",
                    animated=True,
                )

        if service_ids:
            flow(
                service_ids[0],
                "cache-redis",
                "Cache Operations",
                FlowData(protocol="Redis Protocol", data_type="Key-Value", is_bidirectional=True),
                "#F59E0B",
                dashed=True,
            )
            flow(
                service_ids[0],
                "file-storage",
                "Upload/Download",
                FlowData(protocol="HTTPS", data_type="Binary", is_encrypted=True),
                "#06B6D4",
            )

        if len(service_ids) > 1:
            flow(
                service_ids[1],
                "notification-service",
                "Send Alerts",
                FlowData(protocol="HTTPS", data_type="Message", is_encrypted=True),
                "#EC4899",
            )

        logger.debug("[DataFlow] %d flows for %r", len(edges), request.project_name)
        return edges

    def summarize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        return {
            "totalFlows": len(edges),
            "encryptedFlows": sum(1 for e in edges if e.data.is_encrypted),
            "services": sum(1 for n in nodes if n.id.startswith("service-")),
            "dataStores": sum(1 for n in nodes if n.id.startswith("db-")),
        }
