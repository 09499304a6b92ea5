import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from diagram_engine.compiler.layout import compute_layered_position
from diagram_engine.compiler.relationships import RelationshipRegistry
from diagram_engine.ir.graph import (
    CallData,
    ComponentData,
    DiagramKind,
    GraphEdge,
    GraphNode,
)
from diagram_engine.ir.records import BuildInput, slugify
from diagram_engine.pipeline.builder import Graph, GraphBuilder
from diagram_engine.visual.visual_style import COMPONENT_COLORS, DEFAULT_COLOR, LAYER_COLORS

logger = logging.getLogger(__name__)

DEFAULT_COMPLEXITY = "Detailed"
DEFAULT_DESIGN_PATTERN = "Layered Architecture + Repository Pattern + Dependency Injection"

LAYER_NAMES = (
    "Controllers Layer",
    "Services Layer",
    "Repositories Layer",
    "Models/Entities Layer",
    "Middleware Layer",
    "External Integrations",
    "Infrastructure Layer",
)


@dataclass(frozen=True)
class Component:
    id: str
    type: str
    name: str
    description: str
    technology: str
    methods: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Layer:
    name: str
    components: List[Component] = field(default_factory=list)


MIDDLEWARE = [
    Component(
        "auth-middleware-1", "authentication", "AuthenticationMiddleware",
        "JWT token validation", "Express Middleware",
        ("validateToken()", "extractUser()", "checkPermissions()"),
    ),
    Component(
        "validation-middleware-1", "api-service", "ValidationMiddleware",
        "Request validation using schemas", "Joi / Zod Validator",
        ("validateBody()", "validateParams()", "validateQuery()"),
    ),
    Component(
        "error-handler-1", "api-service", "ErrorHandler",
        "Centralized error handling", "Express Error Middleware",
        ("handleError()", "formatErrorResponse()", "logError()"),
        ("logger-util-1",),
    ),
    Component(
        "logger-util-1", "logging", "LoggerUtility",
        "Application logging", "Winston / Pino",
        ("info()", "error()", "debug()", "warn()"),
    ),
]

INTEGRATIONS = [
    Component(
        "email-adapter-1", "notification-service", "EmailServiceAdapter",
        "Email sending integration", "SendGrid / AWS SES",
        ("sendTransactional()", "sendBulk()", "sendTemplate()"),
    ),
    Component(
        "payment-client-1", "external-service", "PaymentGatewayClient",
        "Payment processing", "Stripe SDK",
        ("createCharge()", "refund()", "getBalance()"),
    ),
    Component(
        "storage-adapter-1", "backup-storage", "CloudStorageAdapter",
        "File upload/download", "AWS S3 SDK",
        ("uploadFile()", "getFile()", "deleteFile()"),
    ),
]

INFRASTRUCTURE = [
    Component(
        "db-connection-1", "database", "DatabaseConnection",
        "PostgreSQL connection pool", "TypeORM / Prisma",
        ("connect()", "getConnection()", "runMigrations()"),
    ),
    Component(
        "redis-client-1", "cache", "RedisCacheClient",
        "Cache management", "ioredis",
        ("get()", "set()", "del()", "expire()"),
    ),
    Component(
        "queue-client-1", "queue", "MessageQueueClient",
        "Async job processing", "Bull / RabbitMQ",
        ("addJob()", "processJobs()", "retryFailed()"),
    ),
    Component(
        "config-manager-1", "secrets-manager", "ConfigurationManager",
        "Environment configuration", "dotenv / Vault",
        ("get()", "set()", "validate()"),
    ),
]


def pascal(name: str) -> str:
    """``user profiles`` -> ``UserProfiles``; inner capitals are kept."""
    words = [w for w in name.replace("-", " ").replace("_", " ").split() if w]
    return "".join(w[:1].upper() + w[1:] for w in words)


def _pick(items: Sequence[Component], index: int) -> Optional[Component]:
    if not items:
        return None
    return items[index] if index < len(items) else items[0]


class LLDBuilder(GraphBuilder):
    kind = DiagramKind.LLD
    id_prefix = "lld"

    def _layers(self, request: BuildInput) -> List[Layer]:
        limits = self.config.limits
        groups = request.groups
        tables = request.schemas

        repositories = [
            Component(
                id=f"{slugify(t.name)}-repository-{i + 1}",
                type="database",
                name=f"{pascal(t.name)}Repository",
                description=f"Data access layer for {t.name} table",
                technology="ORM Repository",
                methods=(
                    "findById(id)",
                    "findAll(filters)",
                    "save(entity)",
                    "update(id, data)",
                    "delete(id)",
                    "findByCustomQuery()",
                ),
                dependencies=(f"{slugify(t.name)}-entity-{i + 1}",),
            )
            for i, t in enumerate(tables[: limits.max_repositories])
        ]

        entities = [
            Component(
                id=f"{slugify(t.name)}-entity-{i + 1}",
                type="database",
                name=pascal(t.name),
                description=f"Entity model with {len(t.fields)} fields",
                technology="Entity Class / Interface",
                methods=tuple(f.name for f in t.fields[: limits.max_entity_fields]),
            )
            for i, t in enumerate(tables[: limits.max_entities])
        ]

        services = []
        for i, g in enumerate(groups[: limits.max_lld_services]):
            entity = pascal(g.name)
            repository = _pick(repositories, i)
            services.append(
                Component(
                    id=f"{g.slug}-service-{i + 1}",
                    type="api-service",
                    name=f"{entity}Service",
                    description=f"Business logic for {g.name.lower()} operations",
                    technology="Service Class",
                    methods=(
                        f"create{entity}()",
                        f"get{entity}ById()",
                        f"update{entity}()",
                        f"delete{entity}()",
                        f"validate{entity}Data()",
                    ),
                    dependencies=(repository.id,) if repository else (),
                )
            )

        controllers = []
        for i, g in enumerate(groups[: limits.max_controllers]):
            service = _pick(services, i)
            controllers.append(
                Component(
                    id=f"{g.slug}-controller-{i + 1}",
                    type="api-service",
                    name=f"{pascal(g.name)}Controller",
                    description=f"Handles {g.name.lower()} HTTP requests",
                    technology="HTTP Controller",
                    methods=tuple(
                        f"{ep.method} {ep.path}"
                        for ep in g.endpoints[: limits.max_controller_methods]
                    ),
                    dependencies=(service.id,) if service else (),
                )
            )

        members = (
            controllers,
            services,
            repositories,
            entities,
            list(MIDDLEWARE),
            list(INTEGRATIONS),
            list(INFRASTRUCTURE),
        )
        return [Layer(name, components) for name, components in zip(LAYER_NAMES, members)]

    def build_graph(self, request: BuildInput) -> Graph:
        if not request.groups and not request.schemas:
            return [], []

        layers = self._layers(request)
        nodes: List[GraphNode] = []

        for layer_index, layer in enumerate(layers):
            for idx, component in enumerate(layer.components):
                nodes.append(
                    GraphNode(
                        id=component.id,
                        kind=component.type,
                        position=compute_layered_position(
                            layer_index, idx, len(layer.components), self.config.lld_layout
                        ),
                        label=component.name,
                        description=component.description,
                        data=ComponentData(
                            color=COMPONENT_COLORS.get(component.type, DEFAULT_COLOR),
                            technology=component.technology,
                            layer=layer.name,
                            layer_index=layer_index,
                            layer_color=LAYER_COLORS.get(layer.name),
                            methods=list(component.methods),
                            dependencies=list(component.dependencies),
                        ),
                    )
                )

        edges = self._connections(layers, {n.id for n in nodes})
        return nodes, edges

    def _connections(self, layers: List[Layer], node_ids) -> List[GraphEdge]:
        controllers, services, repositories, entities = (
            layers[0].components,
            layers[1].components,
            layers[2].components,
            layers[3].components,
        )
        edges: List[GraphEdge] = []
        registry = RelationshipRegistry()

        def call(source, target, label, protocol, data_flow):
            if source is None or target is None:
                return
            if source not in node_ids or target not in node_ids:
                return
            if not registry.dedupe((source, target, label)):
                return
            edges.append(
                GraphEdge(
                    id=f"call-{len(edges) + 1}",
                    source=source,
                    target=target,
                    kind="call",
                    label=label,
                    data=CallData(protocol=protocol, data_flow=data_flow),
                )
            )

        def first_id(items):
            return items[0].id if items else None

        for i, ctrl in enumerate(controllers):
            svc = _pick(services, i)
            call(ctrl.id, svc.id if svc else None, "calls service methods", "Method Call", "DTO objects")
        for i, svc in enumerate(services):
            repo = _pick(repositories, i)
            call(svc.id, repo.id if repo else None, "data operations", "Method Call", "Entity objects")
        for i, repo in enumerate(repositories):
            entity = _pick(entities, i)
            call(repo.id, entity.id if entity else None, "maps to entity", "ORM Mapping", "Database rows")

        call(first_id(controllers), "auth-middleware-1", "authenticate request", "Middleware Chain", "Request object")
        call(first_id(controllers), "validation-middleware-1", "validate input", "Middleware Chain", "Request body")
        call("error-handler-1", "logger-util-1", "log errors", "Method Call", "Error details")

        call(first_id(services), "email-adapter-1", "send notifications", "Method Call", "Email data")
        call(first_id(services), "storage-adapter-1", "upload files", "Method Call", "File buffer")
        call(first_id(repositories), "db-connection-1", "execute queries", "SQL", "Query objects")
        call(first_id(services), "redis-client-1", "cache operations", "Redis Protocol", "Serialized data")
        call(first_id(services), "queue-client-1", "enqueue jobs", "AMQP", "Job payload")

        logger.debug("[LLD] %d connections across %d layers", len(edges), len(layers))
        return edges

    def summarize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        # Every layer is reported, empty ones as 0
        by_layer = {name: 0 for name in LAYER_NAMES}
        by_layer.update(Counter(n.data.layer for n in nodes))
        analysis = request.analysis or {}
        return {
            "componentsCount": len(nodes),
            "connectionsCount": len(edges),
            "methodsCount": sum(len(n.data.methods) for n in nodes),
            "componentsByLayer": by_layer,
            "complexity": analysis.get("complexity") or DEFAULT_COMPLEXITY,
            "designPattern": analysis.get("designPattern") or DEFAULT_DESIGN_PATTERN,
        }
