import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from diagram_engine.ir.records import (
    BuildInput,
    EndpointGroup,
    EndpointRecord,
    FieldRecord,
    FieldReference,
    SchemaRecord,
)
from diagram_engine.schemas import (
    ConstraintInput,
    EndpointGroupInput,
    EndpointInput,
    FieldInput,
    IndexInput,
    SchemaInput,
)

logger = logging.getLogger(__name__)

DEFAULT_FIELD_TYPE = "VARCHAR"
DEFAULT_GROUP = "General"


# -------------------------
# Schemas
# -------------------------

def _field_type(raw: FieldInput) -> str:
    base = (raw.type or DEFAULT_FIELD_TYPE).strip() or DEFAULT_FIELD_TYPE
    if raw.length not in (None, ""):
        return f"{base}({raw.length})"
    return base


def _normalize_field(raw: FieldInput) -> FieldRecord:
    reference = None
    if raw.references is not None:
        reference = FieldReference(
            table=raw.references.table.strip(),
            field=raw.references.field.strip(),
        )

    return FieldRecord(
        name=raw.name.strip(),
        type=_field_type(raw),
        primary=raw.primary,
        unique=raw.unique,
        nullable=raw.nullable is not False,
        references=reference,
    )


def _format_index(index: Union[IndexInput, str]) -> str:
    if isinstance(index, str):
        return index
    return f"{index.type or 'INDEX'} on {', '.join(index.fields)}"


def _format_constraint(constraint: Union[ConstraintInput, str]) -> str:
    if isinstance(constraint, str):
        return constraint
    return constraint.definition or f"{constraint.type}: {constraint.name}"


def normalize_schema(raw: Any) -> Optional[SchemaRecord]:
    """Validate one raw table record. Returns None when it is malformed."""
    try:
        parsed = SchemaInput.model_validate(raw)
    except ValidationError as e:
        name = raw.get("name") if isinstance(raw, dict) else None
        logger.warning(
            "[Normalizer] Dropping malformed schema %r: %s",
            name,
            "; ".join(err["msg"] for err in e.errors()),
        )
        return None

    fields: List[FieldRecord] = []
    seen_fields = set()
    for raw_field in parsed.fields:
        record = _normalize_field(raw_field)
        if record.name in seen_fields:
            logger.warning(
                "[Normalizer] Duplicate field %s.%s ignored", parsed.name, record.name
            )
            continue
        seen_fields.add(record.name)
        fields.append(record)

    return SchemaRecord(
        name=parsed.name,
        fields=fields,
        indexes=[_format_index(i) for i in parsed.indexes],
        constraints=[_format_constraint(c) for c in parsed.constraints],
        comment=parsed.comment or parsed.description,
    )


def normalize_schemas(raw_schemas: Optional[Iterable[Any]]) -> List[SchemaRecord]:
    """
    Validate and flatten raw schema records.

    Malformed records are dropped (and logged). Table names are unique
    case-insensitively; the first occurrence wins.
    """
    schemas: List[SchemaRecord] = []
    seen_names = set()

    if raw_schemas is not None and not isinstance(raw_schemas, (list, tuple)):
        logger.warning("[Normalizer] schemas is not a list, ignored")
        return schemas

    for raw in raw_schemas or []:
        record = normalize_schema(raw)
        if record is None:
            continue

        key = record.name.lower()
        if key in seen_names:
            logger.warning("[Normalizer] Duplicate table %s ignored", record.name)
            continue

        seen_names.add(key)
        schemas.append(record)

    return schemas


# -------------------------
# Endpoints
# -------------------------

def _normalize_endpoint(raw: Any, group_name: Optional[str]) -> Optional[EndpointRecord]:
    try:
        parsed = EndpointInput.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "[Normalizer] Dropping malformed endpoint in group %r: %s",
            group_name,
            "; ".join(err["msg"] for err in e.errors()),
        )
        return None

    group = (group_name or parsed.group or DEFAULT_GROUP).strip() or DEFAULT_GROUP
    return EndpointRecord(
        method=parsed.method,
        path=parsed.path.strip(),
        group=group,
        auth=parsed.auth,
        description=parsed.description,
        body=parsed.body,
        response=parsed.response,
    )


def _is_grouped(raw: Any) -> bool:
    return isinstance(raw, dict) and "endpoints" in raw


def normalize_endpoints(raw_endpoints: Optional[Iterable[Any]]) -> List[EndpointGroup]:
    """
    Accepts either grouped records (``{"group": ..., "endpoints": [...]}``) or
    flat endpoint records (``{"method", "path", "group", "auth"}``), mixed
    freely. Returns groups in first-seen order; groups left without any valid
    endpoint are dropped.
    """
    by_group: Dict[str, Tuple[str, List[EndpointRecord]]] = {}
    seen = set()

    if raw_endpoints is not None and not isinstance(raw_endpoints, (list, tuple)):
        logger.warning("[Normalizer] endpoints is not a list, ignored")
        return []

    for raw in raw_endpoints or []:
        if _is_grouped(raw):
            try:
                group = EndpointGroupInput.model_validate(raw)
            except ValidationError as e:
                logger.warning(
                    "[Normalizer] Dropping malformed endpoint group: %s",
                    "; ".join(err["msg"] for err in e.errors()),
                )
                continue
            candidates = [_normalize_endpoint(ep, group.group) for ep in group.endpoints]
        else:
            candidates = [_normalize_endpoint(raw, None)]

        for endpoint in candidates:
            if endpoint is None:
                continue
            key = (endpoint.group.lower(), endpoint.method, endpoint.path)
            if key in seen:
                continue
            seen.add(key)
            _, bucket = by_group.setdefault(endpoint.group.lower(), (endpoint.group, []))
            bucket.append(endpoint)

    return [EndpointGroup(name=name, endpoints=eps) for name, eps in by_group.values()]


# -------------------------
# Request
# -------------------------

def normalize_request(
    payload: Dict[str, Any],
    lists: Iterable[str] = ("schemas", "endpoints"),
) -> BuildInput:
    """Normalize only the record lists named in ``lists``; the others stay empty."""
    wanted = set(lists)
    analysis = payload.get("analysis")
    description = payload.get("description")

    return BuildInput(
        project_name=str(payload.get("projectName", "")).strip(),
        schemas=normalize_schemas(payload.get("schemas")) if "schemas" in wanted else [],
        groups=normalize_endpoints(payload.get("endpoints")) if "endpoints" in wanted else [],
        description=description if isinstance(description, str) else None,
        analysis=analysis if isinstance(analysis, dict) else {},
    )
