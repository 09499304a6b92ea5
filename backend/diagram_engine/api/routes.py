from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from diagram_engine.config import APP_ENV, EXPLANATION_BACKEND, EXPLANATIONS_ENABLED
from diagram_engine.ir.graph import DiagramKind
from diagram_engine.pipeline.controller import (
    OPTIONAL_FIELDS,
    DiagramService,
    required_fields,
)
from diagram_engine.schemas import GenerateRequest

router = APIRouter()

ROUTE_PATHS = {
    DiagramKind.ERD: "/api/generate-erd",
    DiagramKind.API_MAP: "/api/generate-api-map",
    DiagramKind.DATA_FLOW: "/api/generate-dataflow",
    DiagramKind.LLD: "/api/generate-lld",
}

ROUTE_SUMMARIES = {
    DiagramKind.ERD: "Generate an Entity Relationship Diagram from table schemas",
    DiagramKind.API_MAP: "Generate an API endpoint map grouped by resource",
    DiagramKind.DATA_FLOW: "Generate a data-flow diagram from schemas and endpoints",
    DiagramKind.LLD: "Generate a layered low-level design from schemas and endpoints",
}


def get_diagram_service() -> DiagramService:
    return DiagramService()


def describe_route(kind: DiagramKind) -> Dict[str, Any]:
    return {
        "endpoint": ROUTE_PATHS[kind],
        "method": "POST",
        "description": ROUTE_SUMMARIES[kind],
        "requiredFields": required_fields(kind),
        "optionalFields": list(OPTIONAL_FIELDS[kind]),
        "responseKey": kind.response_key,
    }


def _respond(kind: DiagramKind, request: GenerateRequest, service: DiagramService) -> JSONResponse:
    status_code, body = service.generate(kind, request.model_dump())
    return JSONResponse(status_code=status_code, content=body)


# -------------------------
# Health
# -------------------------

@router.get("/health")
def health():
    return {
        "status": "ok",
        "environment": APP_ENV,
        "explanations": {
            "enabled": EXPLANATIONS_ENABLED,
            "backend": EXPLANATION_BACKEND,
        },
    }


# -------------------------
# ERD
# -------------------------

@router.post("/api/generate-erd")
def generate_erd(
    request: GenerateRequest,
    service: DiagramService = Depends(get_diagram_service),
):
    return _respond(DiagramKind.ERD, request, service)


@router.get("/api/generate-erd")
def describe_erd():
    return describe_route(DiagramKind.ERD)


# -------------------------
# API map
# -------------------------

@router.post("/api/generate-api-map")
def generate_api_map(
    request: GenerateRequest,
    service: DiagramService = Depends(get_diagram_service),
):
    return _respond(DiagramKind.API_MAP, request, service)


@router.get("/api/generate-api-map")
def describe_api_map():
    return describe_route(DiagramKind.API_MAP)


# -------------------------
# Data flow
# -------------------------

@router.post("/api/generate-dataflow")
def generate_dataflow(
    request: GenerateRequest,
    service: DiagramService = Depends(get_diagram_service),
):
    return _respond(DiagramKind.DATA_FLOW, request, service)


@router.get("/api/generate-dataflow")
def describe_dataflow():
    return describe_route(DiagramKind.DATA_FLOW)


# -------------------------
# LLD
# -------------------------

@router.post("/api/generate-lld")
def generate_lld(
    request: GenerateRequest,
    service: DiagramService = Depends(get_diagram_service),
):
    return _respond(DiagramKind.LLD, request, service)


@router.get("/api/generate-lld")
def describe_lld():
    return describe_route(DiagramKind.LLD)
