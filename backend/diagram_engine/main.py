import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from diagram_engine.api.routes import router
from diagram_engine.config import CORS_ORIGINS, LOG_LEVEL, describe_settings
from diagram_engine.ir.errors import RequestValidationError
from diagram_engine.pipeline.controller import error_body

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Diagram Synthesis Engine",
    version="0.4.0",
)

# Middleware before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(BodyValidationError)
def invalid_body(request: Request, exc: BodyValidationError):
    """Bodies FastAPI cannot parse get the same 400 envelope as service validation."""
    issues = jsonable_encoder(exc.errors())
    if any(issue.get("type") == "json_invalid" for issue in issues):
        reason = "Request body is not valid JSON"
    else:
        reason = "Request body must be a JSON object"

    error = RequestValidationError(
        "body",
        reason,
        details={"field": "body", "reason": reason, "issues": issues},
    )
    logger.info("[API] Rejected %s %s: %s", request.method, request.url.path, reason)
    return JSONResponse(status_code=error.status_code, content=error_body(error))


@app.on_event("startup")
def startup():
    for line in describe_settings():
        logger.info("[Startup] %s", line)
