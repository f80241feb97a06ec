"""FastAPI application exposing the compiler over HTTP.

WHY: The media pipeline that runs the speech and vision collaborators
(cloud functions, n8n, editing plug-ins) needs to hand both results to
the compiler without shelling out to the CLI. FastAPI provides automatic
OpenAPI documentation and request validation.

HOW: A single FastAPI app exposes three endpoints. POST /compilations
accepts both documents plus optional segmentation overrides, runs the
compiler inline and returns the compiled output. Compilation is pure CPU
work, so the endpoint is a plain ``def`` and FastAPI runs it in its
threadpool. SchemaViolation is mapped to 422 by an exception handler.

RULES:
- No state is shared between requests
- Schema violations → 422 with ErrorResponse {detail, errors}
- Other VidscriberError input problems → 422 with ErrorResponse {detail}
- Invalid segmentation options → 422 with ErrorResponse
- compact_json → application/json body; other formats → text/plain
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from vidscriber import __version__, config
from vidscriber.core.compiler import compile_documents
from vidscriber.core.errors import SchemaViolation, VidscriberError
from vidscriber.core.segmenter import SegmenterConfig
from vidscriber.formatters import FORMATTERS
from vidscriber.formatters.compact_json import CompactJSONFormatter
from vidscriber.server.models import (
    CompileRequest,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="vidscriber Transcript Compiler API",
    description=(
        "Compiles a word-level speech transcript and a hierarchical visual "
        "annotation into one time-aligned vidscriber.v1 timeline."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(SchemaViolation)
async def _schema_violation_handler(request: Request, exc: SchemaViolation) -> JSONResponse:
    logger.info("Rejected visual document: %s", exc)
    body = ErrorResponse(detail=str(exc), errors=exc.errors)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(VidscriberError)
async def _input_error_handler(request: Request, exc: VidscriberError) -> JSONResponse:
    logger.info("Rejected input: %s", exc)
    body = ErrorResponse(detail=str(exc))
    return JSONResponse(status_code=422, content=body.model_dump())


# ---------------------------------------------------------------------------
# Endpoints: Compilations
# ---------------------------------------------------------------------------


@app.post(
    "/compilations",
    tags=["compilations"],
    summary="Compile speech and visual annotations",
    description=(
        "Segments the speech words into utterances, normalizes the visual "
        "tree, links them by temporal overlap and returns the compiled "
        "timeline in the requested format."
    ),
    responses={
        200: {"description": "The compiled timeline."},
        422: {"model": ErrorResponse, "description": "Invalid visual document or options."},
    },
)
def create_compilation(request: CompileRequest) -> Response:
    options = request.options.model_dump() if request.options else None
    try:
        cfg = SegmenterConfig.from_mapping(options)
    except ValueError as e:
        body = ErrorResponse(detail=str(e))
        return JSONResponse(status_code=422, content=body.model_dump())

    compilation = compile_documents(request.speech, request.visual, cfg)

    formatter = FORMATTERS[request.format.value]()
    output = formatter.format(compilation)[0]
    if isinstance(formatter, CompactJSONFormatter):
        return Response(content=output.content, media_type=output.media_type)
    return PlainTextResponse(content=output.content)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List output formats",
    description="Returns every registered output format with its file suffix.",
)
async def list_formats() -> List[FormatInfo]:
    result: List[FormatInfo] = []
    for key, formatter_cls in FORMATTERS.items():
        formatter = formatter_cls()
        result.append(FormatInfo(key=key, name=formatter.name, suffix=formatter.suffix))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the vidscriber-api console script."""
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting API on %s:%d", config.API_HOST, config.API_PORT)
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
