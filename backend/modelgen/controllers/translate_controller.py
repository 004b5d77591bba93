"""
Translate Controller — model graph to PyTorch code + plugin catalog.
"""
from __future__ import annotations
import time

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from .. import logging_service as logger
from ..config import CODE_FORMATTER, INCLUDE_IMPORTS
from ..constants import ErrorKind
from ..errors import TranslationError
from ..plugins.loader import all_node_plugins, get_node_factory
from ..schemas.graph import ErrorResponse, ModelGraph, TranslateRequest, TranslateResponse
from ..services.assembler import get_formatter
from ..services.translator import build_program

router = APIRouter(prefix="/api/translate", tags=["Translation"])


def status_for(error: TranslationError) -> int:
    if error.is_user_error:
        return 422
    if error.kind == ErrorKind.PLUGIN_RESOLUTION:
        return 502
    return 500


def error_response(error: TranslationError) -> JSONResponse:
    """Render a translation failure as its structured error object."""
    status = status_for(error)
    if status == 500:
        # Plugin defects are logged in full, callers only get the kind
        logger.log("translation", "ERROR", f"Internal translation failure: {error.message}",
                   {"error": error.to_dict()}, component="controller")
        body = {"kind": ErrorKind.INTERNAL, "message": "Internal error while generating code"}
    else:
        logger.log("translation", "WARNING", f"Translation rejected: {error.message}",
                   {"error": error.to_dict()}, component="controller")
        body = error.to_dict()
    return JSONResponse(status_code=status, content=body)


@router.post(
    "",
    summary="Translate a model graph into PyTorch code",
    response_model=TranslateResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def translate_graph(req: TranslateRequest):
    include_imports = INCLUDE_IMPORTS if req.include_imports is None else req.include_imports
    start = time.time()
    try:
        graph = ModelGraph.from_document(req.graph)
        result = build_program(graph, include_imports=include_imports,
                               formatter=get_formatter(CODE_FORMATTER))
    except TranslationError as e:
        return error_response(e)

    logger.log("translation", "INFO", "Graph translated", {
        "layers": len(graph.layers),
        "lines": result.code.count("\n") + 1 if result.code else 0,
        "duration_ms": round((time.time() - start) * 1000, 1),
    }, component="controller")
    return result.to_dict()


@router.get("/plugins", summary="List available node plugins")
async def list_plugins():
    """Return metadata for every registered plugin, for the node palette."""
    return [plugin.to_info_dict() for plugin in all_node_plugins()]


@router.get("/plugins/{type_key}", summary="Get plugin info by type")
async def get_plugin_info(type_key: str):
    factory = get_node_factory(type_key)
    if factory is None:
        raise HTTPException(404, f"Plugin not found: {type_key}")
    return factory().to_info_dict()
