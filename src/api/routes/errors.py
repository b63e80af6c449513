"""Mapeamento de exceções de domínio para respostas HTTP."""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from utils.errors import (
    InfrastructureError,
    SendFailedError,
    SessionNotReadyError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(exc: Exception) -> JSONResponse:
    """Converte erro de domínio em JSONResponse estruturada.

    - ValidationError (inclui sessão não pronta): 400
    - SendFailedError: 500
    - InfrastructureError: 503
    """
    if isinstance(exc, SessionNotReadyError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": exc.code,
                "message": str(exc),
                "status": exc.state,
            },
        )
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": exc.code, "message": str(exc)},
        )
    if isinstance(exc, SendFailedError):
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": exc.code,
                "message": "Failed to send message",
                "details": exc.detail,
            },
        )
    if isinstance(exc, InfrastructureError):
        logger.error("infrastructure_error", extra={"error_type": type(exc).__name__})
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "INFRASTRUCTURE_ERROR", "message": str(exc)},
        )
    raise exc
