"""Endpoints de health check e readiness."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "chat-bridge"


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    detail: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "detail": self.detail,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe: apenas indica que o processo responde."""
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: controlador rodando; sessão e webhook informativos."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        session_check = DependencyCheck(status="failed", detail="not_initialized")
        webhook_check = DependencyCheck(status="failed", detail="not_initialized")
    else:
        session_check = _check_session(container.controller)
        webhook_check = (
            DependencyCheck(status="ok")
            if container.dispatcher.enabled
            else DependencyCheck(status="degraded", detail="not_configured")
        )

    ready = session_check.status != "failed"
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "session": session_check.as_dict(),
            "webhook": webhook_check.as_dict(),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


def _check_session(controller: Any) -> DependencyCheck:
    if not controller.is_running:
        return DependencyCheck(status="failed", detail="controller_stopped")
    snapshot = controller.snapshot()
    if snapshot.is_connected:
        return DependencyCheck(status="ok", detail=snapshot.state.value)
    return DependencyCheck(status="degraded", detail=snapshot.state.value)
