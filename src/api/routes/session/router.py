"""Endpoints de status e controle da sessão de transporte.

- GET  /            índice do serviço
- GET  /status      estado da sessão
- GET  /qr          material de pareamento (QR ou código)
- GET  /qr/image    QR renderizado em PNG
- POST /restart     reconecta mantendo credenciais
- POST /reset       apaga credenciais e reconecta (novo pareamento)
- DELETE /session   alias de /reset
"""

from __future__ import annotations

import asyncio
import io
import logging

import qrcode
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from api.routes.dependencies import get_container
from api.routes.errors import error_response
from app.protocols.models import PairingKind
from fsm import SessionState
from utils.errors import InfrastructureError

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_TITLE = "Chat Session Bridge"

ENDPOINTS = {
    "status": "/status",
    "qr": "/qr",
    "qrImage": "/qr/image",
    "send": "/send",
    "restart": "/restart",
    "reset": "/reset",
    "health": "/health",
}


def render_qr_png(value: str) -> bytes:
    """Renderiza o conteúdo do QR como PNG."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(value)
    qr.make(fit=True)
    img = qr.make_image(fill_color="#000000", back_color="#FFFFFF").convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@router.get("/")
async def service_index(request: Request) -> JSONResponse:
    """Índice do serviço com estado atual e endpoints."""
    snapshot = get_container(request).controller.snapshot()
    return JSONResponse(
        content={
            "status": snapshot.state.value,
            "message": SERVICE_TITLE,
            "endpoints": ENDPOINTS,
        }
    )


@router.get("/status")
async def session_status(request: Request) -> JSONResponse:
    """Estado, presença de material de pareamento e último motivo de queda."""
    snapshot = get_container(request).controller.snapshot()
    return JSONResponse(content=snapshot.to_dict())


@router.get("/qr")
async def pairing_material(request: Request) -> JSONResponse:
    """QR ou código corrente; mensagem dependente do estado se ausente."""
    snapshot = get_container(request).controller.snapshot()
    material = snapshot.pairing
    if material is not None:
        content = {"status": snapshot.state.value, **material.to_dict()}
        if material.kind == PairingKind.QR:
            content["qr"] = material.value
        else:
            content["code"] = material.value
        return JSONResponse(content=content)

    message = (
        "Already connected"
        if snapshot.state == SessionState.CONNECTED
        else "Pairing material not available"
    )
    return JSONResponse(content={"status": snapshot.state.value, "message": message})


@router.get("/qr/image")
async def pairing_qr_image(request: Request) -> Response:
    """QR corrente em PNG; 404 se não houver QR."""
    material = get_container(request).controller.snapshot().pairing
    if material is None or material.kind != PairingKind.QR:
        return JSONResponse(
            status_code=404,
            content={"error": "QR_NOT_AVAILABLE", "message": "QR not available"},
        )
    png = await asyncio.to_thread(render_qr_png, material.value)
    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})


@router.post("/restart")
async def restart_session(request: Request) -> JSONResponse:
    """Reinicia a conexão mantendo as credenciais."""
    controller = get_container(request).controller
    try:
        await controller.restart()
    except InfrastructureError as exc:
        return error_response(exc)
    return JSONResponse(content={"success": True, "message": "Restarting connection..."})


@router.post("/reset")
async def reset_session(request: Request) -> JSONResponse:
    """Apaga credenciais e reinicia; exige novo pareamento."""
    controller = get_container(request).controller
    try:
        await controller.reset()
    except InfrastructureError as exc:
        return error_response(exc)
    return JSONResponse(
        content={"success": True, "message": "Session reset, new pairing required"}
    )


@router.delete("/session")
async def delete_session(request: Request) -> JSONResponse:
    """Alias de POST /reset."""
    return await reset_session(request)
