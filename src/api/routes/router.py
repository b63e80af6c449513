"""Agregador de rotas: registra todos os routers.

Este módulo é responsável por criar o router principal da API
e incluir os sub-routers.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health.router import router as health_router
from api.routes.messages.router import router as messages_router
from api.routes.session.router import router as session_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    # Sessão: índice, status, pareamento e comandos do operador
    api_router.include_router(session_router, tags=["session"])

    # Envio outbound
    api_router.include_router(messages_router, tags=["messages"])

    return api_router
