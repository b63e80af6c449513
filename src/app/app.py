"""Entrypoint da aplicação chat bridge.

Este módulo é o ponto de entrada principal do serviço.
Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 3000

Uso (desenvolvimento):
    python -m app.app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.routes import create_api_router
from app.bootstrap import initialize_app, validate_runtime_settings
from app.bootstrap.dependencies import build_container
from app.observability import CORRELATION_HEADER, correlation_scope
from config.logging import get_logger
from config.settings import get_base_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from fastapi import Response

    from app.bootstrap.dependencies import BridgeContainer

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Conecta componentes e inicia o controlador de sessão

    Shutdown:
    - Aguarda entregas pendentes ao webhook
    - Para o controlador (derruba o transporte)
    - Fecha o cliente HTTP do webhook
    """
    logger.info("app_starting", extra={"service": "chat-bridge"})
    validate_runtime_settings()
    container: BridgeContainer = getattr(app.state, "container", None) or build_container()
    app.state.container = container
    await container.controller.start()

    yield

    logger.info("app_shutting_down", extra={"service": "chat-bridge"})
    await container.delivery_tasks.drain(container.webhook_settings.drain_timeout_seconds)
    await container.controller.stop()
    await container.dispatcher.aclose()


async def correlation_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Propaga x-correlation-id (ou gera um) para logs e resposta."""
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Corpo malformado é erro do chamador (400), como as demais validações."""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "INVALID_REQUEST",
            "message": "Malformed request body",
            "details": [error.get("msg", "") for error in exc.errors()],
        },
    )


def create_app(container: BridgeContainer | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        container: Componentes pré-montados (testes); padrão via settings.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="Chat Session Bridge",
        description="Ponte entre uma sessão de chat e webhooks de automação",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    if container is not None:
        fastapi_app.state.container = container

    fastapi_app.middleware("http")(correlation_middleware)
    fastapi_app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Registra todas as rotas
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": "chat-bridge"})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta."""
    import uvicorn

    settings = get_base_settings()
    logger.info("Starting chat bridge", extra={"port": settings.port})
    uvicorn.run(
        "app.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
