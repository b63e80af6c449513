"""Rotas HTTP da API: superfície de status, controle e envio.

Responsabilidades:
- Definir endpoints HTTP (health, sessão, envio)
- Validação inicial de request (corpo JSON)
- Delegação para controlador de sessão e use cases
- Respostas HTTP apropriadas (erros de domínio mapeados em errors.py)

Estrutura:
- routes/health/: liveness e readiness
- routes/session/: status, pareamento, restart/reset
- routes/messages/: envio outbound

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
