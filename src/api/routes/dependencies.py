"""Acesso aos componentes do serviço a partir da requisição.

O container é criado no lifespan e guardado em `app.state.container`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import Request

    from app.bootstrap.dependencies import BridgeContainer


def get_container(request: Request) -> BridgeContainer:
    return request.app.state.container
