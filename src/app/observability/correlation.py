"""Gerenciamento de correlation_id para rastreamento.

O correlation_id vem do header HTTP (x-correlation-id) nas rotas e do
ID da mensagem no pipeline inbound; é injetado em todos os logs.
Usa ContextVar para ser async-safe (cada task herda uma cópia).

Uso:
    from app.observability import correlation_scope, get_correlation_id

    # Em middleware/handler
    with correlation_scope(request.headers.get("x-correlation-id")):
        ...

    # Em qualquer lugar
    correlation_id = get_correlation_id()
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

CORRELATION_HEADER = "x-correlation-id"

# ContextVar para correlation_id (async-safe)
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Define o correlation_id durante o bloco e restaura ao sair."""
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4 hex)."""
    return uuid.uuid4().hex
