"""Filters de logging para injeção de contexto e mascaramento.

Filters adicionam campos contextuais aos logs sem que o chamador
precise informá-los manualmente, e mascaram endereços de chat.

Campos injetados:
- correlation_id: ID de rastreamento da requisição/mensagem
- service: Nome do serviço (ex: chat_bridge)

Logs estruturados, sem PII (nem corpo de mensagem, nem telefone).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

# Campos de `extra` que carregam endereços de chat (telefone@domínio)
DEFAULT_MASKED_FIELDS = frozenset(
    {
        "destination",
        "conversation_id",
        "sender_address",
        "own_address",
    }
)

# Dígitos finais preservados ao mascarar um endereço
VISIBLE_SUFFIX_DIGITS = 4


def mask_address(value: str) -> str:
    """Mascara a parte local de um endereço de chat.

    Exemplo:
        "5511999998888@s.whatsapp.net" -> "*********8888@s.whatsapp.net"
    """
    if not value:
        return value
    local, sep, domain = value.partition("@")
    if len(local) <= VISIBLE_SUFFIX_DIGITS:
        masked = "*" * len(local)
    else:
        hidden = len(local) - VISIBLE_SUFFIX_DIGITS
        masked = "*" * hidden + local[hidden:]
    return f"{masked}{sep}{domain}"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Importante: nunca adicionar payloads brutos ou PII nos logs.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class AddressMaskingFilter(logging.Filter):
    """Mascara endereços de chat passados via `extra`.

    Permite logar destino/conversa para diagnóstico sem expor
    o número completo.
    """

    def __init__(self, fields: Iterable[str] = DEFAULT_MASKED_FIELDS) -> None:
        super().__init__()
        self._fields = frozenset(fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for field_name in self._fields:
            value = getattr(record, field_name, None)
            if isinstance(value, str):
                setattr(record, field_name, mask_address(value))
        return True
