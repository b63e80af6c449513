"""Protocolo de entrega de mensagens ao webhook downstream.

Evita dependência direta da camada api.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import CanonicalMessage


class WebhookDispatcherProtocol(Protocol):
    """Contrato mínimo para entrega at-most-once."""

    @property
    def enabled(self) -> bool: ...

    async def deliver(self, message: CanonicalMessage) -> None:
        """Uma única tentativa de POST.

        Raises:
            DeliveryError: Resposta não-2xx, timeout ou erro de conexão.
        """
        ...
