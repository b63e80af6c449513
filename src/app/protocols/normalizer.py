"""Protocolos de normalização inbound."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .models import CanonicalMessage


class MessageNormalizerProtocol(Protocol):
    """Contrato mínimo para normalização de eventos de mensagem crus."""

    def normalize(
        self, raw: dict[str, Any], own_address: str = ""
    ) -> CanonicalMessage | None: ...
