"""Modelos do controlador de sessão.

SessionSnapshot é a única visão do estado da sessão exposta a outros
componentes; PairingExpired é o evento interno do timer de pareamento.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from fsm.states import SessionState

if TYPE_CHECKING:
    from app.protocols.models import PairingMaterial
    from app.protocols.transport import DisconnectReason


@dataclass(frozen=True, slots=True)
class PairingExpired:
    """Timer de pareamento disparou para o material `serial`."""

    serial: int


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Visão somente-leitura do estado da sessão.

    Attributes:
        state: Estado atual da conexão
        pairing: Material de pareamento corrente (QR ou código)
        own_address: Endereço da própria conta (após conectar)
        attempt: Número da tentativa de conexão corrente
        last_disconnect_reason: Motivo do último fechamento
        last_error: Descrição do último erro de setup/fechamento
        updated_at: Momento da última mudança (UTC)
    """

    state: SessionState
    pairing: PairingMaterial | None
    own_address: str
    attempt: int
    last_disconnect_reason: DisconnectReason | None
    last_error: str | None
    updated_at: datetime

    @property
    def is_connected(self) -> bool:
        return self.state == SessionState.CONNECTED

    @property
    def has_pairing_material(self) -> bool:
        return self.pairing is not None

    def to_dict(self) -> dict[str, Any]:
        """Representação para a API de status (sem o valor do QR)."""
        return {
            "state": self.state.value,
            "connected": self.is_connected,
            "hasPairingMaterial": self.has_pairing_material,
            "pairingKind": self.pairing.kind.value if self.pairing else None,
            "ownAddress": self.own_address or None,
            "attempt": self.attempt,
            "lastDisconnectReason": (
                self.last_disconnect_reason.value if self.last_disconnect_reason else None
            ),
            "lastError": self.last_error,
            "updatedAt": self.updated_at.isoformat(),
        }
