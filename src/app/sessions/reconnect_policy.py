"""Política de reconexão da sessão de transporte.

Mapeia o motivo de fechamento para a próxima ação, em ordem de
prioridade:

1. logged_out: apaga credenciais, sem reconexão (estado terminal)
2. bad_session: apaga credenciais, reconecta
3. transitórios (closed, lost, timed_out, pairing_exhausted): reconecta
4. restart_required: reconecta
5. connection_replaced: não reconecta (outra instância assumiu)
6. demais: reconecta com atraso padrão
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from app.protocols.transport import DisconnectReason
from utils.errors import RecoverableDisconnect, UnrecoverableLogout

if TYPE_CHECKING:
    from config.settings import SessionSettings

TRANSIENT_REASONS = frozenset(
    {
        DisconnectReason.CONNECTION_CLOSED,
        DisconnectReason.CONNECTION_LOST,
        DisconnectReason.TIMED_OUT,
        DisconnectReason.PAIRING_EXHAUSTED,
    }
)


class ReconnectAction(StrEnum):
    RECONNECT = "reconnect"
    STOP = "stop"


@dataclass(frozen=True, slots=True)
class ReconnectDecision:
    """Próxima ação após um fechamento.

    Attributes:
        action: reconnect ou stop
        delay_seconds: Atraso antes da nova tentativa
        purge_credentials: Apagar credenciais antes de reconectar/parar
        terminal: Sessão vai para logged_out (só sai por comando do operador)
    """

    action: ReconnectAction
    delay_seconds: float = 0.0
    purge_credentials: bool = False
    terminal: bool = False

    @property
    def should_reconnect(self) -> bool:
        return self.action == ReconnectAction.RECONNECT


class ReconnectPolicy:
    """Decide reconexão a partir do motivo de fechamento."""

    def __init__(self, settings: SessionSettings) -> None:
        self._settings = settings

    def decide(self, reason: DisconnectReason) -> ReconnectDecision:
        settings = self._settings
        if reason == DisconnectReason.LOGGED_OUT:
            return ReconnectDecision(
                action=ReconnectAction.STOP,
                purge_credentials=True,
                terminal=True,
            )
        if reason == DisconnectReason.BAD_SESSION:
            return ReconnectDecision(
                action=ReconnectAction.RECONNECT,
                delay_seconds=settings.bad_session_reconnect_delay_seconds,
                purge_credentials=True,
            )
        if reason in TRANSIENT_REASONS:
            return ReconnectDecision(
                action=ReconnectAction.RECONNECT,
                delay_seconds=settings.transient_reconnect_delay_seconds,
            )
        if reason == DisconnectReason.RESTART_REQUIRED:
            return ReconnectDecision(
                action=ReconnectAction.RECONNECT,
                delay_seconds=settings.restart_required_delay_seconds,
            )
        if reason == DisconnectReason.CONNECTION_REPLACED:
            return ReconnectDecision(action=ReconnectAction.STOP)
        return ReconnectDecision(
            action=ReconnectAction.RECONNECT,
            delay_seconds=settings.reconnect_delay_seconds,
        )


def as_error(
    reason: DisconnectReason, status_code: int | None = None
) -> RecoverableDisconnect | UnrecoverableLogout:
    """Classifica o fechamento na taxonomia de erros."""
    if reason == DisconnectReason.LOGGED_OUT:
        return UnrecoverableLogout(reason.value, status_code)
    return RecoverableDisconnect(reason.value, status_code)
