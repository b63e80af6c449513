"""Protocolo do provedor de transporte da sessão de chat.

O transporte é opaco: implementa o protocolo de chat e emite eventos
tipados para um sink fornecido pelo controlador de sessão.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import asyncio


class DisconnectReason(StrEnum):
    """Motivos de fechamento reportados pelo provedor."""

    LOGGED_OUT = "logged_out"
    BAD_SESSION = "bad_session"
    CONNECTION_CLOSED = "connection_closed"
    CONNECTION_LOST = "connection_lost"
    TIMED_OUT = "timed_out"
    RESTART_REQUIRED = "restart_required"
    CONNECTION_REPLACED = "connection_replaced"
    PAIRING_EXHAUSTED = "pairing_exhausted"
    MULTIDEVICE_MISMATCH = "multidevice_mismatch"
    FORBIDDEN = "forbidden"
    UNAVAILABLE_SERVICE = "unavailable_service"
    UNKNOWN = "unknown"

    @classmethod
    def from_status_code(cls, status_code: int | None) -> DisconnectReason:
        """Mapeia o status numérico do provedor para um motivo."""
        if status_code is None:
            return cls.UNKNOWN
        return STATUS_CODE_REASONS.get(status_code, cls.UNKNOWN)

    @classmethod
    def parse(cls, reason: str | None, status_code: int | None = None) -> DisconnectReason:
        """Aceita o nome do motivo; cai para o status numérico se desconhecido."""
        if reason:
            try:
                return cls(reason)
            except ValueError:
                pass
        return cls.from_status_code(status_code)


STATUS_CODE_REASONS: dict[int, DisconnectReason] = {
    401: DisconnectReason.LOGGED_OUT,
    403: DisconnectReason.FORBIDDEN,
    408: DisconnectReason.CONNECTION_LOST,
    411: DisconnectReason.MULTIDEVICE_MISMATCH,
    428: DisconnectReason.CONNECTION_CLOSED,
    440: DisconnectReason.CONNECTION_REPLACED,
    500: DisconnectReason.BAD_SESSION,
    503: DisconnectReason.UNAVAILABLE_SERVICE,
    515: DisconnectReason.RESTART_REQUIRED,
}


@dataclass(frozen=True, slots=True)
class QrIssued:
    qr: str


@dataclass(frozen=True, slots=True)
class PairingCodeIssued:
    code: str


@dataclass(frozen=True, slots=True)
class ConnectionOpened:
    own_address: str = ""


@dataclass(frozen=True, slots=True)
class ConnectionClosed:
    reason: DisconnectReason
    status_code: int | None = None
    detail: str = ""


@dataclass(frozen=True, slots=True)
class CredentialsUpdated:
    """Entradas de credencial alteradas.

    O transporte aguarda `ack` antes de considerar o estado durável.
    """

    entries: Mapping[str, Any]
    ack: asyncio.Future[None] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class MessagesReceived:
    messages: tuple[dict[str, Any], ...]


TransportEvent = (
    QrIssued
    | PairingCodeIssued
    | ConnectionOpened
    | ConnectionClosed
    | CredentialsUpdated
    | MessagesReceived
)

EventSink = Callable[[TransportEvent], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class TransportOptions:
    """Opções de conexão repassadas ao transporte.

    Attributes:
        pairing_phone_number: Se definido, pede código numérico em vez de QR
    """

    pairing_phone_number: str = ""


class SessionTransportProtocol(ABC):
    """Contrato mínimo de um transporte de sessão.

    Apenas o controlador de sessão cria, inicia e fecha transportes.
    """

    @abstractmethod
    async def start(self) -> None:
        """Abre a conexão e começa a emitir eventos.

        Raises:
            TransportSetupError: Se o setup falhar.
        """

    @abstractmethod
    async def send_text(self, address: str, body: str) -> str:
        """Envia texto e retorna o ID atribuído à mensagem.

        Raises:
            BridgeError: Se o transporte rejeitar o envio.
        """

    @abstractmethod
    async def close(self) -> None:
        """Encerra a conexão. Idempotente."""


TransportFactory = Callable[
    [dict[str, Any] | None, EventSink, TransportOptions],
    SessionTransportProtocol,
]
