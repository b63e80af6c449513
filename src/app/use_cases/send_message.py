"""Use case do gateway de envio outbound.

Ordem de validação:
1. Sessão em `connected` (SessionNotReadyError)
2. Destino e corpo não vazios (InvalidRequestError)
3. Tipo `text` (UnsupportedKindError)

Destino sem "@" recebe o sufixo de endereço individual.
Falha do transporte vira SendFailedError; nunca há retry.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol

from app.observability.metrics import record_latency, record_send
from app.protocols.models import INDIVIDUAL_ADDRESS_SUFFIX, ContentKind, SendResult
from fsm import SessionState
from utils.errors import (
    InvalidRequestError,
    SendFailedError,
    SessionNotReadyError,
    UnsupportedKindError,
    ValidationError,
)

if TYPE_CHECKING:
    from app.protocols.models import SendRequest
    from app.sessions.models import SessionSnapshot

logger = logging.getLogger(__name__)

SUPPORTED_KINDS = frozenset({ContentKind.TEXT.value})


class SessionSenderProtocol(Protocol):
    """Parte do controlador de sessão usada pelo gateway."""

    def snapshot(self) -> SessionSnapshot: ...

    async def send_text(self, address: str, body: str) -> str: ...


def resolve_destination(destination: str) -> str:
    """Endereço completo: usa como está se tiver "@", senão sufixa."""
    if "@" in destination:
        return destination
    return f"{destination}{INDIVIDUAL_ADDRESS_SUFFIX}"


class SendMessageUseCase:
    """Valida e envia mensagens de texto pela sessão ativa."""

    def __init__(self, session: SessionSenderProtocol) -> None:
        self._session = session

    def validate(self, request: SendRequest) -> None:
        """Aplica as validações na ordem fixa.

        Raises:
            SessionNotReadyError, InvalidRequestError, UnsupportedKindError
        """
        state = self._session.snapshot().state
        if state != SessionState.CONNECTED:
            raise SessionNotReadyError(state.value)
        # Corpo só espaços é enviado como está; destino precisa de conteúdo
        if not request.destination.strip() or not request.body:
            raise InvalidRequestError("destination and body are required")
        if request.kind not in SUPPORTED_KINDS:
            raise UnsupportedKindError(request.kind)

    async def execute(self, request: SendRequest) -> SendResult:
        """Valida, resolve o destino e envia.

        Raises:
            ValidationError: Qualquer falha de validação.
            SendFailedError: Falha do transporte.
        """
        try:
            self.validate(request)
        except ValidationError as exc:
            record_send("rejected", exc.code)
            raise

        destination = resolve_destination(request.destination.strip())
        started = time.perf_counter()
        try:
            message_id = await self._session.send_text(destination, request.body)
        except SessionNotReadyError as exc:
            record_send("rejected", exc.code)
            raise
        except SendFailedError as exc:
            record_send("failed", exc.code)
            logger.error("outbound_send_failed", extra={"destination": destination})
            raise

        record_latency("send_gateway", "send_text", (time.perf_counter() - started) * 1000)
        record_send("sent")
        logger.info(
            "outbound_message_sent",
            extra={"destination": destination, "message_id": message_id},
        )
        return SendResult(message_id=message_id, destination=destination)
