"""Handlers de eventos do SessionController.

Executados apenas pelo loop de eventos do controlador, um por vez;
nenhum outro código altera estado da sessão em resposta a eventos.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from app.observability.metrics import record_reconnect
from app.protocols.models import PairingKind, PairingMaterial
from app.protocols.transport import (
    ConnectionClosed,
    ConnectionOpened,
    CredentialsUpdated,
    MessagesReceived,
    PairingCodeIssued,
    QrIssued,
)
from app.sessions.models import PairingExpired
from app.sessions.reconnect_policy import as_error
from fsm import SessionState
from utils.errors import BridgeError

if TYPE_CHECKING:
    from app.protocols.transport import TransportEvent

logger = logging.getLogger(__name__)

QR_ACCEPTING_STATES = frozenset({SessionState.CONNECTING, SessionState.QR_READY})
CODE_ACCEPTING_STATES = frozenset(
    {SessionState.CONNECTING, SessionState.QR_READY, SessionState.PAIRING}
)


class SessionEventHandlersMixin:
    """Aplica eventos do transporte e do timer de pareamento ao estado."""

    async def _handle_event(self, event: TransportEvent | PairingExpired) -> None:
        if isinstance(event, QrIssued):
            self._on_qr_issued(event)
        elif isinstance(event, PairingCodeIssued):
            self._on_pairing_code_issued(event)
        elif isinstance(event, ConnectionOpened):
            self._on_connection_opened(event)
        elif isinstance(event, ConnectionClosed):
            await self._on_connection_closed(event)
        elif isinstance(event, CredentialsUpdated):
            await self._on_credentials_updated(event)
        elif isinstance(event, MessagesReceived):
            self._on_messages_received(event)
        elif isinstance(event, PairingExpired):
            self._on_pairing_expired(event)
        else:
            logger.warning("session_event_unknown", extra={"event_type": type(event).__name__})

    def _drop_stale(self, event: TransportEvent | PairingExpired) -> None:
        """Descarta evento de um transporte já derrubado."""
        if isinstance(event, CredentialsUpdated) and event.ack is not None:
            if not event.ack.done():
                event.ack.set_exception(BridgeError("stale_transport"))
        logger.debug("session_event_stale", extra={"event_type": type(event).__name__})

    # ──────────────────────────────────────────────────────────────
    # Pareamento
    # ──────────────────────────────────────────────────────────────

    def _on_qr_issued(self, event: QrIssued) -> None:
        state = self.state
        if state == SessionState.PAIRING:
            # QR e código são mutuamente exclusivos por tentativa
            logger.info("pairing_qr_ignored", extra={"reason": "pairing_code_active"})
            return
        if state not in QR_ACCEPTING_STATES:
            logger.info("pairing_qr_ignored", extra={"reason": "invalid_state", "state": state.value})
            return
        if self._transition(SessionState.QR_READY, "qr_issued"):
            self._issue_pairing(PairingKind.QR, event.qr)

    def _on_pairing_code_issued(self, event: PairingCodeIssued) -> None:
        state = self.state
        if state not in CODE_ACCEPTING_STATES:
            logger.info(
                "pairing_code_ignored", extra={"reason": "invalid_state", "state": state.value}
            )
            return
        if self._transition(SessionState.PAIRING, "pairing_code_issued"):
            self._issue_pairing(PairingKind.CODE, event.code)

    def _issue_pairing(self, kind: PairingKind, value: str) -> None:
        self._cancel_pairing_timer()
        timeout = self._settings.pairing_timeout_seconds
        issued_at = self._clock()
        self._pairing_serial += 1
        self._pairing = PairingMaterial(
            kind=kind,
            value=value,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=timeout),
            attempt=self._attempt,
        )
        self._pairing_task = asyncio.create_task(
            self._pairing_timer(self._pairing_serial, self._generation, timeout)
        )
        logger.info(
            "pairing_material_issued",
            extra={"kind": kind.value, "attempt": self._attempt, "timeout_seconds": timeout},
        )

    async def _pairing_timer(self, serial: int, generation: int, timeout: float) -> None:
        await asyncio.sleep(timeout)
        await self._post(generation, PairingExpired(serial=serial))

    def _on_pairing_expired(self, event: PairingExpired) -> None:
        if self._pairing is None or event.serial != self._pairing_serial:
            logger.debug("pairing_expiry_stale", extra={"serial": event.serial})
            return
        kind = self._pairing.kind
        self._pairing = None
        self._pairing_task = None
        self._transition(SessionState.CONNECTING, "pairing_expired")
        logger.info("pairing_material_expired", extra={"kind": kind.value})

    # ──────────────────────────────────────────────────────────────
    # Conexão
    # ──────────────────────────────────────────────────────────────

    def _on_connection_opened(self, event: ConnectionOpened) -> None:
        self._clear_pairing()
        if not self._transition(SessionState.CONNECTED, "connection_opened"):
            return
        self._own_address = event.own_address
        self._last_error = None
        logger.info(
            "session_connected",
            extra={"own_address": event.own_address, "attempt": self._attempt},
        )

    async def _on_connection_closed(self, event: ConnectionClosed) -> None:
        decision = self._policy.decide(event.reason)
        error = as_error(event.reason, event.status_code)
        self._last_reason = event.reason
        self._last_error = f"{type(error).__name__}: {error.reason}"
        logger.warning(
            "session_connection_closed",
            extra={
                "reason": event.reason.value,
                "status_code": event.status_code,
                "action": decision.action.value,
                "purge_credentials": decision.purge_credentials,
            },
        )

        await self._cancel_connect()
        self._clear_pairing()
        async with self._lifecycle_lock:
            await self._teardown_transport()
            if decision.purge_credentials:
                await self._purge_credentials()

        trigger = f"closed_{event.reason.value}"
        if decision.terminal:
            self._transition(SessionState.LOGGED_OUT, trigger)
        elif self.state != SessionState.DISCONNECTED:
            self._transition(SessionState.DISCONNECTED, trigger)

        if decision.should_reconnect and self._running:
            record_reconnect(
                event.reason.value, decision.delay_seconds, decision.purge_credentials
            )
            self._schedule_connect(decision.delay_seconds, f"reconnect_{event.reason.value}")

    async def _purge_credentials(self) -> None:
        try:
            await self._store.clear()
        except Exception:
            logger.exception("credentials_purge_failed")

    # ──────────────────────────────────────────────────────────────
    # Credenciais e mensagens
    # ──────────────────────────────────────────────────────────────

    async def _on_credentials_updated(self, event: CredentialsUpdated) -> None:
        ack = event.ack
        try:
            await self._store.save(event.entries)
        except Exception as exc:
            logger.error(
                "credentials_persist_failed",
                extra={"error_type": type(exc).__name__, "entries": len(event.entries)},
            )
            if ack is not None and not ack.done():
                ack.set_exception(exc)
            return
        if ack is not None and not ack.done():
            ack.set_result(None)

    def _on_messages_received(self, event: MessagesReceived) -> None:
        if self._on_messages is None:
            logger.debug("session_messages_unhandled", extra={"count": len(event.messages)})
            return
        self._on_messages(event.messages, self._own_address)
