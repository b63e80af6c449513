"""Controlador do ciclo de vida da sessão de transporte.

Único dono do estado da sessão e do transporte ativo:
- cria/derruba o transporte (um por processo, com número de geração)
- consome eventos do transporte numa fila limitada, em um único loop
- aplica a política de reconexão e o timer de pareamento
- persiste credenciais antes de confirmar ao transporte
- expõe restart/reset do operador e o snapshot somente-leitura

Transições de estado passam pela FSM (`fsm`), que valida mapa e guards.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.observability.metrics import record_state_transition
from app.protocols.transport import TransportOptions
from app.sessions.controller_events import SessionEventHandlersMixin
from app.sessions.models import SessionSnapshot
from app.sessions.reconnect_policy import ReconnectPolicy
from fsm import SessionState, SessionStateMachine
from utils.errors import SendFailedError, SessionNotReadyError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.credential_store import CredentialStoreProtocol
    from app.protocols.models import PairingMaterial
    from app.protocols.transport import (
        DisconnectReason,
        SessionTransportProtocol,
        TransportEvent,
        TransportFactory,
    )
    from app.sessions.models import PairingExpired
    from config.settings import SessionSettings

logger = logging.getLogger(__name__)

OPERATOR_RESTART = "operator_restart"
OPERATOR_RESET = "operator_reset"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SessionController(SessionEventHandlersMixin):
    """Controlador da sessão de transporte.

    Args:
        transport_factory: Cria um transporte por tentativa de conexão
        credential_store: Persistência do bundle de credenciais
        settings: Timeouts e atrasos de reconexão
        policy: Política de reconexão (padrão derivado de settings)
        on_messages: Callback síncrono para lotes de mensagens recebidas
        clock: Fonte de tempo UTC (injetável em testes)
    """

    def __init__(
        self,
        *,
        transport_factory: TransportFactory,
        credential_store: CredentialStoreProtocol,
        settings: SessionSettings,
        policy: ReconnectPolicy | None = None,
        on_messages: Callable[[tuple[dict[str, Any], ...], str], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._factory = transport_factory
        self._store = credential_store
        self._settings = settings
        self._policy = policy or ReconnectPolicy(settings)
        self._on_messages = on_messages
        self._clock = clock
        self._options = TransportOptions(pairing_phone_number=settings.pairing_phone_number)

        self._fsm = SessionStateMachine("chat_session")
        self._queue: asyncio.Queue[tuple[int, TransportEvent | PairingExpired]] = asyncio.Queue(
            maxsize=settings.event_queue_size
        )
        self._lifecycle_lock = asyncio.Lock()
        self._transport: SessionTransportProtocol | None = None
        self._generation = 0
        self._attempt = 0

        self._loop_task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._pairing_task: asyncio.Task[None] | None = None

        self._pairing: PairingMaterial | None = None
        self._pairing_serial = 0
        self._own_address = ""
        self._last_reason: DisconnectReason | None = None
        self._last_error: str | None = None
        self._updated_at = clock()
        self._running = False

    # ──────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._fsm.state

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> SessionSnapshot:
        """Retorna cópia imutável do estado corrente."""
        return SessionSnapshot(
            state=self._fsm.state,
            pairing=self._pairing,
            own_address=self._own_address,
            attempt=self._attempt,
            last_disconnect_reason=self._last_reason,
            last_error=self._last_error,
            updated_at=self._updated_at,
        )

    def history(self) -> list[dict[str, Any]]:
        """Histórico recente de transições (seguro para logs)."""
        return self._fsm.recent()

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida do processo
    # ──────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Inicia o loop de eventos e a primeira tentativa de conexão."""
        if self._running:
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._dispatch_loop())
        self._schedule_connect(0.0, "startup")
        logger.info("session_controller_started")

    async def stop(self) -> None:
        """Cancela timers, derruba o transporte e encerra o loop."""
        if not self._running:
            return
        self._running = False
        await self._cancel_connect()
        self._cancel_pairing_timer()
        async with self._lifecycle_lock:
            await self._teardown_transport()
            self._clear_pairing()
            if self.state not in (SessionState.DISCONNECTED, SessionState.LOGGED_OUT):
                self._transition(SessionState.DISCONNECTED, "shutdown")
        if self._loop_task is not None:
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
            self._loop_task = None
        logger.info("session_controller_stopped")

    # ──────────────────────────────────────────────────────────────
    # Comandos do operador
    # ──────────────────────────────────────────────────────────────

    async def restart(self) -> None:
        """Derruba a sessão e reconecta mantendo as credenciais."""
        await self._operator_command(OPERATOR_RESTART, purge_credentials=False)

    async def reset(self) -> None:
        """Derruba a sessão, apaga credenciais e reconecta (novo pareamento)."""
        await self._operator_command(OPERATOR_RESET, purge_credentials=True)

    async def _operator_command(self, trigger: str, *, purge_credentials: bool) -> None:
        logger.info("session_operator_command", extra={"trigger": trigger})
        await self._cancel_connect()
        self._cancel_pairing_timer()
        try:
            async with self._lifecycle_lock:
                await self._teardown_transport()
                self._clear_pairing()
                self._last_error = None
                try:
                    if purge_credentials:
                        await self._store.clear()
                except Exception as exc:
                    self._last_error = f"{type(exc).__name__}: {exc}"
                    logger.error(
                        "credentials_purge_failed",
                        extra={"trigger": trigger, "error_type": type(exc).__name__},
                    )
                    raise
                finally:
                    # Sem transporte: o estado acompanha mesmo se a limpeza falhar
                    if self.state != SessionState.DISCONNECTED:
                        self._transition(SessionState.DISCONNECTED, trigger)
        finally:
            if self._running:
                self._schedule_connect(self._settings.operator_reconnect_delay_seconds, trigger)

    # ──────────────────────────────────────────────────────────────
    # Envio outbound
    # ──────────────────────────────────────────────────────────────

    async def send_text(self, address: str, body: str) -> str:
        """Envia texto pelo transporte ativo.

        Raises:
            SessionNotReadyError: Sessão fora de `connected`.
            SendFailedError: Transporte falhou; nunca há retry.
        """
        transport = self._transport
        if self.state != SessionState.CONNECTED or transport is None:
            raise SessionNotReadyError(self.state.value)
        try:
            return await transport.send_text(address, body)
        except Exception as exc:
            raise SendFailedError(str(exc) or type(exc).__name__) from exc

    # ──────────────────────────────────────────────────────────────
    # Conexão
    # ──────────────────────────────────────────────────────────────

    def _schedule_connect(self, delay_seconds: float, trigger: str) -> None:
        """Agenda nova tentativa; substitui qualquer tentativa pendente."""
        current = self._connect_task
        if current is not None and current is not asyncio.current_task():
            current.cancel()
        self._connect_task = asyncio.create_task(self._delayed_connect(delay_seconds, trigger))
        logger.debug(
            "session_connect_scheduled",
            extra={"delay_seconds": delay_seconds, "trigger": trigger},
        )

    async def _delayed_connect(self, delay_seconds: float, trigger: str) -> None:
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        await self._connect(trigger)

    async def _cancel_connect(self) -> None:
        task, self._connect_task = self._connect_task, None
        if task is None or task is asyncio.current_task() or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _connect(self, trigger: str) -> None:
        """Procedimento completo: teardown, recarga de credenciais, novo transporte."""
        async with self._lifecycle_lock:
            await self._teardown_transport()
            self._clear_pairing()
            self._generation += 1
            generation = self._generation
            self._attempt += 1
            self._transition(SessionState.CONNECTING, trigger)
            try:
                credentials = await self._store.load()
                sink = functools.partial(self._post, generation)
                self._transport = self._factory(credentials, sink, self._options)
                await asyncio.wait_for(
                    self._transport.start(),
                    timeout=self._settings.connect_timeout_seconds,
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                await self._on_connect_failed(exc)
                return
        logger.info(
            "session_transport_started",
            extra={"generation": generation, "attempt": self._attempt},
        )

    async def _on_connect_failed(self, exc: Exception) -> None:
        self._last_error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
        logger.error(
            "session_connect_failed",
            extra={"error_type": type(exc).__name__, "attempt": self._attempt},
        )
        await self._teardown_transport()
        self._transition(SessionState.ERROR, "connect_failed")
        if self._running:
            self._schedule_connect(self._settings.setup_retry_delay_seconds, "setup_retry")

    async def _teardown_transport(self) -> None:
        """Fecha o transporte ativo; eventos da geração antiga viram obsoletos."""
        transport, self._transport = self._transport, None
        if transport is None:
            return
        self._generation += 1
        try:
            await transport.close()
        except Exception:
            logger.exception("session_transport_close_failed")

    # ──────────────────────────────────────────────────────────────
    # Fila de eventos
    # ──────────────────────────────────────────────────────────────

    async def _post(self, generation: int, event: TransportEvent | PairingExpired) -> None:
        await self._queue.put((generation, event))

    async def _dispatch_loop(self) -> None:
        while True:
            generation, event = await self._queue.get()
            try:
                if generation != self._generation:
                    self._drop_stale(event)
                    continue
                await self._handle_event(event)
            except Exception:
                logger.exception(
                    "session_event_handler_failed",
                    extra={"event_type": type(event).__name__},
                )
            finally:
                self._queue.task_done()

    async def wait_idle(self) -> None:
        """Aguarda a fila de eventos esvaziar."""
        await self._queue.join()

    # ──────────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────────

    def _transition(self, target: SessionState, trigger: str) -> bool:
        from_state = self._fsm.state
        outcome = self._fsm.apply(target, trigger, attempt=self._attempt)
        if not outcome.applied:
            logger.warning(
                "session_transition_denied",
                extra={
                    "from_state": from_state.value,
                    "to_state": target.value,
                    "trigger": trigger,
                    "reason": outcome.denial,
                },
            )
            return False
        self._updated_at = self._clock()
        record_state_transition(from_state.value, target.value, trigger)
        return True

    def _clear_pairing(self) -> None:
        self._cancel_pairing_timer()
        self._pairing = None

    def _cancel_pairing_timer(self) -> None:
        task, self._pairing_task = self._pairing_task, None
        if task is not None and not task.done():
            task.cancel()
