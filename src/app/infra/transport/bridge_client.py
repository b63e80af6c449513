"""Cliente WebSocket do bridge de transporte.

Uma instância por tentativa de conexão: o controlador de sessão cria,
inicia e fecha. Eventos do bridge são entregues ao sink do controlador
na ordem de chegada.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import uuid
from typing import TYPE_CHECKING, Any

import websockets
from websockets.exceptions import ConnectionClosed as WebSocketClosed
from websockets.exceptions import WebSocketException

from app.infra.transport.bridge_frames import (
    FRAME_CLOSE,
    FRAME_CREDS,
    FRAME_CREDS_ACK,
    FRAME_SEND,
    FRAME_SEND_RESULT,
    FRAME_START,
    decode_frame,
    encode_frame,
    lifecycle_event_from_frame,
)
from app.protocols.transport import (
    ConnectionClosed,
    CredentialsUpdated,
    DisconnectReason,
    SessionTransportProtocol,
)
from utils.errors import BridgeError, TransportSetupError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.transport import EventSink, TransportFactory, TransportOptions
    from config.settings import TransportSettings

logger = logging.getLogger(__name__)


class BridgeTransport(SessionTransportProtocol):
    """Transporte que delega o protocolo de chat a um sidecar.

    Args:
        credentials: Bundle carregado do credential store (ou None)
        sink: Corrotina que recebe os eventos de transporte
        options: Opções de conexão (pareamento por código)
        settings: URL, token e timeouts do bridge
        connect: Fábrica de conexão (injetável em testes)
    """

    def __init__(
        self,
        credentials: dict[str, Any] | None,
        sink: EventSink,
        options: TransportOptions,
        *,
        settings: TransportSettings,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self._credentials = credentials
        self._sink = sink
        self._options = options
        self._settings = settings
        self._connect = connect
        self._ws: Any | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._ack_tasks: set[asyncio.Task[None]] = set()
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._send_lock = asyncio.Lock()
        self._closing = False
        self._close_reported = False

    async def start(self) -> None:
        """Conecta ao bridge e envia o frame de start."""
        try:
            self._ws = await self._connect(
                self._settings.bridge_url,
                max_size=self._settings.max_frame_bytes,
                open_timeout=self._settings.open_timeout_seconds,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise TransportSetupError(f"bridge_connect_failed: {type(exc).__name__}") from exc

        try:
            await self._write(
                encode_frame(
                    FRAME_START,
                    token=self._settings.bridge_token,
                    credentials=self._credentials,
                    pairingPhoneNumber=self._options.pairing_phone_number or None,
                )
            )
        except BridgeError as exc:
            await self._close_socket()
            raise TransportSetupError("bridge_start_failed") from exc

        self._reader_task = asyncio.create_task(self._read_loop())
        logger.info(
            "bridge_started",
            extra={
                "has_credentials": self._credentials is not None,
                "pairing_mode": "code" if self._options.pairing_phone_number else "qr",
            },
        )

    async def send_text(self, address: str, body: str) -> str:
        """Envia texto e aguarda o send_result correspondente."""
        if self._ws is None or self._closing:
            raise BridgeError("bridge_not_connected")

        request_id = uuid.uuid4().hex
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._write(encode_frame(FRAME_SEND, requestId=request_id, to=address, text=body))
            result = await asyncio.wait_for(future, timeout=self._settings.send_timeout_seconds)
        except TimeoutError as exc:
            raise BridgeError("bridge_send_timeout") from exc
        finally:
            self._pending.pop(request_id, None)

        message_id = result.get("messageId")
        if not isinstance(message_id, str) or not message_id:
            raise BridgeError("bridge_send_missing_message_id")
        return message_id

    async def close(self) -> None:
        """Fecha a conexão e falha envios pendentes."""
        if self._closing:
            return
        self._closing = True
        if self._reader_task is not None:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
        for task in list(self._ack_tasks):
            task.cancel()
        self._fail_pending("bridge_closed")
        await self._close_socket()
        logger.info("bridge_closed")

    # ──────────────────────────────────────────────────────────────
    # Leitura de frames
    # ──────────────────────────────────────────────────────────────

    async def _read_loop(self) -> None:
        detail = "bridge_disconnected"
        try:
            async for raw in self._ws:
                await self._handle_frame(raw)
        except WebSocketClosed as exc:
            detail = f"bridge_disconnected: {exc.rcvd.code if exc.rcvd else 'no_close_frame'}"
        finally:
            self._fail_pending("bridge_disconnected")

        if not self._closing and not self._close_reported:
            self._close_reported = True
            logger.warning("bridge_connection_lost")
            await self._sink(
                ConnectionClosed(reason=DisconnectReason.CONNECTION_LOST, detail=detail)
            )

    async def _handle_frame(self, raw: str | bytes) -> None:
        frame = decode_frame(raw)
        if frame is None:
            return

        frame_type = frame["type"]
        if frame_type == FRAME_SEND_RESULT:
            self._resolve_pending(frame)
            return
        if frame_type == FRAME_CREDS:
            await self._forward_credentials(frame)
            return

        event = lifecycle_event_from_frame(frame)
        if event is None:
            logger.info("bridge_frame_ignored", extra={"frame_type": frame_type})
            return
        if frame_type == FRAME_CLOSE:
            self._close_reported = True
        await self._sink(event)

    async def _forward_credentials(self, frame: dict[str, Any]) -> None:
        entries = frame.get("entries")
        if not isinstance(entries, dict):
            logger.warning("bridge_creds_frame_invalid")
            return
        ack: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        await self._sink(CredentialsUpdated(entries=entries, ack=ack))
        # Ack em task separada para não travar send_result atrás da escrita
        task = asyncio.create_task(self._ack_credentials(str(frame.get("requestId") or ""), ack))
        self._ack_tasks.add(task)
        task.add_done_callback(self._ack_tasks.discard)

    async def _ack_credentials(self, request_id: str, ack: asyncio.Future[None]) -> None:
        try:
            await ack
        except Exception as exc:
            await self._write_quietly(
                encode_frame(FRAME_CREDS_ACK, requestId=request_id, ok=False, error=str(exc))
            )
            return
        await self._write_quietly(encode_frame(FRAME_CREDS_ACK, requestId=request_id, ok=True))

    def _resolve_pending(self, frame: dict[str, Any]) -> None:
        future = self._pending.get(str(frame.get("requestId") or ""))
        if future is None or future.done():
            return
        if frame.get("ok"):
            future.set_result(frame)
            return
        future.set_exception(BridgeError(str(frame.get("error") or "bridge_send_failed")))

    def _fail_pending(self, reason: str) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(BridgeError(reason))
        self._pending.clear()

    # ──────────────────────────────────────────────────────────────
    # Escrita
    # ──────────────────────────────────────────────────────────────

    async def _write(self, data: str) -> None:
        if self._ws is None:
            raise BridgeError("bridge_not_connected")
        try:
            async with self._send_lock:
                await self._ws.send(data)
        except WebSocketException as exc:
            raise BridgeError("bridge_write_failed") from exc

    async def _write_quietly(self, data: str) -> None:
        try:
            await self._write(data)
        except BridgeError:
            logger.warning("bridge_creds_ack_not_sent")

    async def _close_socket(self) -> None:
        ws, self._ws = self._ws, None
        if ws is None:
            return
        with contextlib.suppress(WebSocketException, OSError):
            await ws.close()


def create_bridge_transport_factory(
    settings: TransportSettings,
    connect: Callable[..., Any] = websockets.connect,
) -> TransportFactory:
    """Retorna a fábrica usada pelo controlador a cada tentativa de conexão."""
    return functools.partial(BridgeTransport, settings=settings, connect=connect)
