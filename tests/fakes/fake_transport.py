"""Transporte fake para testes do controlador de sessão.

Registra chamadas e permite emitir eventos pelo sink recebido
da fábrica, como um provedor real faria.
"""

from __future__ import annotations

import asyncio
from typing import Any

from app.protocols.transport import (
    CredentialsUpdated,
    EventSink,
    SessionTransportProtocol,
    TransportEvent,
    TransportOptions,
)


class FakeTransport(SessionTransportProtocol):
    """Transporte em memória; `emit` injeta eventos no controlador."""

    def __init__(
        self,
        credentials: dict[str, Any] | None,
        sink: EventSink,
        options: TransportOptions,
        *,
        start_error: Exception | None = None,
        send_error: Exception | None = None,
        hang_on_start: bool = False,
    ) -> None:
        self.credentials = credentials
        self.sink = sink
        self.options = options
        self.start_error = start_error
        self.send_error = send_error
        self.hang_on_start = hang_on_start
        self.start_calls = 0
        self.started = False
        self.closed = False
        self.sent: list[tuple[str, str]] = []

    async def start(self) -> None:
        self.start_calls += 1
        if self.hang_on_start:
            # Provedor que nunca conclui o handshake
            await asyncio.Event().wait()
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    async def send_text(self, address: str, body: str) -> str:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((address, body))
        return f"MSG{len(self.sent)}"

    async def close(self) -> None:
        self.closed = True

    async def emit(self, event: TransportEvent) -> None:
        await self.sink(event)

    async def emit_credentials(self, entries: dict[str, Any]) -> asyncio.Future[None]:
        """Emite atualização de credenciais e devolve o future de ack."""
        ack: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        await self.sink(CredentialsUpdated(entries=entries, ack=ack))
        return ack


class FakeTransportFactory:
    """Fábrica que guarda cada transporte criado, em ordem."""

    def __init__(self) -> None:
        self.created: list[FakeTransport] = []
        self.start_errors: list[Exception | None] = []
        self.send_error: Exception | None = None
        self.hanging_starts = 0

    def __call__(
        self,
        credentials: dict[str, Any] | None,
        sink: EventSink,
        options: TransportOptions,
    ) -> FakeTransport:
        start_error = self.start_errors.pop(0) if self.start_errors else None
        transport = FakeTransport(
            credentials,
            sink,
            options,
            start_error=start_error,
            send_error=self.send_error,
            hang_on_start=self.hanging_starts > 0,
        )
        self.hanging_starts = max(self.hanging_starts - 1, 0)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]
