"""Testes do BridgeTransport com WebSocket fake."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from app.infra.transport import BridgeTransport, create_bridge_transport_factory
from app.infra.transport.bridge_frames import decode_frame, lifecycle_event_from_frame
from app.protocols.transport import (
    ConnectionClosed,
    ConnectionOpened,
    CredentialsUpdated,
    DisconnectReason,
    MessagesReceived,
    QrIssued,
    TransportOptions,
)
from config.settings import TransportSettings
from utils.errors import BridgeError, TransportSetupError


class FakeWebSocket:
    """WebSocket em memória: frames recebidos vêm de uma fila."""

    def __init__(self) -> None:
        self.incoming: asyncio.Queue[str | None] = asyncio.Queue()
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.on_send: Callable[[dict[str, Any]], None] | None = None

    async def send(self, data: str) -> None:
        frame = json.loads(data)
        self.sent.append(frame)
        if self.on_send is not None:
            self.on_send(frame)

    async def close(self) -> None:
        self.closed = True

    def push(self, frame_type: str, **fields: Any) -> None:
        self.incoming.put_nowait(json.dumps({"type": frame_type, **fields}))

    def end(self) -> None:
        self.incoming.put_nowait(None)

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> str:
        item = await self.incoming.get()
        if item is None:
            raise StopAsyncIteration
        return item

    def sent_of(self, frame_type: str) -> list[dict[str, Any]]:
        return [frame for frame in self.sent if frame["type"] == frame_type]


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


def _settings(**overrides: Any) -> TransportSettings:
    return TransportSettings(bridge_url="ws://bridge:3001", bridge_token="tok", **overrides)


def _transport(
    ws: FakeWebSocket,
    events: list[Any],
    *,
    credentials: dict[str, Any] | None = None,
    options: TransportOptions | None = None,
    **settings: Any,
) -> BridgeTransport:
    async def sink(event: Any) -> None:
        events.append(event)

    async def connect(url: str, **kwargs: Any) -> FakeWebSocket:
        return ws

    return BridgeTransport(
        credentials,
        sink,
        options or TransportOptions(),
        settings=_settings(**settings),
        connect=connect,
    )


class TestStart:
    @pytest.mark.asyncio
    async def test_start_sends_start_frame(self) -> None:
        ws = FakeWebSocket()
        transport = _transport(
            ws,
            [],
            credentials={"creds": {"a": 1}},
            options=TransportOptions(pairing_phone_number="5511999990000"),
        )

        await transport.start()
        await transport.close()

        assert ws.sent[0] == {
            "type": "start",
            "token": "tok",
            "credentials": {"creds": {"a": 1}},
            "pairingPhoneNumber": "5511999990000",
        }

    @pytest.mark.asyncio
    async def test_connect_failure_is_setup_error(self) -> None:
        async def refuse(url: str, **kwargs: Any) -> FakeWebSocket:
            raise ConnectionRefusedError("refused")

        async def sink(event: Any) -> None:
            raise AssertionError("sem eventos")

        transport = BridgeTransport(
            None, sink, TransportOptions(), settings=_settings(), connect=refuse
        )

        with pytest.raises(TransportSetupError, match="bridge_connect_failed"):
            await transport.start()


class TestInboundFrames:
    @pytest.mark.asyncio
    async def test_lifecycle_frames_reach_sink_in_order(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.push("qr", qr="2@abc")
        ws.push("open", ownAddress="5511999990000")
        ws.push("messages", messages=[{"key": {"id": "A1"}}, "junk"])
        await _wait_until(lambda: len(events) == 3)
        await transport.close()

        assert events[0] == QrIssued(qr="2@abc")
        assert events[1] == ConnectionOpened(own_address="5511999990000")
        assert events[2] == MessagesReceived(messages=({"key": {"id": "A1"}},))

    @pytest.mark.asyncio
    async def test_invalid_frames_are_ignored(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.incoming.put_nowait("not json")
        ws.incoming.put_nowait(json.dumps(["list"]))
        ws.push("unknown_type")
        ws.push("qr", qr="ok")
        await _wait_until(lambda: len(events) == 1)
        await transport.close()

        assert events == [QrIssued(qr="ok")]

    @pytest.mark.asyncio
    async def test_socket_end_reports_connection_lost_once(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.end()
        await _wait_until(lambda: len(events) == 1)
        await transport.close()

        assert isinstance(events[0], ConnectionClosed)
        assert events[0].reason == DisconnectReason.CONNECTION_LOST

    @pytest.mark.asyncio
    async def test_close_frame_is_not_followed_by_connection_lost(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.push("close", reason="weird", statusCode=401, detail="logged out")
        ws.end()
        await _wait_until(lambda: len(events) >= 1)
        await asyncio.sleep(0.01)
        await transport.close()

        assert len(events) == 1
        assert events[0] == ConnectionClosed(
            reason=DisconnectReason.LOGGED_OUT, status_code=401, detail="logged out"
        )

    @pytest.mark.asyncio
    async def test_close_by_controller_emits_nothing(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        await transport.close()
        await transport.close()

        assert events == []
        assert ws.closed is True


class TestCredentials:
    @pytest.mark.asyncio
    async def test_creds_ack_is_sent_after_persist(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.push("creds", requestId="c1", entries={"creds": {"a": 1}, "old": None})
        await _wait_until(lambda: len(events) == 1)
        update = events[0]
        assert isinstance(update, CredentialsUpdated)
        assert update.entries == {"creds": {"a": 1}, "old": None}
        assert ws.sent_of("creds_ack") == []

        update.ack.set_result(None)
        await _wait_until(lambda: len(ws.sent_of("creds_ack")) == 1)
        await transport.close()

        assert ws.sent_of("creds_ack")[0] == {"type": "creds_ack", "requestId": "c1", "ok": True}

    @pytest.mark.asyncio
    async def test_failed_persist_is_reported(self) -> None:
        ws = FakeWebSocket()
        events: list[Any] = []
        transport = _transport(ws, events)
        await transport.start()

        ws.push("creds", requestId="c2", entries={"creds": {}})
        await _wait_until(lambda: len(events) == 1)
        events[0].ack.set_exception(RuntimeError("disk full"))
        await _wait_until(lambda: len(ws.sent_of("creds_ack")) == 1)
        await transport.close()

        ack = ws.sent_of("creds_ack")[0]
        assert ack["ok"] is False
        assert ack["error"] == "disk full"


class TestSendText:
    @pytest.mark.asyncio
    async def test_send_returns_message_id(self) -> None:
        ws = FakeWebSocket()
        transport = _transport(ws, [])

        def respond(frame: dict[str, Any]) -> None:
            if frame["type"] == "send":
                ws.push("send_result", requestId=frame["requestId"], ok=True, messageId="3EB0X")

        ws.on_send = respond
        await transport.start()

        message_id = await transport.send_text("5551234@s.whatsapp.net", "oi")
        await transport.close()

        assert message_id == "3EB0X"
        send_frame = ws.sent_of("send")[0]
        assert send_frame["to"] == "5551234@s.whatsapp.net"
        assert send_frame["text"] == "oi"

    @pytest.mark.asyncio
    async def test_rejected_send_raises(self) -> None:
        ws = FakeWebSocket()
        transport = _transport(ws, [])

        def respond(frame: dict[str, Any]) -> None:
            if frame["type"] == "send":
                ws.push("send_result", requestId=frame["requestId"], ok=False, error="not_on_network")

        ws.on_send = respond
        await transport.start()

        with pytest.raises(BridgeError, match="not_on_network"):
            await transport.send_text("5551234@s.whatsapp.net", "oi")
        await transport.close()

    @pytest.mark.asyncio
    async def test_send_without_result_times_out(self) -> None:
        ws = FakeWebSocket()
        transport = _transport(ws, [], send_timeout_seconds=0.01)
        await transport.start()

        with pytest.raises(BridgeError, match="bridge_send_timeout"):
            await transport.send_text("5551234@s.whatsapp.net", "oi")
        await transport.close()

    @pytest.mark.asyncio
    async def test_send_before_start_raises(self) -> None:
        transport = _transport(FakeWebSocket(), [])

        with pytest.raises(BridgeError, match="bridge_not_connected"):
            await transport.send_text("5551234@s.whatsapp.net", "oi")


def test_factory_builds_bridge_transport() -> None:
    async def sink(event: Any) -> None:
        return None

    factory = create_bridge_transport_factory(_settings())
    transport = factory(None, sink, TransportOptions())

    assert isinstance(transport, BridgeTransport)


def test_decode_and_map_pairing_code_frame() -> None:
    frame = decode_frame(b'{"type": "pairing_code", "code": "ABCD1234"}')

    event = lifecycle_event_from_frame(frame)

    assert event is not None
    assert event.code == "ABCD1234"
