"""Testes do SessionController com transporte fake.

Cobre: ciclo de conexão, pareamento e expiração, política de reconexão
aplicada, persistência de credenciais com ack, eventos obsoletos,
comandos do operador e envio.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infra.stores import MemoryCredentialStore
from app.protocols.models import PairingKind
from app.protocols.transport import (
    ConnectionClosed,
    ConnectionOpened,
    DisconnectReason,
    MessagesReceived,
    PairingCodeIssued,
    QrIssued,
)
from app.sessions import SessionController
from config.settings import SessionSettings
from fsm import SessionState
from tests.fakes.fake_transport import FakeTransportFactory
from utils.errors import (
    BridgeError,
    CredentialStoreError,
    SendFailedError,
    SessionNotReadyError,
    TransportSetupError,
)

STORED_CREDS = {"creds": {"me": {"id": "5511999990000@s.whatsapp.net"}}}


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


def _settings(**overrides: float) -> SessionSettings:
    values = {
        "connect_timeout_seconds": 1.0,
        "pairing_timeout_seconds": 60.0,
        "reconnect_delay_seconds": 0.0,
        "transient_reconnect_delay_seconds": 0.0,
        "bad_session_reconnect_delay_seconds": 0.0,
        "restart_required_delay_seconds": 0.0,
        "setup_retry_delay_seconds": 0.0,
        "operator_reconnect_delay_seconds": 0.0,
    }
    values.update(overrides)
    return SessionSettings(**values)


def _to_states(controller: SessionController) -> list[str]:
    return [entry["to_state"] for entry in controller.history()]


@pytest.fixture
def factory() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore(STORED_CREDS)


@pytest.fixture
async def controller(factory: FakeTransportFactory, store: MemoryCredentialStore):
    instance = SessionController(
        transport_factory=factory,
        credential_store=store,
        settings=_settings(),
    )
    yield instance
    await instance.stop()


async def _started(controller: SessionController, factory: FakeTransportFactory, count: int = 1):
    await controller.start()
    await _wait_until(lambda: len(factory.created) >= count and factory.last.started)
    return factory.last


async def _connected(controller: SessionController, factory: FakeTransportFactory):
    transport = await _started(controller, factory)
    await transport.emit(ConnectionOpened(own_address="5511999990000"))
    await controller.wait_idle()
    assert controller.state == SessionState.CONNECTED
    return transport


class TestConnectCycle:
    """Início da sessão e abertura."""

    @pytest.mark.asyncio
    async def test_start_loads_credentials_and_enters_connecting(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)

        assert controller.state == SessionState.CONNECTING
        assert transport.credentials == STORED_CREDS
        assert controller.snapshot().attempt == 1

    @pytest.mark.asyncio
    async def test_connection_opened_sets_own_address(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        await _connected(controller, factory)

        snapshot = controller.snapshot()
        assert snapshot.is_connected is True
        assert snapshot.own_address == "5511999990000"
        assert snapshot.pairing is None

    @pytest.mark.asyncio
    async def test_setup_failure_goes_to_error_and_retries(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        factory.start_errors = [TransportSetupError("bridge_unreachable")]

        await _started(controller, factory, count=2)

        assert factory.created[0].closed is True
        assert SessionState.ERROR.value in _to_states(controller)
        assert controller.state == SessionState.CONNECTING
        assert "TransportSetupError" in (controller.snapshot().last_error or "")

    @pytest.mark.asyncio
    async def test_hung_start_times_out_into_error_and_retries(
        self, factory: FakeTransportFactory, store: MemoryCredentialStore
    ) -> None:
        factory.hanging_starts = 1
        controller = SessionController(
            transport_factory=factory,
            credential_store=store,
            settings=_settings(connect_timeout_seconds=0.05),
        )
        try:
            await _started(controller, factory, count=2)

            hung = factory.created[0]
            assert hung.start_calls == 1
            assert hung.started is False
            assert hung.closed is True
            assert _to_states(controller)[:3] == ["connecting", "error", "connecting"]
            assert controller.state == SessionState.CONNECTING
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        await _started(controller, factory)
        await controller.start()
        await asyncio.sleep(0.01)

        assert len(factory.created) == 1


class TestPairing:
    """QR, código numérico e expiração."""

    @pytest.mark.asyncio
    async def test_qr_issued_exposes_material(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)

        await transport.emit(QrIssued(qr="2@abc,def"))
        await controller.wait_idle()

        snapshot = controller.snapshot()
        assert snapshot.state == SessionState.QR_READY
        assert snapshot.pairing is not None
        assert snapshot.pairing.kind == PairingKind.QR
        assert snapshot.pairing.value == "2@abc,def"

    @pytest.mark.asyncio
    async def test_refreshed_qr_replaces_material(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)

        await transport.emit(QrIssued(qr="first"))
        await transport.emit(QrIssued(qr="second"))
        await controller.wait_idle()

        assert controller.state == SessionState.QR_READY
        assert controller.snapshot().pairing.value == "second"

    @pytest.mark.asyncio
    async def test_connected_clears_pairing_material(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)
        await transport.emit(QrIssued(qr="2@abc"))
        await transport.emit(ConnectionOpened(own_address="5511999990000"))
        await controller.wait_idle()

        assert controller.state == SessionState.CONNECTED
        assert controller.snapshot().has_pairing_material is False

    @pytest.mark.asyncio
    async def test_qr_is_ignored_while_pairing_code_is_active(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)

        await transport.emit(PairingCodeIssued(code="ABCD1234"))
        await transport.emit(QrIssued(qr="2@abc"))
        await controller.wait_idle()

        snapshot = controller.snapshot()
        assert snapshot.state == SessionState.PAIRING
        assert snapshot.pairing.kind == PairingKind.CODE
        assert snapshot.pairing.value == "ABCD1234"

    @pytest.mark.asyncio
    async def test_pairing_material_expires(
        self, factory: FakeTransportFactory, store: MemoryCredentialStore
    ) -> None:
        controller = SessionController(
            transport_factory=factory,
            credential_store=store,
            settings=_settings(pairing_timeout_seconds=0.05),
        )
        try:
            transport = await _started(controller, factory)
            await transport.emit(QrIssued(qr="2@abc"))
            await _wait_until(lambda: controller.state == SessionState.QR_READY)

            await _wait_until(lambda: controller.state == SessionState.CONNECTING)

            assert controller.snapshot().pairing is None
            assert len(factory.created) == 1
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_pairing_phone_number_is_passed_to_transport(
        self, factory: FakeTransportFactory, store: MemoryCredentialStore
    ) -> None:
        settings = SessionSettings(pairing_phone_number="5511999990000")
        controller = SessionController(
            transport_factory=factory, credential_store=store, settings=settings
        )
        try:
            transport = await _started(controller, factory)
            assert transport.options.pairing_phone_number == "5511999990000"
        finally:
            await controller.stop()


class TestDisconnects:
    """Fechamentos e a política de reconexão aplicada."""

    @pytest.mark.asyncio
    async def test_connection_lost_reconnects_keeping_credentials(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        first = await _connected(controller, factory)

        await first.emit(ConnectionClosed(reason=DisconnectReason.CONNECTION_LOST))
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        assert first.closed is True
        assert factory.last.credentials == STORED_CREDS
        assert store.clear_calls == 0
        assert controller.snapshot().last_disconnect_reason == DisconnectReason.CONNECTION_LOST
        assert _to_states(controller)[-2:] == ["disconnected", "connecting"]

    @pytest.mark.asyncio
    async def test_logged_out_purges_credentials_and_stops(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        transport = await _connected(controller, factory)

        await transport.emit(ConnectionClosed(reason=DisconnectReason.LOGGED_OUT, status_code=401))
        await _wait_until(lambda: controller.state == SessionState.LOGGED_OUT)
        await asyncio.sleep(0.02)

        assert len(factory.created) == 1
        assert store.clear_calls == 1
        assert await store.load() is None
        assert "UnrecoverableLogout" in controller.snapshot().last_error

    @pytest.mark.asyncio
    async def test_bad_session_purges_and_reconnects_fresh(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        transport = await _connected(controller, factory)

        await transport.emit(ConnectionClosed(reason=DisconnectReason.BAD_SESSION))
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        assert store.clear_calls == 1
        assert factory.last.credentials is None
        assert _to_states(controller)[-2:] == ["disconnected", "connecting"]

    @pytest.mark.asyncio
    async def test_connection_replaced_does_not_reconnect(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _connected(controller, factory)

        await transport.emit(ConnectionClosed(reason=DisconnectReason.CONNECTION_REPLACED))
        await _wait_until(lambda: controller.state == SessionState.DISCONNECTED)
        await asyncio.sleep(0.02)

        assert len(factory.created) == 1

    @pytest.mark.asyncio
    async def test_events_from_closed_transport_are_ignored(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        first = await _connected(controller, factory)
        await first.emit(ConnectionClosed(reason=DisconnectReason.CONNECTION_CLOSED))
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        await first.emit(ConnectionOpened(own_address="stale"))
        await controller.wait_idle()

        assert controller.state == SessionState.CONNECTING
        assert controller.snapshot().own_address != "stale"


class TestCredentials:
    """Persistência antes do ack."""

    @pytest.mark.asyncio
    async def test_credentials_are_saved_before_ack(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        transport = await _started(controller, factory)

        ack = await transport.emit_credentials({"app-state-sync-key-1": {"k": "v"}})
        await asyncio.wait_for(ack, timeout=1.0)

        loaded = await store.load()
        assert loaded["app-state-sync-key-1"] == {"k": "v"}
        assert loaded["creds"] == STORED_CREDS["creds"]

    @pytest.mark.asyncio
    async def test_failed_save_fails_the_ack(self, factory: FakeTransportFactory) -> None:
        failing_store = MagicMock()
        failing_store.load = AsyncMock(return_value=None)
        failing_store.save = AsyncMock(side_effect=CredentialStoreError("credential_write_failed"))
        failing_store.clear = AsyncMock()
        controller = SessionController(
            transport_factory=factory, credential_store=failing_store, settings=_settings()
        )
        try:
            transport = await _started(controller, factory)
            ack = await transport.emit_credentials({"creds": {"a": 1}})

            with pytest.raises(CredentialStoreError):
                await asyncio.wait_for(ack, timeout=1.0)
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_stale_credentials_are_rejected(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        first = await _started(controller, factory)
        await controller.restart()
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        ack = await first.emit_credentials({"creds": {"old": True}})

        with pytest.raises(BridgeError, match="stale_transport"):
            await asyncio.wait_for(ack, timeout=1.0)


class TestOperatorCommands:
    """restart e reset."""

    @pytest.mark.asyncio
    async def test_restart_keeps_credentials(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        first = await _connected(controller, factory)

        await controller.restart()
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        assert first.closed is True
        assert store.clear_calls == 0
        assert factory.last.credentials == STORED_CREDS
        assert "disconnected" in _to_states(controller)

    @pytest.mark.asyncio
    async def test_reset_purges_credentials_and_requires_pairing(
        self,
        controller: SessionController,
        factory: FakeTransportFactory,
        store: MemoryCredentialStore,
    ) -> None:
        await _connected(controller, factory)

        await controller.reset()
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        assert store.clear_calls == 1
        assert factory.last.credentials is None
        assert controller.state == SessionState.CONNECTING

    @pytest.mark.asyncio
    async def test_restart_cancels_in_flight_connect(
        self, factory: FakeTransportFactory, store: MemoryCredentialStore
    ) -> None:
        factory.hanging_starts = 1
        controller = SessionController(
            transport_factory=factory,
            credential_store=store,
            settings=_settings(connect_timeout_seconds=5.0, operator_reconnect_delay_seconds=60.0),
        )
        try:
            await controller.start()
            await _wait_until(lambda: len(factory.created) == 1 and factory.last.start_calls == 1)

            await controller.restart()

            assert len(factory.created) == 1
            assert factory.created[0].closed is True
            assert controller.state == SessionState.DISCONNECTED
            assert controller.snapshot().pairing is None
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_reset_with_failing_purge_still_disconnects_and_reconnects(
        self, factory: FakeTransportFactory
    ) -> None:
        class _ClearFailsStore(MemoryCredentialStore):
            async def clear(self) -> None:
                self.clear_calls += 1
                raise CredentialStoreError("credential_clear_failed")

        failing_store = _ClearFailsStore(STORED_CREDS)
        controller = SessionController(
            transport_factory=factory, credential_store=failing_store, settings=_settings()
        )
        try:
            first = await _connected(controller, factory)

            with pytest.raises(CredentialStoreError):
                await controller.reset()
            await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

            assert first.closed is True
            assert failing_store.clear_calls == 1
            assert "disconnected" in _to_states(controller)
            assert controller.state == SessionState.CONNECTING
            assert factory.last.credentials == STORED_CREDS
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_reset_leaves_logged_out(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _connected(controller, factory)
        await transport.emit(ConnectionClosed(reason=DisconnectReason.LOGGED_OUT))
        await _wait_until(lambda: controller.state == SessionState.LOGGED_OUT)

        await controller.reset()
        await _wait_until(lambda: len(factory.created) == 2 and factory.last.started)

        assert controller.state == SessionState.CONNECTING


class TestSendAndMessages:
    """Envio pelo transporte ativo e repasse de lotes inbound."""

    @pytest.mark.asyncio
    async def test_send_when_not_connected_raises(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _started(controller, factory)

        with pytest.raises(SessionNotReadyError):
            await controller.send_text("5551234@s.whatsapp.net", "oi")

        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_send_when_connected_returns_message_id(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _connected(controller, factory)

        message_id = await controller.send_text("5551234@s.whatsapp.net", "oi")

        assert message_id == "MSG1"
        assert transport.sent == [("5551234@s.whatsapp.net", "oi")]

    @pytest.mark.asyncio
    async def test_transport_send_failure_is_wrapped(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        factory.send_error = BridgeError("not-on-network")
        await _connected(controller, factory)

        with pytest.raises(SendFailedError, match="not-on-network"):
            await controller.send_text("5551234@s.whatsapp.net", "oi")

        assert controller.state == SessionState.CONNECTED

    @pytest.mark.asyncio
    async def test_messages_are_forwarded_with_own_address(
        self, factory: FakeTransportFactory, store: MemoryCredentialStore
    ) -> None:
        received: list[tuple[tuple[dict, ...], str]] = []
        controller = SessionController(
            transport_factory=factory,
            credential_store=store,
            settings=_settings(),
            on_messages=lambda messages, own: received.append((messages, own)),
        )
        try:
            transport = await _connected(controller, factory)
            batch = ({"key": {"id": "A1", "remoteJid": "5551234@s.whatsapp.net"}},)

            await transport.emit(MessagesReceived(messages=batch))
            await controller.wait_idle()

            assert received == [(batch, "5511999990000")]
        finally:
            await controller.stop()

    @pytest.mark.asyncio
    async def test_stop_closes_transport_and_disconnects(
        self, controller: SessionController, factory: FakeTransportFactory
    ) -> None:
        transport = await _connected(controller, factory)

        await controller.stop()

        assert transport.closed is True
        assert controller.state == SessionState.DISCONNECTED
        assert controller.is_running is False
