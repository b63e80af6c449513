"""Testes dos endpoints de status, pareamento e controle da sessão."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from api.routes.session.router import (
    delete_session,
    pairing_material,
    pairing_qr_image,
    render_qr_png,
    reset_session,
    restart_session,
    service_index,
    session_status,
)
from app.protocols.models import PairingKind
from fsm import SessionState
from tests.fakes.fake_container import (
    build_container,
    build_pairing,
    build_request,
    build_snapshot,
)
from utils.errors import CredentialStoreError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _request(container: SimpleNamespace, method: str = "GET", path: str = "/"):
    return build_request(SimpleNamespace(container=container), method=method, path=path)


def _json(response) -> dict:
    return json.loads(response.body.decode("utf-8"))


class TestIndexAndStatus:
    @pytest.mark.asyncio
    async def test_index_lists_endpoints(self) -> None:
        container = build_container(build_snapshot(SessionState.CONNECTING))

        payload = _json(await service_index(_request(container)))

        assert payload["status"] == "connecting"
        assert payload["message"] == "Chat Session Bridge"
        assert payload["endpoints"]["send"] == "/send"

    @pytest.mark.asyncio
    async def test_status_reports_pairing_presence(self) -> None:
        snapshot = build_snapshot(SessionState.QR_READY, build_pairing())
        container = build_container(snapshot)

        payload = _json(await session_status(_request(container, path="/status")))

        assert payload["state"] == "qr_ready"
        assert payload["connected"] is False
        assert payload["hasPairingMaterial"] is True
        assert payload["pairingKind"] == "qr"
        assert "value" not in payload


class TestPairingMaterial:
    @pytest.mark.asyncio
    async def test_qr_material(self) -> None:
        snapshot = build_snapshot(SessionState.QR_READY, build_pairing())
        container = build_container(snapshot)

        payload = _json(await pairing_material(_request(container, path="/qr")))

        assert payload["qr"] == "2@abc,def"
        assert payload["kind"] == "qr"
        assert payload["expiresAt"] == "2026-01-01T12:01:00+00:00"

    @pytest.mark.asyncio
    async def test_code_material(self) -> None:
        snapshot = build_snapshot(SessionState.PAIRING, build_pairing(PairingKind.CODE, "ABCD1234"))
        container = build_container(snapshot)

        payload = _json(await pairing_material(_request(container, path="/qr")))

        assert payload["code"] == "ABCD1234"
        assert "qr" not in payload

    @pytest.mark.asyncio
    async def test_already_connected(self) -> None:
        container = build_container(build_snapshot(SessionState.CONNECTED))

        payload = _json(await pairing_material(_request(container, path="/qr")))

        assert payload == {"status": "connected", "message": "Already connected"}

    @pytest.mark.asyncio
    async def test_not_available_while_connecting(self) -> None:
        container = build_container(build_snapshot(SessionState.CONNECTING))

        payload = _json(await pairing_material(_request(container, path="/qr")))

        assert payload["message"] == "Pairing material not available"

    @pytest.mark.asyncio
    async def test_qr_image_is_png(self) -> None:
        snapshot = build_snapshot(SessionState.QR_READY, build_pairing())
        container = build_container(snapshot)

        response = await pairing_qr_image(_request(container, path="/qr/image"))

        assert response.status_code == 200
        assert response.media_type == "image/png"
        assert response.body.startswith(PNG_SIGNATURE)

    @pytest.mark.asyncio
    async def test_qr_image_404_for_code_pairing(self) -> None:
        snapshot = build_snapshot(SessionState.PAIRING, build_pairing(PairingKind.CODE, "ABCD1234"))
        container = build_container(snapshot)

        response = await pairing_qr_image(_request(container, path="/qr/image"))

        assert response.status_code == 404
        assert _json(response)["error"] == "QR_NOT_AVAILABLE"

    def test_render_qr_png(self) -> None:
        assert render_qr_png("hello").startswith(PNG_SIGNATURE)


class TestOperatorCommands:
    @pytest.mark.asyncio
    async def test_restart(self) -> None:
        container = build_container(build_snapshot())

        response = await restart_session(_request(container, "POST", "/restart"))

        assert _json(response) == {"success": True, "message": "Restarting connection..."}
        container.controller.restart.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset(self) -> None:
        container = build_container(build_snapshot())

        response = await reset_session(_request(container, "POST", "/reset"))

        assert _json(response)["message"] == "Session reset, new pairing required"
        container.controller.reset.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_session_is_reset(self) -> None:
        container = build_container(build_snapshot())

        response = await delete_session(_request(container, "DELETE", "/session"))

        assert response.status_code == 200
        container.controller.reset.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_store_failure_is_503(self) -> None:
        container = build_container(build_snapshot())
        container.controller.reset.side_effect = CredentialStoreError("credential_clear_failed")

        response = await reset_session(_request(container, "POST", "/reset"))

        assert response.status_code == 503
        assert _json(response)["error"] == "INFRASTRUCTURE_ERROR"
