"""Transporte de sessão: cliente do bridge WebSocket.

O protocolo de chat roda num sidecar; este pacote fala com ele.
"""

from __future__ import annotations

from app.infra.transport.bridge_client import BridgeTransport, create_bridge_transport_factory

__all__ = [
    "BridgeTransport",
    "create_bridge_transport_factory",
]
