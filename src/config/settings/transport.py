"""Settings do transporte de sessão (bridge WebSocket).

O protocolo de chat roda num processo sidecar; este serviço fala com
ele por frames JSON sobre WebSocket.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class TransportSettings:
    """Configurações do bridge de transporte.

    Attributes:
        bridge_url: URL ws:// ou wss:// do sidecar
        bridge_token: Token opcional enviado no frame de start
        send_timeout_seconds: Espera máxima pelo send_result
        open_timeout_seconds: Timeout do handshake WebSocket
        max_frame_bytes: Tamanho máximo de frame aceito
    """

    bridge_url: str = "ws://127.0.0.1:3001"
    bridge_token: str = ""
    send_timeout_seconds: float = 30.0
    open_timeout_seconds: float = 10.0
    max_frame_bytes: int = 16 * 1024 * 1024  # 16MB

    def validate(self) -> list[str]:
        """Valida configurações do transporte.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.bridge_url.startswith(("ws://", "wss://")):
            errors.append("BRIDGE_URL deve começar com ws:// ou wss://")

        if self.send_timeout_seconds <= 0:
            errors.append("BRIDGE_SEND_TIMEOUT_SECONDS deve ser > 0")

        if self.open_timeout_seconds <= 0:
            errors.append("BRIDGE_OPEN_TIMEOUT_SECONDS deve ser > 0")

        if self.max_frame_bytes <= 0:
            errors.append("BRIDGE_MAX_FRAME_BYTES deve ser > 0")

        return errors


def _load_from_env() -> TransportSettings:
    """Carrega TransportSettings a partir de variáveis de ambiente."""
    return TransportSettings(
        bridge_url=os.getenv("BRIDGE_URL", "ws://127.0.0.1:3001"),
        bridge_token=os.getenv("BRIDGE_TOKEN", ""),
        send_timeout_seconds=float(os.getenv("BRIDGE_SEND_TIMEOUT_SECONDS", "30")),
        open_timeout_seconds=float(os.getenv("BRIDGE_OPEN_TIMEOUT_SECONDS", "10")),
        max_frame_bytes=int(os.getenv("BRIDGE_MAX_FRAME_BYTES", str(16 * 1024 * 1024))),
    )


@lru_cache(maxsize=1)
def get_transport_settings() -> TransportSettings:
    """Retorna instância cacheada de TransportSettings."""
    return _load_from_env()
