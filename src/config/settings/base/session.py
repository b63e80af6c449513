"""Settings do ciclo de vida da sessão de chat.

Timeouts de conexão/pareamento e atrasos de reconexão.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class SessionSettings:
    """Configurações do controlador de sessão.

    Attributes:
        connect_timeout_seconds: Limite para o setup do transporte
        pairing_timeout_seconds: Validade de um QR/código de pareamento
        pairing_phone_number: Se definido, pede código numérico em vez de QR
        reconnect_delay_seconds: Atraso padrão para motivos não mapeados
        transient_reconnect_delay_seconds: Atraso para quedas transitórias
        bad_session_reconnect_delay_seconds: Atraso após sessão corrompida
        restart_required_delay_seconds: Atraso quando o provedor pede restart
        setup_retry_delay_seconds: Backoff após falha de setup (estado error)
        operator_reconnect_delay_seconds: Atraso após restart/reset do operador
        event_queue_size: Capacidade da fila de eventos do transporte
    """

    connect_timeout_seconds: float = 60.0
    pairing_timeout_seconds: float = 60.0
    pairing_phone_number: str = ""

    reconnect_delay_seconds: float = 5.0
    transient_reconnect_delay_seconds: float = 3.0
    bad_session_reconnect_delay_seconds: float = 3.0
    restart_required_delay_seconds: float = 3.0
    setup_retry_delay_seconds: float = 5.0
    operator_reconnect_delay_seconds: float = 2.0

    event_queue_size: int = 1000

    @property
    def uses_pairing_code(self) -> bool:
        """True quando o pareamento é por código numérico."""
        return bool(self.pairing_phone_number)

    def validate(self) -> list[str]:
        """Valida configurações de sessão.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.connect_timeout_seconds <= 0:
            errors.append("SESSION_CONNECT_TIMEOUT_SECONDS deve ser > 0")

        if self.pairing_timeout_seconds <= 0:
            errors.append("SESSION_PAIRING_TIMEOUT_SECONDS deve ser > 0")

        delays = {
            "SESSION_RECONNECT_DELAY_SECONDS": self.reconnect_delay_seconds,
            "SESSION_TRANSIENT_RECONNECT_DELAY_SECONDS": (
                self.transient_reconnect_delay_seconds
            ),
            "SESSION_BAD_SESSION_RECONNECT_DELAY_SECONDS": (
                self.bad_session_reconnect_delay_seconds
            ),
            "SESSION_RESTART_REQUIRED_DELAY_SECONDS": self.restart_required_delay_seconds,
            "SESSION_SETUP_RETRY_DELAY_SECONDS": self.setup_retry_delay_seconds,
            "SESSION_OPERATOR_RECONNECT_DELAY_SECONDS": (
                self.operator_reconnect_delay_seconds
            ),
        }
        for name, value in delays.items():
            if value < 0:
                errors.append(f"{name} deve ser >= 0")

        if self.pairing_phone_number and not self.pairing_phone_number.isdigit():
            errors.append("PAIRING_PHONE_NUMBER deve conter apenas dígitos")

        if self.event_queue_size < 1:
            errors.append("SESSION_EVENT_QUEUE_SIZE deve ser >= 1")

        return errors


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _load_session_from_env() -> SessionSettings:
    """Carrega SessionSettings de variáveis de ambiente."""
    return SessionSettings(
        connect_timeout_seconds=_float_env("SESSION_CONNECT_TIMEOUT_SECONDS", 60.0),
        pairing_timeout_seconds=_float_env("SESSION_PAIRING_TIMEOUT_SECONDS", 60.0),
        pairing_phone_number=os.getenv("PAIRING_PHONE_NUMBER", "").strip().lstrip("+"),
        reconnect_delay_seconds=_float_env("SESSION_RECONNECT_DELAY_SECONDS", 5.0),
        transient_reconnect_delay_seconds=_float_env(
            "SESSION_TRANSIENT_RECONNECT_DELAY_SECONDS", 3.0
        ),
        bad_session_reconnect_delay_seconds=_float_env(
            "SESSION_BAD_SESSION_RECONNECT_DELAY_SECONDS", 3.0
        ),
        restart_required_delay_seconds=_float_env(
            "SESSION_RESTART_REQUIRED_DELAY_SECONDS", 3.0
        ),
        setup_retry_delay_seconds=_float_env("SESSION_SETUP_RETRY_DELAY_SECONDS", 5.0),
        operator_reconnect_delay_seconds=_float_env(
            "SESSION_OPERATOR_RECONNECT_DELAY_SECONDS", 2.0
        ),
        event_queue_size=int(os.getenv("SESSION_EVENT_QUEUE_SIZE", "1000")),
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """Retorna instância cacheada de SessionSettings."""
    return _load_session_from_env()
