"""Controle do ciclo de vida da sessão de transporte.

Exporta o controlador, a política de reconexão e o snapshot.
"""

from app.sessions.controller import OPERATOR_RESET, OPERATOR_RESTART, SessionController
from app.sessions.models import PairingExpired, SessionSnapshot
from app.sessions.reconnect_policy import (
    TRANSIENT_REASONS,
    ReconnectAction,
    ReconnectDecision,
    ReconnectPolicy,
    as_error,
)

__all__ = [
    "OPERATOR_RESET",
    "OPERATOR_RESTART",
    "TRANSIENT_REASONS",
    "PairingExpired",
    "ReconnectAction",
    "ReconnectDecision",
    "ReconnectPolicy",
    "SessionController",
    "SessionSnapshot",
    "as_error",
]
