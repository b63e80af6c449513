"""Estados da sessão de transporte.

Existe uma única sessão por processo; só o controlador do ciclo de
vida altera o estado.
"""

from enum import StrEnum


class SessionState(StrEnum):
    """Estado exposto em /status.

    `logged_out` é terminal: a rede encerrou a sessão, as credenciais
    foram descartadas e só restart/reset do operador reabre o fluxo.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    QR_READY = "qr_ready"
    PAIRING = "pairing"
    CONNECTED = "connected"
    ERROR = "error"
    LOGGED_OUT = "logged_out"


TERMINAL_STATES: frozenset[SessionState] = frozenset({SessionState.LOGGED_OUT})

# Há QR ou código de pareamento vigente
PAIRING_STATES: frozenset[SessionState] = frozenset({
    SessionState.QR_READY,
    SessionState.PAIRING,
})

DEFAULT_INITIAL_STATE = SessionState.DISCONNECTED


def is_terminal(state: SessionState) -> bool:
    return state in TERMINAL_STATES


def is_pairing(state: SessionState) -> bool:
    return state in PAIRING_STATES
