"""Estados da sessão de transporte."""

from fsm.states.session import (
    DEFAULT_INITIAL_STATE,
    PAIRING_STATES,
    TERMINAL_STATES,
    SessionState,
    is_pairing,
    is_terminal,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "PAIRING_STATES",
    "TERMINAL_STATES",
    "SessionState",
    "is_pairing",
    "is_terminal",
]
