"""Máquina de estados da sessão."""

from fsm.manager.machine import DEFAULT_HISTORY_LIMIT, SessionStateMachine

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "SessionStateMachine",
]
