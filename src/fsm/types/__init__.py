"""Tipos das transições de estado da sessão."""

from fsm.types.transition import StateTransition, TransitionOutcome

__all__ = [
    "StateTransition",
    "TransitionOutcome",
]
