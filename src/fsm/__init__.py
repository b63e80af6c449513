"""
FSM da sessão de transporte.

Estrutura:
    - states/: SessionState e conjuntos de estados
    - transitions/: grafo de transições válidas
    - rules/: guards aplicados após o grafo
    - manager/: SessionStateMachine
    - types/: StateTransition e TransitionOutcome

Sem IO: o controlador da sessão (`app.sessions`) é o único cliente.
"""

from fsm.manager import DEFAULT_HISTORY_LIMIT, SessionStateMachine
from fsm.rules import SESSION_GUARDS, first_denial, is_operator_trigger
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    PAIRING_STATES,
    TERMINAL_STATES,
    SessionState,
    is_pairing,
    is_terminal,
)
from fsm.transitions import (
    OPERATOR_EXIT_TARGETS,
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import StateTransition, TransitionOutcome

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_INITIAL_STATE",
    "OPERATOR_EXIT_TARGETS",
    "PAIRING_STATES",
    "SESSION_GUARDS",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "SessionState",
    "SessionStateMachine",
    "StateTransition",
    "TransitionOutcome",
    "first_denial",
    "get_valid_targets",
    "is_operator_trigger",
    "is_pairing",
    "is_terminal",
    "is_transition_valid",
    "validate_transition_map",
]
