"""Grafo de transições da sessão."""

from fsm.transitions.rules import (
    OPERATOR_EXIT_TARGETS,
    VALID_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
    reachable_from,
    validate_transition_map,
)

__all__ = [
    "OPERATOR_EXIT_TARGETS",
    "VALID_TRANSITIONS",
    "TransitionMap",
    "get_valid_targets",
    "is_transition_valid",
    "reachable_from",
    "validate_transition_map",
]
