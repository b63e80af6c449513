"""Guards da FSM da sessão."""

from fsm.rules.guards import (
    OPERATOR_TRIGGER_PREFIX,
    SESSION_GUARDS,
    Guard,
    deny_blank_trigger,
    deny_reflexive,
    deny_terminal_exit,
    first_denial,
    is_operator_trigger,
)

__all__ = [
    "OPERATOR_TRIGGER_PREFIX",
    "SESSION_GUARDS",
    "Guard",
    "deny_blank_trigger",
    "deny_reflexive",
    "deny_terminal_exit",
    "first_denial",
    "is_operator_trigger",
]
