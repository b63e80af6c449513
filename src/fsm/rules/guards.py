"""Guards aplicados depois da checagem do grafo de transições.

Cada guard recebe (origem, destino, gatilho) e devolve o motivo da
recusa, ou None quando não tem objeção.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from fsm.states.session import PAIRING_STATES, TERMINAL_STATES, SessionState

# Gatilhos de restart/reset do operador começam com este prefixo
OPERATOR_TRIGGER_PREFIX = "operator_"

Guard = Callable[[SessionState, SessionState, str], str | None]


def is_operator_trigger(trigger: str) -> bool:
    """Indica se o gatilho veio de comando explícito (restart/reset)."""
    return trigger.startswith(OPERATOR_TRIGGER_PREFIX)


def deny_blank_trigger(
    from_state: SessionState, to_state: SessionState, trigger: str
) -> str | None:
    if not trigger.strip():
        return "gatilho vazio"
    return None


def deny_terminal_exit(
    from_state: SessionState, to_state: SessionState, trigger: str
) -> str | None:
    """LOGGED_OUT só é deixado por restart/reset do operador."""
    if from_state in TERMINAL_STATES and not is_operator_trigger(trigger):
        return f"{from_state.value} exige comando do operador (gatilho={trigger})"
    return None


def deny_reflexive(
    from_state: SessionState, to_state: SessionState, trigger: str
) -> str | None:
    """Só QR_READY e PAIRING aceitam transição para si mesmos (renovação)."""
    if from_state == to_state and from_state not in PAIRING_STATES:
        return f"transição reflexiva em {from_state.value}"
    return None


SESSION_GUARDS: tuple[Guard, ...] = (
    deny_blank_trigger,
    deny_terminal_exit,
    deny_reflexive,
)


def first_denial(
    from_state: SessionState,
    to_state: SessionState,
    trigger: str,
    guards: Iterable[Guard] = SESSION_GUARDS,
) -> str | None:
    """Retorna o motivo do primeiro guard que recusar, ou None."""
    for guard in guards:
        reason = guard(from_state, to_state, trigger)
        if reason is not None:
            return reason
    return None
