"""Grafo de transições da sessão de transporte.

Refresh de QR ou de código é a única aresta reflexiva. Expiração do
material de pareamento volta para CONNECTING sem derrubar o transporte.
"""

from __future__ import annotations

from collections import deque

from fsm.states.session import DEFAULT_INITIAL_STATE, TERMINAL_STATES, SessionState

TransitionMap = dict[SessionState, frozenset[SessionState]]

_S = SessionState

# Saídas de LOGGED_OUT, aceitas apenas com gatilho de operador
OPERATOR_EXIT_TARGETS: frozenset[SessionState] = frozenset({_S.DISCONNECTED, _S.CONNECTING})

# Qualquer estado com transporte ativo pode cair, ser deslogado ou falhar
_CLOSE_TARGETS = frozenset({_S.DISCONNECTED, _S.LOGGED_OUT, _S.ERROR})

VALID_TRANSITIONS: TransitionMap = {
    _S.DISCONNECTED: frozenset({_S.CONNECTING, _S.LOGGED_OUT, _S.ERROR}),
    _S.CONNECTING: frozenset({_S.QR_READY, _S.PAIRING, _S.CONNECTED}) | _CLOSE_TARGETS,
    _S.QR_READY: frozenset({_S.QR_READY, _S.PAIRING, _S.CONNECTED, _S.CONNECTING})
    | _CLOSE_TARGETS,
    # Com código emitido, QR novo é ignorado
    _S.PAIRING: frozenset({_S.PAIRING, _S.CONNECTED, _S.CONNECTING}) | _CLOSE_TARGETS,
    _S.CONNECTED: _CLOSE_TARGETS,
    _S.ERROR: frozenset({_S.CONNECTING, _S.DISCONNECTED, _S.LOGGED_OUT}),
    _S.LOGGED_OUT: OPERATOR_EXIT_TARGETS,
}


def get_valid_targets(state: SessionState) -> frozenset[SessionState]:
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: SessionState, to_state: SessionState) -> bool:
    """Checa só o grafo; o gatilho de operador é exigido pelos guards."""
    return to_state in get_valid_targets(from_state)


def reachable_from(start: SessionState) -> set[SessionState]:
    """Estados alcançáveis a partir de `start` (incluindo ele)."""
    seen = {start}
    pending = deque([start])
    while pending:
        for target in get_valid_targets(pending.popleft()):
            if target not in seen:
                seen.add(target)
                pending.append(target)
    return seen


def validate_transition_map() -> list[str]:
    """Checa a integridade do grafo. Lista vazia quando está tudo certo."""
    errors = [
        f"estado {state.value} ausente do mapa"
        for state in SessionState
        if state not in VALID_TRANSITIONS
    ]

    for state in TERMINAL_STATES:
        extra = get_valid_targets(state) - OPERATOR_EXIT_TARGETS
        if extra:
            errors.append(
                f"estado terminal {state.value} com saídas extras: "
                f"{sorted(s.value for s in extra)}"
            )

    unreachable = set(SessionState) - reachable_from(DEFAULT_INITIAL_STATE)
    if unreachable:
        errors.append(f"estados inalcançáveis: {sorted(s.value for s in unreachable)}")

    for state in SessionState:
        if state not in TERMINAL_STATES and _S.CONNECTED not in reachable_from(state):
            errors.append(f"{state.value} não alcança connected")

    return errors
