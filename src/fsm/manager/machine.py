"""Máquina de estados da sessão de transporte.

Valida cada mudança contra o grafo (`fsm.transitions`) e os guards
(`fsm.rules`) e guarda uma janela das últimas transições aplicadas.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any

from fsm.rules.guards import SESSION_GUARDS, first_denial
from fsm.states.session import DEFAULT_INITIAL_STATE, SessionState, is_terminal
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fsm.rules.guards import Guard

# O processo vive indefinidamente; só as últimas transições ficam em memória
DEFAULT_HISTORY_LIMIT = 200


class SessionStateMachine:
    """Estado corrente da sessão e histórico recente de transições.

    Não faz IO: quem decide o que fazer após uma transição é o
    controlador da sessão.
    """

    __slots__ = ("_guards", "_history", "_name", "_state")

    def __init__(
        self,
        name: str = "session",
        initial_state: SessionState = DEFAULT_INITIAL_STATE,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        guards: Sequence[Guard] = SESSION_GUARDS,
    ) -> None:
        self._name = name
        self._state = initial_state
        self._history: deque[StateTransition] = deque(maxlen=history_limit)
        self._guards = tuple(guards)

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._state)

    @property
    def last_transition(self) -> StateTransition | None:
        return self._history[-1] if self._history else None

    def _check(self, target: SessionState, trigger: str) -> str | None:
        if not is_transition_valid(self._state, target):
            return f"transição inválida: {self._state.value} -> {target.value}"
        return first_denial(self._state, target, trigger, self._guards)

    def allows(self, target: SessionState, trigger: str) -> bool:
        """Indica se `apply(target, trigger)` seria aceito agora."""
        return self._check(target, trigger) is None

    def apply(
        self,
        target: SessionState,
        trigger: str,
        *,
        attempt: int = 0,
        **detail: Any,
    ) -> TransitionOutcome:
        """Aplica a transição ou devolve o motivo da recusa sem alterar o estado."""
        denial = self._check(target, trigger)
        if denial is not None:
            return TransitionOutcome.rejected(denial)

        transition = StateTransition(
            from_state=self._state,
            to_state=target,
            trigger=trigger,
            attempt=attempt,
            detail=detail,
        )
        self._state = target
        self._history.append(transition)
        return TransitionOutcome.accepted(transition)

    def recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Últimas transições (mais antiga primeiro) como campos de log."""
        items = list(self._history)
        if limit is not None:
            items = items[-limit:]
        return [transition.as_log_fields() for transition in items]

    def describe(self) -> dict[str, Any]:
        """Resumo do estado corrente para diagnóstico."""
        return {
            "machine": self._name,
            "state": self._state.value,
            "terminal": self.is_terminal,
            "transitions": len(self._history),
            "next": sorted(state.value for state in get_valid_targets(self._state)),
        }
