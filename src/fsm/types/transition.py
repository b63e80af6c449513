"""Registro de transições da sessão e resultado de cada tentativa."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.session import SessionState


@dataclass(frozen=True, slots=True)
class StateTransition:
    """Mudança de estado aplicada pela máquina.

    Attributes:
        from_state: Estado anterior
        to_state: Estado novo
        trigger: Evento que causou a mudança (ex: 'qr_issued', 'operator_reset')
        attempt: Tentativa de conexão vigente no momento da mudança
        detail: Campos extras para log, sem endereços de usuário
        at: Instante da mudança (UTC)
    """

    from_state: SessionState
    to_state: SessionState
    trigger: str
    attempt: int = 0
    detail: dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")
        if self.attempt < 0:
            raise ValueError("attempt não pode ser negativo")

    @property
    def is_refresh(self) -> bool:
        """Renovação de material de pareamento (QR_READY → QR_READY)."""
        return self.from_state == self.to_state

    def as_log_fields(self) -> dict[str, Any]:
        """Campos planos para `extra=` dos logs."""
        fields: dict[str, Any] = {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "trigger": self.trigger,
            "attempt": self.attempt,
            "at": self.at.isoformat(),
        }
        fields.update(self.detail)
        return fields


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    """Resultado de `SessionStateMachine.apply`."""

    applied: bool
    transition: StateTransition | None = None
    denial: str | None = None

    @classmethod
    def accepted(cls, transition: StateTransition) -> TransitionOutcome:
        return cls(applied=True, transition=transition)

    @classmethod
    def rejected(cls, denial: str) -> TransitionOutcome:
        return cls(applied=False, denial=denial)
