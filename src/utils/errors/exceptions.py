"""Exceções de domínio da ponte (transporte, validação, entrega e infraestrutura)."""

from __future__ import annotations


class BridgeError(RuntimeError):
    """Base para erros tratados pela ponte."""


# ──────────────────────────────────────────────────────────────
# Transporte / ciclo de vida
# ──────────────────────────────────────────────────────────────


class TransportSetupError(BridgeError):
    """Falha ao montar a sessão de transporte (fatal para a tentativa)."""


class RecoverableDisconnect(BridgeError):
    """Sessão fechada por motivo recuperável; reconexão conforme política."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class UnrecoverableLogout(BridgeError):
    """Sessão deslogada remotamente; credenciais inválidas, sem reconexão."""

    def __init__(self, reason: str = "logged_out", status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


# ──────────────────────────────────────────────────────────────
# Entrada do chamador (HTTP 400)
# ──────────────────────────────────────────────────────────────


class ValidationError(BridgeError):
    """Erro de validação de requisição do chamador. Nunca é reprocessado."""

    code = "VALIDATION_ERROR"


class SessionNotReadyError(ValidationError):
    """Sessão de transporte não está em `connected`."""

    code = "SESSION_NOT_READY"

    def __init__(self, state: str) -> None:
        super().__init__(f"session not connected (state={state})")
        self.state = state


class InvalidRequestError(ValidationError):
    """Campos obrigatórios ausentes ou vazios."""

    code = "INVALID_REQUEST"


class UnsupportedKindError(ValidationError):
    """Tipo de mensagem outbound não suportado."""

    code = "UNSUPPORTED_KIND"

    def __init__(self, kind: str) -> None:
        super().__init__(f"unsupported message kind: {kind}")
        self.kind = kind


# ──────────────────────────────────────────────────────────────
# Entrega / envio
# ──────────────────────────────────────────────────────────────


class DeliveryError(BridgeError):
    """Falha de entrega ao webhook. A mensagem é descartada (at-most-once)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class SendFailedError(BridgeError):
    """Transporte rejeitou ou falhou no envio outbound."""

    code = "SEND_FAILED"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


# ──────────────────────────────────────────────────────────────
# Infraestrutura
# ──────────────────────────────────────────────────────────────


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class CredentialStoreError(InfrastructureError):
    """Falha ao ler/gravar o bundle de credenciais."""
