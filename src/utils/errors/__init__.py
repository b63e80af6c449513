"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    BridgeError,
    CredentialStoreError,
    DeliveryError,
    InfrastructureError,
    InvalidRequestError,
    RecoverableDisconnect,
    SendFailedError,
    SessionNotReadyError,
    TransportSetupError,
    UnrecoverableLogout,
    UnsupportedKindError,
    ValidationError,
)

__all__ = [
    "BridgeError",
    "CredentialStoreError",
    "DeliveryError",
    "InfrastructureError",
    "InvalidRequestError",
    "RecoverableDisconnect",
    "SendFailedError",
    "SessionNotReadyError",
    "TransportSetupError",
    "UnrecoverableLogout",
    "UnsupportedKindError",
    "ValidationError",
]
