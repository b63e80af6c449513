"""Protocolos e contratos do core da aplicação."""

from .credential_store import CredentialStoreProtocol
from .models import (
    GROUP_ADDRESS_SUFFIX,
    INDIVIDUAL_ADDRESS_SUFFIX,
    CanonicalMessage,
    ContentKind,
    PairingKind,
    PairingMaterial,
    SendRequest,
    SendResult,
)
from .normalizer import MessageNormalizerProtocol
from .transport import (
    ConnectionClosed,
    ConnectionOpened,
    CredentialsUpdated,
    DisconnectReason,
    EventSink,
    MessagesReceived,
    PairingCodeIssued,
    QrIssued,
    SessionTransportProtocol,
    TransportEvent,
    TransportFactory,
    TransportOptions,
)
from .webhook_dispatcher import WebhookDispatcherProtocol

__all__ = [
    "GROUP_ADDRESS_SUFFIX",
    "INDIVIDUAL_ADDRESS_SUFFIX",
    "CanonicalMessage",
    "ConnectionClosed",
    "ConnectionOpened",
    "ContentKind",
    "CredentialStoreProtocol",
    "CredentialsUpdated",
    "DisconnectReason",
    "EventSink",
    "MessageNormalizerProtocol",
    "MessagesReceived",
    "PairingCodeIssued",
    "PairingKind",
    "PairingMaterial",
    "QrIssued",
    "SendRequest",
    "SendResult",
    "SessionTransportProtocol",
    "TransportEvent",
    "TransportFactory",
    "TransportOptions",
    "WebhookDispatcherProtocol",
]
