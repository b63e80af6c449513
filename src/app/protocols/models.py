"""Modelos de domínio compartilhados entre app e api.

Tipos imutáveis que atravessam as camadas:
- CanonicalMessage: mensagem inbound normalizada (payload do webhook)
- SendRequest / SendResult: envio outbound
- PairingMaterial: QR ou código de pareamento corrente
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

# Domínio de endereços individuais do provedor de chat
INDIVIDUAL_ADDRESS_SUFFIX = "@s.whatsapp.net"
# Domínio de conversas em grupo
GROUP_ADDRESS_SUFFIX = "@g.us"


class ContentKind(StrEnum):
    """Tipo de conteúdo de uma mensagem normalizada."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    STICKER = "sticker"
    LOCATION = "location"
    CONTACT = "contact"
    UNKNOWN = "unknown"


class PairingKind(StrEnum):
    """Forma do material de pareamento."""

    QR = "qr"
    CODE = "code"


@dataclass(frozen=True, slots=True)
class CanonicalMessage:
    """Mensagem inbound no formato entregue ao webhook.

    Attributes:
        id: ID da mensagem no provedor
        conversation_id: Endereço da conversa (individual ou grupo)
        sender_display_name: Nome de exibição do remetente ("Unknown" se ausente)
        sender_address: Parte local do conversation_id (sem domínio nem dispositivo)
        timestamp: Epoch em segundos
        body: Texto ou legenda (vazio se não houver)
        content_kind: Tipo de conteúdo
        is_group_conversation: True para conversas em grupo
    """

    id: str
    conversation_id: str
    sender_display_name: str
    sender_address: str
    timestamp: int
    body: str
    content_kind: ContentKind
    is_group_conversation: bool

    def to_payload(self) -> dict[str, Any]:
        """Serializa com as chaves camelCase do contrato do webhook."""
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "senderDisplayName": self.sender_display_name,
            "senderAddress": self.sender_address,
            "timestamp": self.timestamp,
            "body": self.body,
            "contentKind": self.content_kind.value,
            "isGroupConversation": self.is_group_conversation,
        }


@dataclass(frozen=True, slots=True)
class SendRequest:
    """Pedido de envio outbound."""

    destination: str
    body: str
    kind: str = ContentKind.TEXT.value


@dataclass(frozen=True, slots=True)
class SendResult:
    """Resultado de envio aceito pelo transporte."""

    message_id: str
    destination: str


@dataclass(frozen=True, slots=True)
class PairingMaterial:
    """QR ou código numérico que o operador usa para parear a sessão.

    Attributes:
        kind: qr ou code
        value: Conteúdo do QR ou o código
        issued_at: Momento de emissão (UTC)
        expires_at: Momento de expiração (UTC)
        attempt: Número da tentativa de conexão que emitiu o material
    """

    kind: PairingKind
    value: str
    issued_at: datetime
    expires_at: datetime
    attempt: int

    def is_expired(self, now: datetime | None = None) -> bool:
        """True quando o material já passou da validade."""
        return (now or datetime.now(tz=UTC)) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "issuedAt": self.issued_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
            "attempt": self.attempt,
        }
