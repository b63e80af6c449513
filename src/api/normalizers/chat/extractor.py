"""Extração de corpo e tipo de conteúdo de mensagens de chat.

Responsabilidades:
- Desembrulhar conteúdo efêmero/view-once
- Escolher o corpo textual pela precedência fixa
- Classificar o tipo de conteúdo (um único tipo por mensagem)

Não faz validação de negócio - apenas extração estrutural.
"""

from __future__ import annotations

from typing import Any

from app.protocols.models import ContentKind

from ._extraction_helpers import text_field, unwrap_content

# Precedência do corpo: (chave do bloco, campo); primeira não vazia vence
BODY_SOURCES = (
    ("extendedTextMessage", "text"),
    ("imageMessage", "caption"),
    ("videoMessage", "caption"),
)

# Precedência do tipo: primeira chave com valor não vazio vence
KIND_SOURCES = (
    ("conversation", ContentKind.TEXT),
    ("extendedTextMessage", ContentKind.TEXT),
    ("imageMessage", ContentKind.IMAGE),
    ("videoMessage", ContentKind.VIDEO),
    ("audioMessage", ContentKind.AUDIO),
    ("documentMessage", ContentKind.DOCUMENT),
    ("stickerMessage", ContentKind.STICKER),
    ("locationMessage", ContentKind.LOCATION),
    ("liveLocationMessage", ContentKind.LOCATION),
    ("contactMessage", ContentKind.CONTACT),
    ("contactsArrayMessage", ContentKind.CONTACT),
)


def extract_body(content: dict[str, Any]) -> str:
    """Texto da mensagem ou legenda; vazio se não houver."""
    conversation = content.get("conversation")
    if isinstance(conversation, str) and conversation:
        return conversation
    for block_key, field in BODY_SOURCES:
        value = text_field(content.get(block_key), field)
        if value is not None:
            return value
    return ""


def extract_kind(content: dict[str, Any]) -> ContentKind:
    """Tipo de conteúdo pela precedência fixa."""
    for block_key, kind in KIND_SOURCES:
        value = content.get(block_key)
        # Texto vazio conta como ausente; blocos (mesmo vazios) contam como presentes
        if value is not None and value != "":
            return kind
    return ContentKind.UNKNOWN


def extract_content(message_content: Any) -> tuple[str, ContentKind]:
    """Corpo e tipo a partir do campo `message` do evento cru."""
    content = unwrap_content(message_content)
    return extract_body(content), extract_kind(content)
