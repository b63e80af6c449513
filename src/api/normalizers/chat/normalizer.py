"""Normalização de eventos de mensagem crus em CanonicalMessage.

Função pura: mesma entrada, mesma saída; sem I/O além de logs.

Regras:
- Mensagens da própria conta são descartadas (key.fromMe ou remetente
  igual ao endereço próprio)
- Eventos sem ID ou sem conversa são descartados
- Conversa em grupo se o endereço termina em @g.us
- senderAddress é a parte de usuário do conversationId
- Nome de exibição ausente vira "Unknown"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.protocols.models import CanonicalMessage

from ._extraction_helpers import address_user, coerce_timestamp, is_group_address
from .extractor import extract_content

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

UNKNOWN_SENDER_NAME = "Unknown"


def _author_address(key: dict[str, Any], conversation_id: str, is_group: bool) -> str:
    participant = key.get("participant")
    if is_group and isinstance(participant, str) and participant:
        return participant
    return conversation_id


def _is_self_originated(key: dict[str, Any], author: str, own_address: str) -> bool:
    if key.get("fromMe") is True:
        return True
    if not own_address:
        return False
    return address_user(author) == address_user(own_address)


def normalize_message(raw: dict[str, Any], own_address: str = "") -> CanonicalMessage | None:
    """Normaliza um evento cru.

    Args:
        raw: Evento de mensagem como recebido do transporte
        own_address: Endereço da própria conta (para descartar ecos)

    Returns:
        CanonicalMessage, ou None se o evento deve ser ignorado.
    """
    key = raw.get("key")
    if not isinstance(key, dict):
        logger.info("chat_message_dropped", extra={"reason": "missing_key"})
        return None

    message_id = key.get("id")
    conversation_id = key.get("remoteJid")
    if not isinstance(message_id, str) or not message_id:
        logger.info("chat_message_dropped", extra={"reason": "missing_id"})
        return None
    if not isinstance(conversation_id, str) or not conversation_id:
        logger.info("chat_message_dropped", extra={"reason": "missing_conversation"})
        return None

    is_group = is_group_address(conversation_id)
    # Autor real (participant em grupos) só decide o descarte de ecos
    author = _author_address(key, conversation_id, is_group)
    if _is_self_originated(key, author, own_address):
        return None

    body, kind = extract_content(raw.get("message"))
    push_name = raw.get("pushName")

    return CanonicalMessage(
        id=message_id,
        conversation_id=conversation_id,
        sender_display_name=(
            push_name if isinstance(push_name, str) and push_name else UNKNOWN_SENDER_NAME
        ),
        sender_address=address_user(conversation_id),
        timestamp=coerce_timestamp(raw.get("messageTimestamp")),
        body=body,
        content_kind=kind,
        is_group_conversation=is_group,
    )


def normalize_messages(
    batch: Iterable[dict[str, Any]], own_address: str = ""
) -> list[CanonicalMessage]:
    """Normaliza um lote preservando a ordem; descarta os ignorados."""
    messages: list[CanonicalMessage] = []
    for raw in batch:
        if not isinstance(raw, dict):
            logger.info("chat_message_dropped", extra={"reason": "invalid_shape"})
            continue
        normalized = normalize_message(raw, own_address)
        if normalized is not None:
            messages.append(normalized)
    return messages


class ChatMessageNormalizer:
    """Adapter de normalize_message para MessageNormalizerProtocol."""

    def normalize(self, raw: dict[str, Any], own_address: str = "") -> CanonicalMessage | None:
        return normalize_message(raw, own_address)
