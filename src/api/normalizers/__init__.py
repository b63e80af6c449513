"""Normalizers: conversão de eventos externos para modelos internos.

Estrutura:
- chat/: normalizer de eventos de mensagem do transporte de chat

Cada fonte tem seu próprio extractor e normalizer, mantendo SRP.
"""

from .chat import ChatMessageNormalizer, normalize_message, normalize_messages

__all__ = [
    "ChatMessageNormalizer",
    "normalize_message",
    "normalize_messages",
]
