"""Normalizer de chat: eventos crus do transporte para CanonicalMessage.

Tipos reconhecidos: text, image, video, audio, document, sticker,
location (inclui live location), contact (inclui lista de contatos).
Demais conteúdos viram unknown.
"""

from .extractor import extract_body, extract_content, extract_kind
from .normalizer import ChatMessageNormalizer, normalize_message, normalize_messages

__all__ = [
    "ChatMessageNormalizer",
    "extract_body",
    "extract_content",
    "extract_kind",
    "normalize_message",
    "normalize_messages",
]
