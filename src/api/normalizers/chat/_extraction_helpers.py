"""Helpers de extração de campos de eventos de mensagem crus.

Separado de extractor.py para manter SRP.
Formato de entrada: WAMessage serializado em JSON pelo bridge
({"key": {...}, "message": {...}, "messageTimestamp": ..., "pushName": ...}).
"""

from __future__ import annotations

from typing import Any

from app.protocols.models import GROUP_ADDRESS_SUFFIX

# Wrappers que apenas envolvem o conteúdo real em `.message`
WRAPPER_KEYS = (
    "ephemeralMessage",
    "viewOnceMessage",
    "viewOnceMessageV2",
    "viewOnceMessageV2Extension",
    "documentWithCaptionMessage",
)

# Limite de aninhamento de wrappers
MAX_UNWRAP_DEPTH = 5

_UINT32_MASK = 0xFFFFFFFF


def unwrap_content(content: Any) -> dict[str, Any]:
    """Remove wrappers efêmeros/view-once até o conteúdo real."""
    if not isinstance(content, dict):
        return {}
    for _ in range(MAX_UNWRAP_DEPTH):
        inner = None
        for key in WRAPPER_KEYS:
            wrapper = content.get(key)
            if isinstance(wrapper, dict) and isinstance(wrapper.get("message"), dict):
                inner = wrapper["message"]
                break
        if inner is None:
            return content
        content = inner
    return content


def coerce_timestamp(value: Any) -> int:
    """Converte timestamp em int.

    Aceita int, float, string numérica e Long ({"low", "high"}).
    Valores ilegíveis viram 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        return int(stripped) if stripped.isdigit() else 0
    if isinstance(value, dict):
        low = value.get("low")
        high = value.get("high")
        if isinstance(low, int) and isinstance(high, int):
            return ((high & _UINT32_MASK) << 32) | (low & _UINT32_MASK)
    return 0


def address_user(address: str) -> str:
    """Parte local de um endereço, sem sufixo de dispositivo.

    Exemplo: "5511999998888:12@s.whatsapp.net" -> "5511999998888"
    """
    local = address.split("@", 1)[0]
    return local.split(":", 1)[0]


def is_group_address(address: str) -> bool:
    return address.endswith(GROUP_ADDRESS_SUFFIX)


def text_field(block: Any, field: str) -> str | None:
    """Lê um campo string de um bloco de conteúdo (None se ausente/vazio)."""
    if not isinstance(block, dict):
        return None
    value = block.get(field)
    if isinstance(value, str) and value:
        return value
    return None
