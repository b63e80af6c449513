"""Conversão de frames JSON do bridge em eventos de transporte.

Frames recebidos (campo `type`):
- qr            {"qr": str}
- pairing_code  {"code": str}
- open          {"ownAddress": str}
- close         {"reason": str, "statusCode": int, "detail": str}
- creds         {"requestId": str, "entries": {nome: valor|null}}
- messages      {"messages": [WAMessage, ...]}
- send_result   {"requestId": str, "ok": bool, "messageId": str, "error": str}

Frames enviados: start, send, creds_ack.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.protocols.transport import (
    ConnectionClosed,
    ConnectionOpened,
    DisconnectReason,
    MessagesReceived,
    PairingCodeIssued,
    QrIssued,
    TransportEvent,
)

logger = logging.getLogger(__name__)

FRAME_QR = "qr"
FRAME_PAIRING_CODE = "pairing_code"
FRAME_OPEN = "open"
FRAME_CLOSE = "close"
FRAME_CREDS = "creds"
FRAME_MESSAGES = "messages"
FRAME_SEND_RESULT = "send_result"

FRAME_START = "start"
FRAME_SEND = "send"
FRAME_CREDS_ACK = "creds_ack"


def decode_frame(raw: str | bytes) -> dict[str, Any] | None:
    """Decodifica um frame; None se não for um objeto JSON."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("bridge_frame_invalid_json")
        return None
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        logger.warning("bridge_frame_invalid_shape")
        return None
    return data


def parse_status_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def lifecycle_event_from_frame(frame: dict[str, Any]) -> TransportEvent | None:
    """Mapeia frames sem resposta (qr, pairing_code, open, close, messages)."""
    frame_type = frame["type"]
    if frame_type == FRAME_QR:
        qr = frame.get("qr")
        return QrIssued(qr=qr) if isinstance(qr, str) and qr else None
    if frame_type == FRAME_PAIRING_CODE:
        code = frame.get("code")
        return PairingCodeIssued(code=code) if isinstance(code, str) and code else None
    if frame_type == FRAME_OPEN:
        return ConnectionOpened(own_address=str(frame.get("ownAddress") or ""))
    if frame_type == FRAME_CLOSE:
        status_code = parse_status_code(frame.get("statusCode"))
        return ConnectionClosed(
            reason=DisconnectReason.parse(frame.get("reason"), status_code),
            status_code=status_code,
            detail=str(frame.get("detail") or ""),
        )
    if frame_type == FRAME_MESSAGES:
        messages = frame.get("messages")
        if not isinstance(messages, list):
            return None
        return MessagesReceived(
            messages=tuple(item for item in messages if isinstance(item, dict))
        )
    return None


def encode_frame(frame_type: str, **fields: Any) -> str:
    return json.dumps({"type": frame_type, **fields}, ensure_ascii=False)
