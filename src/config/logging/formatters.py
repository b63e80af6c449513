"""Formatters de log: JSON em produção, texto em desenvolvimento (DEBUG=true).

Todo registro JSON carrega asctime, level, logger, message,
correlation_id e service. Campos passados via `extra=` entram no
mesmo objeto. Nunca logar corpo de mensagem nem endereço completo.
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

# Ordem de saída dos campos fixos no JSON
REQUIRED_LOG_FIELDS: tuple[str, ...] = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(correlation_id)s] %(name)s: %(message)s"


def create_json_formatter() -> JsonFormatter:
    """Formatter JSON de uma linha por registro.

    Exemplo:
        {"asctime": "...", "level": "INFO", "logger": "app.sessions.controller",
         "message": "session_state_changed", "correlation_id": "...",
         "service": "chat_bridge", "to_state": "connected"}
    """
    return JsonFormatter(
        " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS),
        rename_fields=FIELD_RENAME_MAP,
        json_ensure_ascii=False,
    )


def create_text_formatter() -> logging.Formatter:
    return logging.Formatter(TEXT_LOG_FORMAT)
