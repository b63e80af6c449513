"""Configuração do logging do processo.

Um único handler no root logger, com filtros de correlation_id e de
mascaramento de endereços. Loggers do uvicorn propagam para o root,
então tudo sai no mesmo formato.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="chat_bridge")
    logger = get_logger(__name__)
    logger.info("webhook_delivered", extra={"latency_ms": 42})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from config.logging.filters import AddressMaskingFilter, CorrelationIdFilter
from config.logging.formatters import create_json_formatter, create_text_formatter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "chat_bridge"

# Logam cada frame/request; ficam em WARNING fora de DEBUG
NOISY_LOGGERS = ("websockets", "httpx", "httpcore", "uvicorn.access")

# Instalam handlers próprios; passam a propagar para o root
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _build_handler(
    level: str,
    service_name: str,
    correlation_id_getter: Callable[[], str] | None,
    json_output: bool,
) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(create_json_formatter() if json_output else create_text_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(AddressMaskingFilter())
    return handler


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    json_output: bool = True,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configura o root logger. Chamar uma vez no bootstrap.

    Args:
        level: DEBUG, INFO, WARNING, ERROR ou CRITICAL (sem distinção de caixa).
        service_name: Valor do campo `service` em todo registro.
        correlation_id_getter: Lê o correlation_id do contexto atual.
        json_output: JSON estruturado; False usa texto legível.
        quiet_loggers: Loggers elevados para WARNING fora de DEBUG.

    Raises:
        ValueError: Nível de log desconhecido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [_build_handler(level_upper, service_name, correlation_id_getter, json_output)]

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    if level_upper != "DEBUG":
        for name in quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger do módulo; service e correlation_id vêm do filtro do handler."""
    return logging.getLogger(name)


def log_degraded(
    logger: logging.Logger,
    component: str,
    reason: str,
    **fields: Any,
) -> None:
    """Registra que um caminho degradado foi usado (sem PII).

    Exemplo: webhook não configurado, mensagens recebidas são descartadas.
    """
    logger.warning(
        "degraded_path",
        extra={"degraded": True, "component": component, "reason": reason, **fields},
    )
