"""Bootstrap: logging, validação de settings e wiring (composition root).

Uso:
    from app.bootstrap import initialize_app, validate_runtime_settings
    from app.bootstrap.dependencies import build_container

    initialize_app()
    validate_runtime_settings()
    container = build_container()
"""

from __future__ import annotations

import logging

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_credential_settings,
    get_session_settings,
    get_transport_settings,
    get_webhook_settings,
)

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura o logging do processo a partir de BaseSettings.

    JSON por padrão; DEBUG=true troca para texto legível.
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        json_output=not base.debug,
    )


def collect_settings_errors() -> list[str]:
    """Erros de todas as settings, prefixados pelo grupo."""
    base = get_base_settings()
    webhook = get_webhook_settings()
    groups: dict[str, list[str]] = {
        "base": base.validate(),
        "credentials": get_credential_settings().validate(base),
        "session": get_session_settings().validate(),
        "transport": get_transport_settings().validate(),
        "webhook": webhook.validate(),
    }
    if not webhook.enabled:
        groups["webhook"].append("WEBHOOK_URL não configurado")
    return [f"{group}: {error}" for group, errors in groups.items() for error in errors]


def validate_runtime_settings() -> None:
    """Checa as settings no startup.

    Em staging/produção levanta RuntimeError; em desenvolvimento só
    registra o alerta.
    """
    base = get_base_settings()
    errors = collect_settings_errors()
    fields = {"component": "bootstrap", "environment": base.environment}

    if not errors:
        logger.info("settings_validated", extra=fields)
        return

    logger.warning(
        "settings_validation_failed",
        extra={**fields, "error_count": len(errors), "errors": errors},
    )
    if base.strict_validation:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")
