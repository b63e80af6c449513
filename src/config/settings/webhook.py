"""Settings do webhook de automação (n8n ou similar).

Entrega at-most-once: um único POST por mensagem, sem retry.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_USER_AGENT = "chat-bridge-webhook/1.0"


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do dispatcher de webhook.

    Attributes:
        url: Endpoint de destino (vazio = entrega desabilitada)
        timeout_seconds: Timeout total do POST
        user_agent: Header User-Agent enviado
        max_concurrency: Entregas simultâneas em voo
        drain_timeout_seconds: Espera por entregas pendentes no shutdown
        response_log_limit: Caracteres do corpo de erro mantidos no log
    """

    url: str = ""
    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_concurrency: int = 100
    drain_timeout_seconds: float = 5.0
    response_log_limit: int = 200

    @property
    def enabled(self) -> bool:
        """True quando há URL de destino configurada."""
        return bool(self.url)

    def validate(self) -> list[str]:
        """Valida configurações do webhook.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.url and not self.url.startswith(("http://", "https://")):
            errors.append("WEBHOOK_URL deve começar com http:// ou https://")

        if self.timeout_seconds <= 0:
            errors.append("WEBHOOK_TIMEOUT_SECONDS deve ser > 0")

        if self.max_concurrency < 1:
            errors.append("WEBHOOK_MAX_CONCURRENCY deve ser >= 1")

        if self.drain_timeout_seconds < 0:
            errors.append("WEBHOOK_DRAIN_TIMEOUT_SECONDS deve ser >= 0")

        return errors


def _load_from_env() -> WebhookSettings:
    """Carrega WebhookSettings a partir de variáveis de ambiente.

    WEBHOOK_URL tem precedência; N8N_WEBHOOK_URL é aceito como alias.
    """
    return WebhookSettings(
        url=os.getenv("WEBHOOK_URL") or os.getenv("N8N_WEBHOOK_URL", ""),
        timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
        user_agent=os.getenv("WEBHOOK_USER_AGENT", DEFAULT_USER_AGENT),
        max_concurrency=int(os.getenv("WEBHOOK_MAX_CONCURRENCY", "100")),
        drain_timeout_seconds=float(os.getenv("WEBHOOK_DRAIN_TIMEOUT_SECONDS", "5")),
        response_log_limit=int(os.getenv("WEBHOOK_RESPONSE_LOG_LIMIT", "200")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_from_env()
