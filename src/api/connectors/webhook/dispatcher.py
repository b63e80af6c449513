"""Dispatcher de webhook: entrega at-most-once de mensagens normalizadas.

Um único POST JSON por mensagem. 2xx = entregue; qualquer outra
resposta, timeout ou erro de conexão vira DeliveryError e a mensagem
é descartada pelo chamador (sem retry).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from api.connectors.webhook.http_base import HttpClient, HttpClientConfig, HttpError
from app.observability.metrics import record_webhook_delivery
from utils.errors import DeliveryError

if TYPE_CHECKING:
    import httpx

    from app.protocols.models import CanonicalMessage
    from config.settings import WebhookSettings

logger = logging.getLogger(__name__)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class WebhookDispatcher:
    """Entrega CanonicalMessage ao webhook configurado.

    Args:
        settings: URL, timeout, user agent e limites
        transport: Transporte httpx alternativo (testes)
    """

    def __init__(
        self,
        settings: WebhookSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = HttpClient(
            HttpClientConfig(
                timeout_seconds=settings.timeout_seconds,
                default_headers={
                    "Content-Type": "application/json",
                    "User-Agent": settings.user_agent,
                },
                max_connections=settings.max_concurrency,
            ),
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    async def deliver(self, message: CanonicalMessage) -> None:
        """Faz uma única tentativa de entrega.

        Raises:
            DeliveryError: Resposta não-2xx, timeout ou erro de conexão.
        """
        if not self.enabled:
            raise DeliveryError("webhook_not_configured")

        started = time.perf_counter()
        try:
            response = await self._client.post(self._settings.url, json=message.to_payload())
        except HttpError as exc:
            latency_ms = (time.perf_counter() - started) * 1000
            record_webhook_delivery("failed", latency_ms)
            reason = "webhook_timeout" if exc.is_timeout else "webhook_connection_error"
            raise DeliveryError(reason) from exc

        latency_ms = (time.perf_counter() - started) * 1000
        if not response.is_success:
            record_webhook_delivery("rejected", latency_ms, status_code=response.status_code)
            raise DeliveryError(
                "webhook_rejected",
                status_code=response.status_code,
                response_body=truncate(response.text, self._settings.response_log_limit),
            )

        record_webhook_delivery("delivered", latency_ms, status_code=response.status_code)
        logger.debug(
            "webhook_delivered",
            extra={"message_id": message.id, "status_code": response.status_code},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
