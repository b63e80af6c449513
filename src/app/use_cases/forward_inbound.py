"""Use case do pipeline inbound: normaliza e agenda entregas ao webhook.

Chamado pelo loop de eventos do controlador de sessão com cada lote
recebido; nunca aguarda rede. Cada entrega roda em task própria.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.observability.correlation import correlation_scope
from config.logging import log_degraded
from utils.errors import DeliveryError

if TYPE_CHECKING:
    from app.protocols.models import CanonicalMessage
    from app.protocols.normalizer import MessageNormalizerProtocol
    from app.protocols.webhook_dispatcher import WebhookDispatcherProtocol
    from app.use_cases.delivery_tasks import DeliveryTaskSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ForwardResult:
    """Resumo de um lote processado."""

    received: int
    normalized: int
    scheduled: int

    @property
    def skipped(self) -> int:
        return self.received - self.normalized


class ForwardInboundUseCase:
    """Normaliza eventos crus e agenda a entrega de cada mensagem."""

    def __init__(
        self,
        *,
        normalizer: MessageNormalizerProtocol,
        dispatcher: WebhookDispatcherProtocol,
        tasks: DeliveryTaskSet,
    ) -> None:
        self._normalizer = normalizer
        self._dispatcher = dispatcher
        self._tasks = tasks

    def __call__(self, batch: tuple[dict[str, Any], ...], own_address: str) -> ForwardResult:
        return self.execute(batch, own_address)

    def execute(self, batch: tuple[dict[str, Any], ...], own_address: str = "") -> ForwardResult:
        """Processa um lote na ordem de chegada."""
        messages: list[CanonicalMessage] = []
        for raw in batch:
            normalized = self._normalizer.normalize(raw, own_address)
            if normalized is not None:
                messages.append(normalized)

        if messages and not self._dispatcher.enabled:
            log_degraded(logger, "webhook_dispatch", reason="webhook_not_configured")
            for message in messages:
                logger.info(
                    "inbound_message_not_forwarded",
                    extra={"message_id": message.id, "content_kind": message.content_kind.value},
                )
            return ForwardResult(received=len(batch), normalized=len(messages), scheduled=0)

        for message in messages:
            self._tasks.schedule(self._deliver(message), name=f"webhook-{message.id}")

        if messages:
            logger.info(
                "inbound_batch_scheduled",
                extra={
                    "received": len(batch),
                    "scheduled": len(messages),
                    "active_tasks": self._tasks.active_count,
                },
            )
        return ForwardResult(received=len(batch), normalized=len(messages), scheduled=len(messages))

    async def _deliver(self, message: CanonicalMessage) -> None:
        with correlation_scope(message.id):
            try:
                await self._dispatcher.deliver(message)
            except DeliveryError as exc:
                # At-most-once: falha registrada e mensagem descartada
                logger.warning(
                    "webhook_delivery_dropped",
                    extra={
                        "message_id": message.id,
                        "reason": str(exc),
                        "status_code": exc.status_code,
                        "response_body": exc.response_body,
                    },
                )
