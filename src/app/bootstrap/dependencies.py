"""Factories de dependências: criação de implementações concretas.

Centraliza a escolha de implementações a partir das settings e
conecta os componentes (composition root).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from api.connectors.webhook import WebhookDispatcher
from api.normalizers.chat import ChatMessageNormalizer
from app.bootstrap.clients import create_async_redis_client
from app.infra.stores import FileCredentialStore, MemoryCredentialStore, RedisCredentialStore
from app.infra.transport import create_bridge_transport_factory
from app.sessions import SessionController
from app.use_cases import DeliveryTaskSet, ForwardInboundUseCase, SendMessageUseCase
from config.settings import (
    get_base_settings,
    get_credential_settings,
    get_session_settings,
    get_transport_settings,
    get_webhook_settings,
)

if TYPE_CHECKING:
    from app.protocols.credential_store import CredentialStoreProtocol
    from app.protocols.transport import TransportFactory
    from config.settings import (
        BaseSettings,
        CredentialSettings,
        SessionSettings,
        TransportSettings,
        WebhookSettings,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BridgeContainer:
    """Componentes conectados do serviço."""

    controller: SessionController
    send_message: SendMessageUseCase
    forward_inbound: ForwardInboundUseCase
    dispatcher: WebhookDispatcher
    delivery_tasks: DeliveryTaskSet
    webhook_settings: WebhookSettings


# ──────────────────────────────────────────────────────────────────────────────
# Credential Store Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_credential_store(
    credentials: CredentialSettings | None = None,
    base: BaseSettings | None = None,
) -> CredentialStoreProtocol:
    """Cria credential store baseado na configuração.

    CREDENTIAL_STORE_BACKEND:
    - "file": FileCredentialStore em AUTH_DIR (padrão)
    - "redis": RedisCredentialStore em REDIS_URL
    - "memory": MemoryCredentialStore (dev only)
    """
    credentials = credentials or get_credential_settings()
    base = base or get_base_settings()
    backend = credentials.backend

    if backend == "file":
        logger.info("credential_store_created", extra={"backend": "file"})
        return FileCredentialStore(credentials.auth_dir)

    if backend == "redis":
        client = create_async_redis_client(base.redis_url)
        logger.info("credential_store_created", extra={"backend": "redis"})
        return RedisCredentialStore(client, credentials.redis_key)

    if backend == "memory":
        if not base.is_development:
            logger.warning(
                "memory_store_in_non_dev",
                extra={"backend": "memory", "environment": base.environment},
            )
        logger.info("credential_store_created", extra={"backend": "memory"})
        return MemoryCredentialStore()

    msg = f"CREDENTIAL_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Transport / Webhook Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_transport_factory(settings: TransportSettings | None = None) -> TransportFactory:
    """Cria a fábrica de transportes do bridge WebSocket."""
    return create_bridge_transport_factory(settings or get_transport_settings())


def create_webhook_dispatcher(settings: WebhookSettings | None = None) -> WebhookDispatcher:
    """Cria dispatcher de webhook (desabilitado se sem URL)."""
    settings = settings or get_webhook_settings()
    if not settings.enabled:
        logger.warning("webhook_not_configured", extra={"component": "webhook"})
    return WebhookDispatcher(settings)


# ──────────────────────────────────────────────────────────────────────────────
# Composition
# ──────────────────────────────────────────────────────────────────────────────


def build_container(
    *,
    session_settings: SessionSettings | None = None,
    webhook_settings: WebhookSettings | None = None,
    credential_store: CredentialStoreProtocol | None = None,
    transport_factory: TransportFactory | None = None,
    dispatcher: WebhookDispatcher | None = None,
) -> BridgeContainer:
    """Conecta controlador, pipeline inbound e gateway outbound.

    Todos os argumentos são opcionais; ausentes vêm das settings.
    """
    webhook_settings = webhook_settings or get_webhook_settings()
    dispatcher = dispatcher or create_webhook_dispatcher(webhook_settings)
    delivery_tasks = DeliveryTaskSet(webhook_settings.max_concurrency)
    forward_inbound = ForwardInboundUseCase(
        normalizer=ChatMessageNormalizer(),
        dispatcher=dispatcher,
        tasks=delivery_tasks,
    )
    controller = SessionController(
        transport_factory=transport_factory or create_transport_factory(),
        credential_store=credential_store or create_credential_store(),
        settings=session_settings or get_session_settings(),
        on_messages=forward_inbound,
    )
    return BridgeContainer(
        controller=controller,
        send_message=SendMessageUseCase(controller),
        forward_inbound=forward_inbound,
        dispatcher=dispatcher,
        delivery_tasks=delivery_tasks,
        webhook_settings=webhook_settings,
    )
