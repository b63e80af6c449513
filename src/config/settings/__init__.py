"""Agregador de settings do chat bridge.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    CredentialSettings,
    CredentialStoreBackend,
    Environment,
    SessionSettings,
    get_base_settings,
    get_credential_settings,
    get_session_settings,
)

# Transport settings
from config.settings.transport import (
    TransportSettings,
    get_transport_settings,
)

# Webhook settings
from config.settings.webhook import (
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    # Base
    "BaseSettings",
    "CredentialSettings",
    "CredentialStoreBackend",
    "Environment",
    "SessionSettings",
    # Transport
    "TransportSettings",
    # Webhook
    "WebhookSettings",
    "get_base_settings",
    "get_credential_settings",
    "get_session_settings",
    "get_transport_settings",
    "get_webhook_settings",
]
