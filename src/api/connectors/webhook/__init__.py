"""Connector de webhook: entrega de mensagens ao sistema de automação."""

from .dispatcher import WebhookDispatcher
from .http_base import HttpClient, HttpClientConfig, HttpError

__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "WebhookDispatcher",
]
