"""Observabilidade: logs estruturados, correlação e métricas.

Re-exporta funções de correlation_id e métricas para uso em toda a aplicação.

Uso:
    from app.observability import correlation_scope, get_correlation_id
    from app.observability import record_latency, record_webhook_delivery
"""

from app.observability.correlation import (
    CORRELATION_HEADER,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_latency,
    record_reconnect,
    record_send,
    record_state_transition,
    record_webhook_delivery,
)

__all__ = [
    "CORRELATION_HEADER",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "record_latency",
    "record_reconnect",
    "record_send",
    "record_state_transition",
    "record_webhook_delivery",
    "reset_correlation_id",
    "set_correlation_id",
]
