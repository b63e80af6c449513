"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente (Loki, CloudWatch Insights, BigQuery etc.).

Métricas suportadas:
- Latência: histogram de tempos de execução por componente/operação
- Transição de estado: counter de mudanças de estado da sessão
- Reconexão: counter de reconexões agendadas por motivo
- Entrega de webhook: counter de entregas por resultado
- Envio outbound: counter de envios por resultado

Uso:
    from app.observability.metrics import record_latency, record_webhook_delivery

    start = time.perf_counter()
    # ... operação ...
    latency_ms = (time.perf_counter() - start) * 1000
    record_webhook_delivery("delivered", latency_ms, status_code=200)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "webhook", "send_gateway")
        operation: Nome da operação (ex: "deliver", "send_text")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    extra: dict[str, object] = {
        "metric_type": "latency",
        "component": component,
        "operation": operation,
        "latency_ms": round(latency_ms, 2),
    }
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.info("metric_latency", extra=extra)


def record_state_transition(from_state: str, to_state: str, trigger: str) -> None:
    """Registra mudança de estado da sessão de transporte."""
    logger.info(
        "metric_state_transition",
        extra={
            "metric_type": "state_transition",
            "component": "session",
            "from_state": from_state,
            "to_state": to_state,
            "trigger": trigger,
        },
    )


def record_reconnect(reason: str, delay_seconds: float, purge_credentials: bool) -> None:
    """Registra reconexão agendada pela política.

    Args:
        reason: Motivo do fechamento (ex: "connection_lost")
        delay_seconds: Atraso até a nova tentativa
        purge_credentials: Se as credenciais foram apagadas antes
    """
    logger.info(
        "metric_reconnect",
        extra={
            "metric_type": "reconnect",
            "component": "session",
            "reason": reason,
            "delay_seconds": delay_seconds,
            "purge_credentials": purge_credentials,
        },
    )


def record_webhook_delivery(
    outcome: str,
    latency_ms: float,
    status_code: int | None = None,
) -> None:
    """Registra resultado de uma entrega ao webhook.

    Args:
        outcome: delivered | rejected | failed
        latency_ms: Duração do POST em milissegundos
        status_code: Status HTTP (quando houve resposta)
    """
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "component": "webhook",
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "status_code": status_code,
        },
    )


def record_send(outcome: str, error_code: str | None = None) -> None:
    """Registra resultado de um envio outbound (sent | rejected | failed)."""
    extra: dict[str, object] = {
        "metric_type": "send",
        "component": "send_gateway",
        "outcome": outcome,
    }
    if error_code:
        extra["error_code"] = error_code
    logger.info("metric_send", extra=extra)
