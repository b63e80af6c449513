"""Cliente Redis do credential store.

Fica fora de dependencies.py para que o import de `redis` só aconteça
quando CREDENTIAL_STORE_BACKEND=redis.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Timeouts de socket do cliente (segundos)
REDIS_SOCKET_TIMEOUT = 5.0


def create_async_redis_client(
    redis_url: str,
    *,
    socket_timeout: float = REDIS_SOCKET_TIMEOUT,
) -> Redis:
    """Cria o cliente Redis assíncrono a partir de REDIS_URL.

    A conexão é aberta sob demanda; falhas aparecem na primeira leitura
    ou escrita de credenciais.

    Raises:
        ValueError: REDIS_URL vazio.
    """
    if not redis_url:
        raise ValueError("REDIS_URL não configurado")

    from redis.asyncio import from_url

    client: Redis = from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        health_check_interval=30,
    )
    logger.info(
        "redis_client_created",
        extra={
            "component": "credential_store",
            "host": client.connection_pool.connection_kwargs.get("host", "unknown"),
        },
    )
    return client
