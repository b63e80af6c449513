"""Redis Credential Store: bundle de credenciais em um hash Redis.

Cada entrada é um campo do hash com valor JSON. Permite rodar o
serviço sem disco persistente (containers efêmeros).
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import CredentialStoreError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Chave padrão do hash de credenciais
DEFAULT_CREDENTIAL_KEY = "chat_bridge:credentials"


class RedisCredentialStore(CredentialStoreProtocol):
    """Credential store usando Redis (HSET/HDEL/DEL).

    Args:
        redis_client: Cliente Redis assíncrono
        key: Chave do hash
    """

    def __init__(
        self,
        redis_client: AsyncRedis[bytes],
        key: str = DEFAULT_CREDENTIAL_KEY,
    ) -> None:
        self._redis = redis_client
        self._key = key

    async def load(self) -> dict[str, Any] | None:
        """Carrega o hash inteiro."""
        try:
            raw = await self._redis.hgetall(self._key)
        except RedisError as exc:
            raise CredentialStoreError("credential_read_failed") from exc
        if not raw:
            return None
        bundle: dict[str, Any] = {}
        for field_name, data in raw.items():
            name = field_name.decode() if isinstance(field_name, bytes) else field_name
            try:
                bundle[name] = json.loads(data)
            except (json.JSONDecodeError, TypeError) as e:
                logger.warning(
                    "credential_entry_unreadable",
                    extra={"backend": "redis", "error": str(e)},
                )
        return bundle or None

    async def save(self, entries: Mapping[str, Any]) -> None:
        """Aplica set/delete das entradas numa única transação."""
        if not entries:
            return
        to_set = {name: json.dumps(value) for name, value in entries.items() if value is not None}
        to_delete = [name for name, value in entries.items() if value is None]
        try:
            pipeline = self._redis.pipeline()
            if to_set:
                pipeline.hset(self._key, mapping=to_set)
            if to_delete:
                pipeline.hdel(self._key, *to_delete)
            await pipeline.execute()
        except RedisError as exc:
            logger.error(
                "credential_save_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            raise CredentialStoreError("credential_write_failed") from exc
        logger.debug("credentials_saved", extra={"backend": "redis", "entries": len(entries)})

    async def clear(self) -> None:
        """Remove o hash."""
        try:
            await self._redis.delete(self._key)
        except RedisError as exc:
            raise CredentialStoreError("credential_clear_failed") from exc
        logger.info("credentials_cleared", extra={"backend": "redis"})
