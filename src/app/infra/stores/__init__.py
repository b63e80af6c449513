"""Stores: implementações concretas do credential store.

Módulos disponíveis:
    - file_credential_store: Um arquivo JSON por entrada (padrão)
    - redis_credential_store: Hash Redis (containers sem disco persistente)
    - memory_credential_store: Em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.file_credential_store import FileCredentialStore
from app.infra.stores.memory_credential_store import MemoryCredentialStore
from app.infra.stores.redis_credential_store import RedisCredentialStore

__all__ = [
    # File (padrão)
    "FileCredentialStore",
    # Memory (dev/test)
    "MemoryCredentialStore",
    # Redis
    "RedisCredentialStore",
]
