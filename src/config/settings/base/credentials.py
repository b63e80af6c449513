"""Settings do armazenamento de credenciais da sessão.

O bundle de credenciais é opaco: o serviço apenas grava, carrega
e apaga entradas nomeadas em nome do transporte.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

CredentialStoreBackend = Literal["file", "memory", "redis"]

VALID_BACKENDS = frozenset({"file", "memory", "redis"})


@dataclass(frozen=True)
class CredentialSettings:
    """Configurações do credential store.

    Attributes:
        backend: Backend de persistência (file|memory|redis)
        auth_dir: Diretório das credenciais (backend file)
        redis_key: Chave do hash Redis (backend redis)
    """

    backend: CredentialStoreBackend = "file"
    auth_dir: str = "auth"
    redis_key: str = "chat_bridge:credentials"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de credenciais.

        Args:
            base: BaseSettings para verificar ambiente e REDIS_URL.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in VALID_BACKENDS:
            errors.append(f"CREDENTIAL_STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append(
                "CREDENTIAL_STORE_BACKEND=memory proibido em staging/production. "
                "Use file ou redis."
            )

        if self.backend == "file" and not self.auth_dir:
            errors.append("CREDENTIAL_STORE_BACKEND=file requer AUTH_DIR")

        if self.backend == "redis":
            if not base.redis_url:
                errors.append("CREDENTIAL_STORE_BACKEND=redis requer REDIS_URL configurado")
            if not self.redis_key:
                errors.append("CREDENTIAL_REDIS_KEY não pode ser vazio")

        return errors


def _load_credentials_from_env() -> CredentialSettings:
    """Carrega CredentialSettings de variáveis de ambiente."""
    backend_str = os.getenv("CREDENTIAL_STORE_BACKEND", "file").lower()
    backend: CredentialStoreBackend = (
        backend_str if backend_str in VALID_BACKENDS else "file"  # type: ignore[assignment]
    )
    return CredentialSettings(
        backend=backend,
        auth_dir=os.getenv("AUTH_DIR", "auth"),
        redis_key=os.getenv("CREDENTIAL_REDIS_KEY", "chat_bridge:credentials"),
    )


@lru_cache(maxsize=1)
def get_credential_settings() -> CredentialSettings:
    """Retorna instância cacheada de CredentialSettings."""
    return _load_credentials_from_env()
