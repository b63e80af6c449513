"""Settings base: ambiente, servidor HTTP e Redis.

Variáveis: ENVIRONMENT, SERVICE_NAME, DEBUG, LOG_LEVEL, REDIS_URL,
HOST, PORT.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]

DEFAULT_PORT = 3000
DEFAULT_SERVICE_NAME = "chat_bridge"

# Aliases aceitos em ENVIRONMENT
_ENVIRONMENT_ALIASES: dict[str, Environment] = {
    "production": "production",
    "prod": "production",
    "staging": "staging",
    "stage": "staging",
}

_TRUTHY = frozenset({"true", "1", "yes"})


@dataclass(frozen=True)
class BaseSettings:
    """Configurações comuns ao processo.

    `debug` liga logs DEBUG em texto legível e o reload do uvicorn.
    `redis_url` só é exigido quando o credential store é Redis.
    """

    environment: Environment = "development"
    service_name: str = DEFAULT_SERVICE_NAME
    debug: bool = False
    log_level: str = "INFO"
    redis_url: str = ""
    host: str = "0.0.0.0"  # noqa: S104
    port: int = DEFAULT_PORT

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def strict_validation(self) -> bool:
        """Staging e produção não sobem com configuração inválida."""
        return self.environment in ("staging", "production")

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.environment not in ("development", "staging", "production"):
            errors.append(f"ENVIRONMENT inválido: {self.environment}")
        if not self.service_name:
            errors.append("SERVICE_NAME não pode ser vazio")
        if not 0 < self.port < 65536:
            errors.append(f"PORT fora do intervalo válido: {self.port}")
        return errors


def _load_base_from_env() -> BaseSettings:
    debug = os.getenv("DEBUG", "").lower() in _TRUTHY
    return BaseSettings(
        environment=_ENVIRONMENT_ALIASES.get(
            os.getenv("ENVIRONMENT", "").lower(), "development"
        ),
        service_name=os.getenv("SERVICE_NAME", DEFAULT_SERVICE_NAME),
        debug=debug,
        log_level=os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),
        redis_url=os.getenv("REDIS_URL", ""),
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("PORT", str(DEFAULT_PORT))),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """BaseSettings lidas do ambiente uma única vez."""
    return _load_base_from_env()
