"""Cliente HTTP base para conectores da camada API.

Uma única tentativa por requisição: quem chama decide o que fazer com
a falha (a entrega de webhook é at-most-once e não tem retry).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 10.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    max_connections: int = 100


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_timeout = is_timeout


class HttpClient:
    """Cliente HTTP assíncrono com pool compartilhado.

    Args:
        config: Timeout, headers padrão e limites do pool
        transport: Transporte httpx alternativo (ex: httpx.MockTransport)
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._client = httpx.AsyncClient(
            verify=self._config.verify_ssl,
            timeout=self._config.timeout_seconds,
            headers=self._config.default_headers,
            limits=httpx.Limits(max_connections=self._config.max_connections),
            transport=transport,
        )

    async def post(
        self,
        url: str,
        json: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST JSON; timeouts e erros de conexão viram HttpError."""
        try:
            return await self._client.post(url, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            raise HttpError("http_timeout", is_timeout=True) from exc
        except httpx.HTTPError as exc:
            logger.debug("http_request_error", extra={"error_type": type(exc).__name__})
            raise HttpError("http_connection_error") from exc

    async def aclose(self) -> None:
        await self._client.aclose()
