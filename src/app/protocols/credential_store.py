"""Protocolo de persistência do bundle de credenciais da sessão.

O bundle é opaco para o serviço: um mapeamento de entradas nomeadas
produzido e consumido apenas pelo transporte.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class CredentialStoreProtocol(ABC):
    """Contrato assíncrono para armazenamento de credenciais.

    Semântica:
    - load: bundle completo ou None se nunca salvo/apagado
    - save: atualização incremental; valor None remove a entrada
    - clear: remove o bundle inteiro (reset/logout)
    """

    @abstractmethod
    async def load(self) -> dict[str, Any] | None:
        """Carrega o bundle persistido."""

    @abstractmethod
    async def save(self, entries: Mapping[str, Any]) -> None:
        """Persiste entradas alteradas.

        Raises:
            CredentialStoreError: Se a escrita falhar.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Apaga todas as credenciais."""
