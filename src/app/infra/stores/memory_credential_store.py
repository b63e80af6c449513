"""Credential store em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from app.protocols.credential_store import CredentialStoreProtocol

if TYPE_CHECKING:
    from collections.abc import Mapping


class MemoryCredentialStore(CredentialStoreProtocol):
    """Credential store em memória: apenas para dev/test."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] = dict(initial or {})
        self.save_calls = 0
        self.clear_calls = 0

    async def load(self) -> dict[str, Any] | None:
        if not self._entries:
            return None
        return copy.deepcopy(self._entries)

    async def save(self, entries: Mapping[str, Any]) -> None:
        self.save_calls += 1
        for name, value in entries.items():
            if value is None:
                self._entries.pop(name, None)
            else:
                self._entries[name] = copy.deepcopy(value)

    async def clear(self) -> None:
        self.clear_calls += 1
        self._entries.clear()
