"""File Credential Store: um arquivo JSON por entrada de credencial.

Layout compatível com o "multi-file auth state" dos clientes de chat:
cada entrada nomeada vira `<auth_dir>/<nome-sanitizado>.json`.

Escritas são atômicas (arquivo temporário + os.replace) e rodam em
thread para não bloquear o event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import CredentialStoreError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"


def entry_filename(name: str) -> str:
    """Converte o nome da entrada em nome de arquivo seguro."""
    return name.replace("/", "__").replace(":", "-") + ENTRY_SUFFIX


class FileCredentialStore(CredentialStoreProtocol):
    """Credential store em diretório local.

    O nome original da entrada é gravado junto do valor, já que a
    sanitização do nome de arquivo não é reversível.

    Args:
        auth_dir: Diretório das credenciais (criado sob demanda)
    """

    def __init__(self, auth_dir: str | Path) -> None:
        self._dir = Path(auth_dir)
        self._lock = asyncio.Lock()

    @property
    def directory(self) -> Path:
        return self._dir

    async def load(self) -> dict[str, Any] | None:
        """Carrega todas as entradas do diretório."""
        async with self._lock:
            return await asyncio.to_thread(self._load_sync)

    async def save(self, entries: Mapping[str, Any]) -> None:
        """Grava/remove entradas de forma atômica por arquivo."""
        if not entries:
            return
        async with self._lock:
            try:
                await asyncio.to_thread(self._save_sync, dict(entries))
            except OSError as exc:
                logger.error(
                    "credential_save_failed",
                    extra={"backend": "file", "error_type": type(exc).__name__},
                )
                raise CredentialStoreError("credential_write_failed") from exc
        logger.debug("credentials_saved", extra={"backend": "file", "entries": len(entries)})

    async def clear(self) -> None:
        """Remove o diretório inteiro."""
        async with self._lock:
            try:
                await asyncio.to_thread(self._clear_sync)
            except OSError as exc:
                raise CredentialStoreError("credential_clear_failed") from exc
        logger.info("credentials_cleared", extra={"backend": "file"})

    # ──────────────────────────────────────────────────────────────
    # Implementação síncrona (executada via asyncio.to_thread)
    # ──────────────────────────────────────────────────────────────

    def _load_sync(self) -> dict[str, Any] | None:
        if not self._dir.is_dir():
            return None
        bundle: dict[str, Any] = {}
        for path in sorted(self._dir.glob(f"*{ENTRY_SUFFIX}")):
            try:
                record = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning(
                    "credential_entry_unreadable",
                    extra={"file": path.name, "error_type": type(exc).__name__},
                )
                continue
            if not isinstance(record, dict) or "name" not in record:
                logger.warning("credential_entry_malformed", extra={"file": path.name})
                continue
            bundle[record["name"]] = record.get("value")
        return bundle or None

    def _save_sync(self, entries: dict[str, Any]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        for name, value in entries.items():
            path = self._dir / entry_filename(name)
            if value is None:
                path.unlink(missing_ok=True)
                continue
            self._write_atomic(path, {"name": name, "value": value})

    def _write_atomic(self, path: Path, record: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=ENTRY_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(record, handle, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _clear_sync(self) -> None:
        if self._dir.exists():
            shutil.rmtree(self._dir)
