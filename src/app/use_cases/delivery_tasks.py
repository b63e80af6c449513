"""Controle de tasks assíncronas de entrega ao webhook.

Cada entrega é uma task independente (fire-and-forget) limitada por
semáforo; uma entrega lenta nunca atrasa as seguintes.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 100


class DeliveryTaskSet:
    """Conjunto de tasks de entrega com limite de concorrência e drain."""

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._active: set[asyncio.Task[Any]] = set()

    @property
    def active_count(self) -> int:
        return len(self._active)

    def schedule(self, coroutine: Coroutine[Any, Any, None], *, name: str | None = None) -> int:
        """Agenda task sem aguardá-la; retorna quantas estão ativas."""
        task = asyncio.create_task(self._run_with_limit(coroutine), name=name)
        self._active.add(task)
        task.add_done_callback(self._on_task_done)
        return len(self._active)

    async def _run_with_limit(self, coroutine: Coroutine[Any, Any, None]) -> None:
        async with self._semaphore:
            await coroutine

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._active.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "webhook_delivery_task_failed",
                    extra={
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._active),
                    },
                )

    async def drain(self, timeout_seconds: float = 5.0) -> None:
        """Aguarda tasks pendentes durante shutdown; cancela o que sobrar."""
        if not self._active:
            return

        pending_now = list(self._active)
        logger.info(
            "webhook_delivery_shutdown_wait",
            extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "webhook_delivery_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )
