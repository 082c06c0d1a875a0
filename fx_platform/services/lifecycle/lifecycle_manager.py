"""Shutdown orchestration: signal handling and ordered cleanup hooks."""

from __future__ import annotations

import asyncio
import inspect
import signal
from typing import Any, Awaitable, Callable, Union

from fx_platform.services.logger.interface import LoggingInterface

ShutdownHook = Union[Callable[[], None], Callable[[], Awaitable[None]]]


class LifecycleManager:
    def __init__(self, log: LoggingInterface | None = None) -> None:
        self._log = log
        self._hooks: list[ShutdownHook] = []
        self._shutting_down = False
        self._shutdown_done = False

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    def on_shutdown(self, callback: ShutdownHook) -> None:
        """Register a cleanup callback. Hooks run in reverse registration order."""
        self._hooks.append(callback)

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Register SIGTERM and SIGINT handlers.

        With a *loop*, uses ``loop.add_signal_handler``; otherwise falls back
        to ``signal.signal``.
        """
        for sig in (signal.SIGTERM, signal.SIGINT):
            if loop is not None:
                loop.add_signal_handler(sig, self._trigger_shutdown_from_signal)
            else:
                signal.signal(sig, self._handle_signal)

    async def wait_for_shutdown(self) -> None:
        """Block until shutdown has been requested."""
        while not self._shutting_down:
            await asyncio.sleep(0.1)

    async def shutdown(self) -> None:
        if self._shutdown_done:
            return
        self._shutting_down = True
        self._shutdown_done = True

        for hook in reversed(self._hooks):
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                # one failing hook must not stop the others
                if self._log is not None:
                    self._log.error(
                        "Shutdown hook failed",
                        hook=getattr(hook, "__qualname__", repr(hook)),
                        error=str(exc),
                    )

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self._shutting_down = True

    def _trigger_shutdown_from_signal(self) -> None:
        if not self._shutting_down:
            self._shutting_down = True
            asyncio.get_running_loop().create_task(self.shutdown())
