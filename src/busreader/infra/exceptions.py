"""Process-wide hooks that log exceptions nobody caught."""

from __future__ import annotations

import logging
import sys
import threading
from types import TracebackType
from typing import Callable, Optional, Type

logger = logging.getLogger("app.exceptions")

_SysHook = Callable[[Type[BaseException], BaseException, Optional[TracebackType]], None]
_ThreadHook = Callable[["threading.ExceptHookArgs"], None]


class UncaughtExceptionLogger:
    """Logs at CRITICAL, then hands the exception to the hook it replaced."""

    def __init__(self) -> None:
        self._previous_sys_hook: Optional[_SysHook] = None
        self._previous_thread_hook: Optional[_ThreadHook] = None
        self._installed = False

    def install(self) -> None:
        if self._installed:
            return
        self._previous_sys_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook
        sys.excepthook = self._on_main_thread_exception
        threading.excepthook = self._on_worker_exception
        self._installed = True

    def uninstall(self) -> None:
        if not self._installed:
            return
        sys.excepthook = self._previous_sys_hook or sys.__excepthook__
        threading.excepthook = self._previous_thread_hook or threading.__excepthook__
        self._installed = False

    def _on_main_thread_exception(
        self,
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            # Ctrl+C is a normal way to leave the capture loop.
            logger.info("Interrupted.")
        else:
            logger.critical("Unhandled exception: %s", exc_value, exc_info=(exc_type, exc_value, exc_traceback))
        if self._previous_sys_hook is not None:
            self._previous_sys_hook(exc_type, exc_value, exc_traceback)

    def _on_worker_exception(self, args: "threading.ExceptHookArgs") -> None:
        thread_name = args.thread.name if args.thread is not None else "<unknown>"
        logger.critical(
            "Unhandled exception in thread %s: %s",
            thread_name,
            args.exc_value,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        if self._previous_thread_hook is not None:
            self._previous_thread_hook(args)


_hook = UncaughtExceptionLogger()


def install_exception_hook() -> UncaughtExceptionLogger:
    """Install the shared hook for the main thread and background threads."""
    _hook.install()
    return _hook
