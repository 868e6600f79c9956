# hfsm/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Optional

from hfsm.core.errors import HookError, HSMError

logger = logging.getLogger(__name__)

# on_enter(previous_id, entering_id); previous_id is None on the very first transition.
EnterHook = Callable[[Optional[str], str], None]
# on_exit(exiting_id, next_id)
ExitHook = Callable[[str, str], None]
AsyncEnterHook = Callable[[Optional[str], str], Awaitable[None]]
AsyncExitHook = Callable[[str, str], Awaitable[None]]

# Subscribers get (from_id, to_id) after a transition completes; from_id is None on the first one.
TransitionListener = Callable[[Optional[str], str], None]

ErrorSink = Callable[[str, HSMError], None]


class LoggingErrorSink:
    """
    Default error sink. Writes every report to the standard logging module.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logging.getLogger("hfsm")

    def __call__(self, source: str, error: HSMError) -> None:
        self._logger.error("%s: %s", source, error)


class _HookInvoker:
    """
    Internal helper that calls hooks and listeners, turning whatever they raise
    into a HookError report instead of letting it escape the transition.
    """

    def __init__(self, source: str, sink: ErrorSink) -> None:
        self._source = source
        self._sink = sink

    def call(self, hook: Optional[Callable[..., None]], state_id: str, *args) -> None:
        if hook is None:
            return
        if inspect.iscoroutinefunction(hook):
            # Calling it here would only create a coroutine that never runs.
            name = getattr(hook, "__qualname__", repr(hook))
            logger.warning("Coroutine function %s used as a synchronous hook for state '%s'", name, state_id)
            message = f"Hook {name} for state '{state_id}' is a coroutine function; pass it as an async hook."
            self._sink(self._source, HookError(state_id, message))
            return
        try:
            hook(*args)
        except Exception as exc:
            self._fail(hook, state_id, exc)

    async def call_async(self, hook: Optional[Callable[..., Awaitable[None]]], state_id: str, *args) -> None:
        if hook is None:
            return
        try:
            await hook(*args)
        except Exception as exc:
            self._fail(hook, state_id, exc)

    def _fail(self, hook: Callable, state_id: str, exc: Exception) -> None:
        name = getattr(hook, "__qualname__", repr(hook))
        logger.exception("Hook %s failed for state '%s'", name, state_id)
        error = HookError(state_id, f"Hook {name} failed for state '{state_id}': {exc}")
        error.__cause__ = exc
        self._sink(self._source, error)
