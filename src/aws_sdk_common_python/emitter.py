"""Interceptor chain used while executing a command."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from aws_sdk_common_python.command import Transaction

    Listener = Callable[[Transaction], None]

logger = logging.getLogger(__name__)

INIT = "init"
PREPARED = "prepared"
PROCESS = "process"
ERROR = "error"

EVENTS: tuple[str, ...] = (INIT, PREPARED, PROCESS, ERROR)


class Emitter:
    """Ordered listeners keyed by event name.

    Every command gets its own copy of the client's emitter so that a listener
    added to one command never leaks into another command executing
    concurrently.

    Events:
        init: before the request is serialized. Listeners may edit command.params.
        prepared: after the request is serialized and signed.
        process: after a successful response was parsed into transaction.result.
        error: before a failure is normalized. Listeners may call
            transaction.intercept(result) to recover.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        """Append a listener to the event."""
        self._listeners.setdefault(event, []).append(listener)

    def remove(self, event: str, listener: Listener) -> None:
        """Remove a listener, ignoring listeners that were never added."""
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, []))

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def emit(self, event: str, transaction: Transaction) -> None:
        """Call each listener of the event in the order it was added."""
        for listener in self.listeners(event):
            logger.debug(
                "Emitting %s to %r for %s", event, listener, transaction.command.name
            )
            listener(transaction)

    def copy(self) -> Emitter:
        """Return an emitter with independent listener lists."""
        clone = Emitter()
        clone._listeners = {  # noqa: SLF001
            event: list(listeners) for event, listeners in self._listeners.items()
        }
        return clone

    def __copy__(self) -> Emitter:
        return self.copy()
