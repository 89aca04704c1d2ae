"""
In-process publish/subscribe hub for ticket events
"""
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable, Dict, List, Tuple, Union

from zammad_sdk.realtime.events import EventKind

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class TicketMonitor:
    """
    Fans ticket events out to subscribers.

    Delivery only happens between ``start()`` and ``stop()``; events published while
    stopped are dropped. Handlers for one kind run one after another in registration
    order, and a failing handler is logged without affecting the others or the producer.
    Handlers may be plain callables or coroutine functions.
    """

    def __init__(self):
        self._handlers: Dict[EventKind, List[EventHandler]] = {kind: [] for kind in EventKind}
        self._lock = threading.Lock()
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.info("Ticket monitor started")

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        logger.info("Ticket monitor stopped")

    def subscribe(self, kind: EventKind, handler: EventHandler) -> EventHandler:
        """Register a handler for one event kind; returns the handler"""
        if not callable(handler):
            raise TypeError("handler must be callable")
        kind = EventKind(kind)
        with self._lock:
            self._handlers[kind].append(handler)
        return handler

    def unsubscribe(self, kind: EventKind, handler: EventHandler) -> bool:
        """Remove the first registration of ``handler``; returns False if it was not registered"""
        kind = EventKind(kind)
        with self._lock:
            try:
                self._handlers[kind].remove(handler)
            except ValueError:
                return False
        return True

    def on(self, kind: EventKind) -> Callable[[EventHandler], EventHandler]:
        """
        Decorator form of :meth:`subscribe`::

            @monitor.on(EventKind.TICKET_CREATED)
            async def notify(event):
                ...
        """
        def decorator(handler: EventHandler) -> EventHandler:
            return self.subscribe(kind, handler)
        return decorator

    def handler_count(self, kind: EventKind) -> int:
        with self._lock:
            return len(self._handlers[EventKind(kind)])

    def _snapshot(self, kind: EventKind) -> Tuple[EventHandler, ...]:
        with self._lock:
            return tuple(self._handlers[kind])

    async def publish(self, event) -> None:
        """Deliver ``event`` to every handler registered for ``event.kind``"""
        if not self._started:
            logger.debug(f"Monitor not started, dropping {event.kind.value} event")
            return

        for handler in self._snapshot(event.kind):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    f"Handler {getattr(handler, '__qualname__', handler)!r} failed for "
                    f"{event.kind.value} event on ticket {event.ticket.id}"
                )
