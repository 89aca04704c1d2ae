"""
Polling fallback for deployments that cannot receive webhooks
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from zammad_sdk.realtime.events import (
    TicketCreated,
    TicketUpdated,
    TicketClosed,
    empty_article,
    utcnow,
)
from zammad_sdk.realtime.monitor import TicketMonitor
from zammad_sdk.realtime.users import UserCache
from zammad_sdk.schemas import Ticket, TicketArticle

logger = logging.getLogger(__name__)


@dataclass
class PollingOptions:
    poll_interval: float = 30.0
    page_size: int = 200
    # Upper bound for stop() waiting on the loop
    stop_timeout: float = 10.0

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be greater than 0")
        if self.page_size <= 0:
            raise ValueError("page_size must be greater than 0")

    @classmethod
    def from_settings(cls, settings) -> "PollingOptions":
        return cls(
            poll_interval=settings.zammad_poll_interval,
            page_size=settings.zammad_poll_page_size,
        )


class PollingService:
    """
    Background loop that synthesizes ticket events by diffing periodic ticket lists.

    The service keeps a snapshot of every ticket it has seen. A ticket it has not seen
    yet produces ``TicketCreated``, so the very first cycle announces every ticket
    returned by the server. Afterwards a ticket whose ``updated_at`` moved produces
    ``TicketUpdated`` (``changed_fields`` lists only tracked fields and can be empty
    when nothing tracked changed), plus ``TicketClosed`` when ``close_at`` is set.

    Errors inside one cycle are logged and the loop waits for the next tick.
    A new ticket is recorded before its first article and creator are fetched, so if
    either lookup fails that ticket never gets a ``TicketCreated``; later changes to it
    still produce ``TicketUpdated``. Snapshots live in memory only.
    """

    TRACKED_FIELDS = ("state_id", "title", "owner_id", "priority_id")

    def __init__(
        self,
        client,
        monitor: TicketMonitor,
        options: Optional[PollingOptions] = None,
        user_cache: Optional[UserCache] = None,
    ):
        self._client = client
        self.monitor = monitor
        self.options = options or PollingOptions()
        self.users = user_cache or UserCache(client.users)
        self._known_tickets: Dict[int, Ticket] = {}
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def known_tickets(self) -> Dict[int, Ticket]:
        return dict(self._known_tickets)

    def start(self) -> asyncio.Task:
        """Schedule the polling loop on the running event loop"""
        if self.is_running:
            return self._task

        logger.info(f"Starting Zammad polling service with interval {self.options.poll_interval}s")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event), name="zammad-polling")
        return self._task

    async def stop(self) -> None:
        """Signal the loop to finish and wait for it, at most ``stop_timeout`` seconds"""
        task = self._task
        if task is None:
            return

        logger.info("Stopping Zammad polling service")
        self._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=self.options.stop_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Polling loop did not finish within {self.options.stop_timeout}s, cancelling it"
            )
            task.cancel()
        finally:
            self._task = None

    async def _run(self, stop_event: asyncio.Event) -> None:
        self.monitor.start()
        try:
            while not stop_event.is_set():
                try:
                    await self.poll_once()
                except Exception:
                    logger.exception("Error while polling Zammad API")

                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.options.poll_interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self.monitor.stop()
            logger.info("Zammad polling loop exited")

    async def poll_once(self) -> int:
        """Run one reconciliation cycle; returns the number of events published"""
        tickets = await asyncio.to_thread(
            self._client.tickets.get_tickets, page=1, per_page=self.options.page_size
        )
        published = 0
        for ticket in tickets:
            published += await self._reconcile(ticket)
        logger.debug(f"Poll cycle checked {len(tickets)} tickets, published {published} events")
        return published

    async def _reconcile(self, ticket: Ticket) -> int:
        previous = self._known_tickets.get(ticket.id)
        if previous is None:
            self._known_tickets[ticket.id] = ticket.model_copy(deep=True)
            event = TicketCreated(
                ticket=ticket,
                first_article=await self._first_article(ticket),
                creator=await self.users.get(ticket.created_by_id),
                observed_at=utcnow(),
            )
            await self.monitor.publish(event)
            return 1

        if previous.updated_at == ticket.updated_at:
            return 0

        self._known_tickets[ticket.id] = ticket.model_copy(deep=True)
        updated_by = await self.users.get(ticket.updated_by_id)
        await self.monitor.publish(
            TicketUpdated(
                ticket=ticket,
                previous_ticket=previous,
                changed_fields=self.detect_changes(previous, ticket),
                updated_by=updated_by,
            )
        )
        if ticket.close_at is None:
            return 1

        await self.monitor.publish(
            TicketClosed(
                ticket=ticket,
                closed_by=await self.users.get(ticket.updated_by_id),
                closed_at=ticket.close_at,
            )
        )
        return 2

    @classmethod
    def detect_changes(cls, previous: Ticket, current: Ticket) -> Dict[str, Any]:
        """Tracked fields whose value differs, mapped to the current value"""
        changes = {}
        for field in cls.TRACKED_FIELDS:
            new_value = getattr(current, field)
            if getattr(previous, field) != new_value:
                changes[field] = new_value
        return changes

    async def _first_article(self, ticket: Ticket) -> TicketArticle:
        articles = await asyncio.to_thread(self._client.tickets.get_ticket_articles, ticket.id)
        if articles:
            return articles[0]
        return empty_article(ticket)
