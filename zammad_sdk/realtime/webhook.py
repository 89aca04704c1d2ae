"""
Webhook ingestion: turns one signed Zammad webhook request into at most one event
"""
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from zammad_sdk.realtime.events import (
    EventKind,
    TicketCreated,
    TicketUpdated,
    TicketClosed,
    ArticleCreated,
    empty_article,
    utcnow,
)
from zammad_sdk.realtime.monitor import TicketMonitor
from zammad_sdk.realtime.users import UserCache
from zammad_sdk.schemas import Ticket, TicketArticle

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


@dataclass
class WebhookOptions:
    """
    Webhook receiver options.

    Leaving ``secret`` unset disables signature verification entirely (open mode).
    That is meant for local development only; production receivers should always
    configure the secret shared with Zammad.
    """
    path: str = "/webhooks/zammad"
    secret: Optional[str] = None
    signature_header_name: str = "X-Zammad-Signature"
    event_header_name: str = "X-Zammad-Event"

    @classmethod
    def from_settings(cls, settings) -> "WebhookOptions":
        return cls(
            path=settings.zammad_webhook_path,
            secret=settings.zammad_webhook_secret,
            signature_header_name=settings.zammad_signature_header,
            event_header_name=settings.zammad_event_header,
        )


def compute_signature(body: bytes, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of ``body``"""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """
    Check a webhook signature header against the raw request body.

    Accepts the bare hex digest or one prefixed with ``sha256=``; hex case is ignored.
    Always true when no secret is configured.
    """
    if not secret or not secret.strip():
        return True

    if not signature or not signature.strip():
        return False

    signature = signature.strip()
    if signature[:len(SIGNATURE_PREFIX)].lower() == SIGNATURE_PREFIX:
        signature = signature[len(SIGNATURE_PREFIX):]

    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.lower().encode("utf-8"))


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


class WebhookReceiver:
    """
    Verifies, decodes and dispatches Zammad webhook requests.

    ``handle`` returns the HTTP status the caller should answer with:
    200 when processed (even if nothing was published), 401 for a bad or missing
    signature, 400 when the event header is missing and 500 on any other failure.
    """

    def __init__(
        self,
        client,
        monitor: TicketMonitor,
        options: Optional[WebhookOptions] = None,
        user_cache: Optional[UserCache] = None,
    ):
        self.monitor = monitor
        self.options = options or WebhookOptions()
        self.users = user_cache or UserCache(client.users)
        self._handlers = {
            EventKind.TICKET_CREATED.value: self._handle_ticket_created,
            EventKind.TICKET_UPDATED.value: self._handle_ticket_updated,
            EventKind.ARTICLE_CREATED.value: self._handle_article_created,
            EventKind.TICKET_CLOSED.value: self._handle_ticket_closed,
        }

    async def handle(self, body: bytes, headers: Mapping[str, str]) -> int:
        if isinstance(body, str):
            body = body.encode("utf-8")

        signature = _header(headers, self.options.signature_header_name)
        if not verify_signature(body, signature, self.options.secret):
            logger.warning("Invalid webhook signature received")
            return 401

        event_name = _header(headers, self.options.event_header_name)
        if not event_name or not event_name.strip():
            logger.warning(f"Missing webhook event header {self.options.event_header_name}")
            return 400

        try:
            await self._process(event_name.strip(), body)
        except Exception:
            logger.exception(f"Failed to process {event_name} webhook")
            return 500

        return 200

    async def _process(self, event_name: str, body: bytes) -> None:
        payload = json.loads(body)
        if not isinstance(payload, dict) or "ticket" not in payload:
            logger.debug(f"Webhook payload missing ticket element: {body[:512]!r}")
            return

        try:
            ticket = Ticket.model_validate(payload["ticket"])
        except ValidationError as e:
            logger.warning(f"Unable to deserialize ticket from webhook payload: {e}")
            return

        handler = self._handlers.get(event_name)
        if handler is None:
            logger.info(f"Unhandled webhook event {event_name}")
            return

        await handler(payload, ticket)

    @staticmethod
    def _article(payload: Dict[str, Any], ticket: Ticket) -> TicketArticle:
        data = payload.get("article")
        if data is None:
            return empty_article(ticket)
        return TicketArticle.model_validate(data)

    async def _handle_ticket_created(self, payload: Dict[str, Any], ticket: Ticket) -> None:
        event = TicketCreated(
            ticket=ticket,
            first_article=self._article(payload, ticket),
            creator=await self.users.get(ticket.created_by_id),
            observed_at=utcnow(),
        )
        await self.monitor.publish(event)

    async def _handle_ticket_updated(self, payload: Dict[str, Any], ticket: Ticket) -> None:
        previous = payload.get("previous")
        changes = payload.get("changes")
        if changes is not None and not isinstance(changes, dict):
            raise ValueError(f"Webhook 'changes' must be an object, got {type(changes).__name__}")
        event = TicketUpdated(
            ticket=ticket,
            previous_ticket=Ticket.model_validate(previous) if previous is not None else ticket,
            changed_fields=changes or {},
            updated_by=await self.users.get(ticket.updated_by_id),
        )
        await self.monitor.publish(event)

    async def _handle_article_created(self, payload: Dict[str, Any], ticket: Ticket) -> None:
        event = ArticleCreated(
            ticket=ticket,
            article=self._article(payload, ticket),
            is_split=payload.get("is_split", False),
            split_from_ticket_id=payload.get("split_from_ticket_id"),
            split_from_article_id=payload.get("split_from_article_id"),
        )
        await self.monitor.publish(event)

    async def _handle_ticket_closed(self, payload: Dict[str, Any], ticket: Ticket) -> None:
        closed_at = payload.get("closed_at")
        event = TicketClosed(
            ticket=ticket,
            closed_by=await self.users.get(ticket.updated_by_id),
            closed_at=closed_at if closed_at else utcnow(),
        )
        await self.monitor.publish(event)
