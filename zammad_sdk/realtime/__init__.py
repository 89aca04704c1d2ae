"""
Ticket notifications: event model, hub, webhook receiver and polling fallback
"""
from .events import (
    EventKind,
    TicketEvent,
    TicketCreated,
    TicketUpdated,
    TicketClosed,
    ArticleCreated,
)
from .monitor import TicketMonitor, EventHandler
from .users import UserCache
from .webhook import WebhookOptions, WebhookReceiver, verify_signature, compute_signature
from .polling import PollingOptions, PollingService

__all__ = [
    "EventKind",
    "TicketEvent",
    "TicketCreated",
    "TicketUpdated",
    "TicketClosed",
    "ArticleCreated",
    "TicketMonitor",
    "EventHandler",
    "UserCache",
    "WebhookOptions",
    "WebhookReceiver",
    "verify_signature",
    "compute_signature",
    "PollingOptions",
    "PollingService",
]
