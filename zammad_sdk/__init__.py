"""
Typed client for the Zammad helpdesk API with webhook and polling ticket notifications
"""

from zammad_sdk.integrations.base import (
    ZammadError,
    ZammadApiError,
    AuthenticationError,
    RateLimitError,
    TransportError,
)
from zammad_sdk.integrations.zammad import ZammadClient
from zammad_sdk.realtime import (
    EventKind,
    TicketCreated,
    TicketUpdated,
    TicketClosed,
    ArticleCreated,
    TicketMonitor,
    WebhookOptions,
    WebhookReceiver,
    PollingOptions,
    PollingService,
)

__version__ = "1.0.0"

__all__ = [
    "ZammadClient",
    "ZammadError",
    "ZammadApiError",
    "AuthenticationError",
    "RateLimitError",
    "TransportError",
    "EventKind",
    "TicketCreated",
    "TicketUpdated",
    "TicketClosed",
    "ArticleCreated",
    "TicketMonitor",
    "WebhookOptions",
    "WebhookReceiver",
    "PollingOptions",
    "PollingService",
]
