from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from zammad_sdk.realtime.monitor import TicketMonitor
from zammad_sdk.schemas import Ticket, TicketArticle, User


def make_ticket(ticket_id: int = 1, **fields) -> Ticket:
    data = {
        "id": ticket_id,
        "title": f"Ticket {ticket_id}",
        "state_id": 1,
        "priority_id": 2,
        "owner_id": 3,
        "created_by_id": 7,
        "updated_by_id": 7,
        "updated_at": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    }
    data.update(fields)
    return Ticket(**data)


class EventRecorder:
    """Subscriber that remembers every event it receives"""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


@pytest.fixture
def monitor():
    hub = TicketMonitor()
    hub.start()
    return hub


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def zammad_client():
    """Stand-in for ZammadClient exposing the resource clients the realtime layer uses"""
    client = MagicMock()
    client.users.get_user.side_effect = lambda user_id: User(id=user_id, login=f"agent{user_id}")
    client.tickets.get_tickets.return_value = []
    client.tickets.get_ticket_articles.side_effect = lambda ticket_id: [
        TicketArticle(id=100 + ticket_id, ticket_id=ticket_id, body="first message")
    ]
    return client
