"""
Ticket notification events

Every event carries the full current ticket (and article where relevant) so
subscribers can render it without a follow-up request.
"""
from typing import Annotated, Any, Dict, Literal, Optional, Union
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator

from zammad_sdk.schemas import Ticket, TicketArticle, User


class EventKind(str, Enum):
    """Recognised notification kinds; values match the webhook event header"""
    TICKET_CREATED = "ticket.created"
    TICKET_UPDATED = "ticket.updated"
    TICKET_CLOSED = "ticket.closed"
    ARTICLE_CREATED = "ticket.article.created"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TicketEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    ticket: Ticket


class TicketCreated(TicketEventBase):
    kind: Literal[EventKind.TICKET_CREATED] = EventKind.TICKET_CREATED
    first_article: TicketArticle
    creator: Optional[User] = None
    observed_at: datetime = Field(default_factory=utcnow)

    @field_validator("observed_at")
    @classmethod
    def validate_observed_at(cls, v):
        return as_utc(v)


class TicketUpdated(TicketEventBase):
    kind: Literal[EventKind.TICKET_UPDATED] = EventKind.TICKET_UPDATED
    previous_ticket: Ticket
    # field name -> new value, only fields that differ
    changed_fields: Dict[str, Any] = Field(default_factory=dict)
    updated_by: Optional[User] = None


class TicketClosed(TicketEventBase):
    kind: Literal[EventKind.TICKET_CLOSED] = EventKind.TICKET_CLOSED
    closed_by: Optional[User] = None
    closed_at: datetime = Field(default_factory=utcnow)

    @field_validator("closed_at")
    @classmethod
    def validate_closed_at(cls, v):
        return as_utc(v)


class ArticleCreated(TicketEventBase):
    kind: Literal[EventKind.ARTICLE_CREATED] = EventKind.ARTICLE_CREATED
    article: TicketArticle
    # Webhook flags arrive untyped; strings or numbers are rejected
    is_split: StrictBool = False
    split_from_ticket_id: Optional[StrictInt] = None
    split_from_article_id: Optional[StrictInt] = None


TicketEvent = Annotated[
    Union[TicketCreated, TicketUpdated, TicketClosed, ArticleCreated],
    Field(discriminator="kind"),
]


def empty_article(ticket: Ticket) -> TicketArticle:
    """Placeholder article for tickets that arrive without one"""
    return TicketArticle(ticket_id=ticket.id)
