"""
Ticket, article, state and priority schemas
"""
from typing import Dict, List, Any, Optional
from datetime import datetime
from pydantic import Field, field_validator

from .base import ZammadModel, ZammadRequest


class Ticket(ZammadModel):
    """Zammad ticket"""
    id: int
    number: Optional[str] = None
    title: Optional[str] = None
    group_id: Optional[int] = None
    state_id: Optional[int] = None
    priority_id: Optional[int] = None
    organization_id: Optional[int] = None
    customer_id: Optional[int] = None
    owner_id: Optional[int] = None
    note: Optional[str] = None
    type: Optional[str] = None
    time_unit: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    first_response_at: Optional[datetime] = None
    first_response_escalation_at: Optional[datetime] = None
    close_at: Optional[datetime] = None
    close_escalation_at: Optional[datetime] = None
    update_escalation_at: Optional[datetime] = None
    last_contact_at: Optional[datetime] = None
    last_contact_agent_at: Optional[datetime] = None
    last_contact_customer_at: Optional[datetime] = None
    last_owner_update_at: Optional[datetime] = None
    escalation_at: Optional[datetime] = None
    pending_time: Optional[datetime] = None
    create_article_type_id: Optional[int] = None
    create_article_sender_id: Optional[int] = None
    article_count: int = 0
    created_by_id: Optional[int] = None
    updated_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ArticleAttachment(ZammadModel):
    """Attachment metadata on a ticket article"""
    id: Optional[int] = None
    filename: Optional[str] = None
    size: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None


class TicketArticle(ZammadModel):
    """Zammad ticket article (message, note, email, ...)"""
    id: Optional[int] = None
    ticket_id: Optional[int] = None
    type_id: Optional[int] = None
    type: Optional[str] = None
    sender_id: Optional[int] = None
    sender: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    cc: Optional[str] = None
    reply_to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    content_type: Optional[str] = None
    internal: bool = False
    preferences: Optional[Dict[str, Any]] = None
    attachments: List[ArticleAttachment] = Field(default_factory=list)
    origin_by_id: Optional[int] = None
    created_by_id: Optional[int] = None
    updated_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TicketState(ZammadModel):
    """Zammad ticket state"""
    id: int
    name: Optional[str] = None
    state_type_id: Optional[int] = None
    next_state_id: Optional[int] = None
    ignore_escalation: Optional[bool] = None
    default_create: Optional[bool] = None
    default_follow_up: Optional[bool] = None
    note: Optional[str] = None
    active: bool = True


class TicketPriority(ZammadModel):
    """Zammad ticket priority"""
    id: int
    name: Optional[str] = None
    default_create: Optional[bool] = None
    ui_icon: Optional[str] = None
    ui_color: Optional[str] = None
    note: Optional[str] = None
    active: bool = True


# Request payloads

class TicketArticleCreateRequest(ZammadRequest):
    """Article payload, standalone or nested in a ticket create request"""
    ticket_id: Optional[int] = None
    subject: Optional[str] = None
    body: str
    type: str = "note"
    sender: Optional[str] = None
    content_type: Optional[str] = None
    internal: bool = False
    time_unit: Optional[str] = None
    to: Optional[str] = None
    cc: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    reply_to: Optional[str] = None
    origin_by_id: Optional[int] = None
    attachments: Optional[List[Dict[str, Any]]] = None

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        if not v.strip():
            raise ValueError("Body is required")
        return v


class TicketCreateRequest(ZammadRequest):
    """Ticket creation payload"""
    title: str
    group: Optional[str] = None
    group_id: Optional[int] = None
    customer: Optional[str] = None
    customer_id: Optional[int] = None
    state: Optional[str] = None
    state_id: Optional[int] = None
    priority: Optional[str] = None
    priority_id: Optional[int] = None
    owner_id: Optional[int] = None
    organization_id: Optional[int] = None
    note: Optional[str] = None
    article: TicketArticleCreateRequest

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class TicketUpdateRequest(ZammadRequest):
    """Ticket update payload; only set fields are sent"""
    title: Optional[str] = None
    group: Optional[str] = None
    group_id: Optional[int] = None
    state: Optional[str] = None
    state_id: Optional[int] = None
    priority: Optional[str] = None
    priority_id: Optional[int] = None
    customer: Optional[str] = None
    customer_id: Optional[int] = None
    organization: Optional[str] = None
    organization_id: Optional[int] = None
    owner: Optional[str] = None
    owner_id: Optional[int] = None
    note: Optional[str] = None
    type: Optional[str] = None
    pending_time: Optional[datetime] = None
    article: Optional[TicketArticleCreateRequest] = None
