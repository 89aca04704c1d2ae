"""
Pydantic schemas for Zammad API objects and request payloads
"""

from .base import ZammadModel, ZammadRequest
from .ticket import (
    Ticket,
    TicketArticle,
    ArticleAttachment,
    TicketState,
    TicketPriority,
    TicketCreateRequest,
    TicketUpdateRequest,
    TicketArticleCreateRequest,
)
from .user import (
    User,
    UserAccessToken,
    UserAccessTokenList,
    UserCreateRequest,
    UserUpdateRequest,
    UserAccessTokenCreateRequest,
)
from .organization import Group, Organization, Role, Permission
from .tag import Tag, Link, LinksResponse

__all__ = [
    "ZammadModel",
    "ZammadRequest",
    "Ticket",
    "TicketArticle",
    "ArticleAttachment",
    "TicketState",
    "TicketPriority",
    "TicketCreateRequest",
    "TicketUpdateRequest",
    "TicketArticleCreateRequest",
    "User",
    "UserAccessToken",
    "UserAccessTokenList",
    "UserCreateRequest",
    "UserUpdateRequest",
    "UserAccessTokenCreateRequest",
    "Group",
    "Organization",
    "Role",
    "Permission",
    "Tag",
    "Link",
    "LinksResponse",
]
