"""
Zammad integration module
"""

from .client import ZammadClient
from .resources import (
    TicketsClient,
    TicketArticlesClient,
    UsersClient,
    GroupsClient,
    OrganizationsClient,
    RolesClient,
    PermissionsClient,
    TagsClient,
    LinksClient,
    TicketStatesClient,
    TicketPrioritiesClient,
    UserAccessTokensClient,
)

__all__ = [
    "ZammadClient",
    "TicketsClient",
    "TicketArticlesClient",
    "UsersClient",
    "GroupsClient",
    "OrganizationsClient",
    "RolesClient",
    "PermissionsClient",
    "TagsClient",
    "LinksClient",
    "TicketStatesClient",
    "TicketPrioritiesClient",
    "UserAccessTokensClient",
]
