"""
Resource sub-clients for the Zammad REST API
"""
from typing import Dict, List, Any, Optional, Type, TypeVar, Union
from pydantic import BaseModel

from zammad_sdk.schemas import (
    Ticket,
    TicketArticle,
    User,
    Group,
    Organization,
    Role,
    Permission,
    Tag,
    LinksResponse,
    TicketState,
    TicketPriority,
    UserAccessToken,
    UserAccessTokenList,
    TicketCreateRequest,
    TicketUpdateRequest,
    TicketArticleCreateRequest,
    UserCreateRequest,
    UserUpdateRequest,
    UserAccessTokenCreateRequest,
)

M = TypeVar("M", bound=BaseModel)
Payload = Union[BaseModel, Dict[str, Any]]


def _require_id(value: Optional[int], name: str) -> int:
    if value is None or value <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return value


def _require_text(value: Optional[str], name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{name} cannot be empty")
    return value


def _paging(page: int, per_page: int) -> Dict[str, Any]:
    if page <= 0:
        raise ValueError("page must be greater than 0")
    if per_page <= 0:
        raise ValueError("per_page must be greater than 0")
    return {"page": page, "per_page": per_page}


def _flag(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "true" if value else "false"


def _payload(request: Payload) -> Dict[str, Any]:
    if request is None:
        raise ValueError("request is required")
    if hasattr(request, "to_payload"):
        return request.to_payload()
    if isinstance(request, BaseModel):
        return request.model_dump(exclude_none=True, by_alias=True, mode="json")
    return dict(request)


def _parse(model: Type[M], data: Any) -> M:
    return model.model_validate(data)


def _parse_list(model: Type[M], data: Any) -> List[M]:
    return [model.model_validate(item) for item in (data or [])]


def _parse_search(model: Type[M], data: Any, result_key: str, asset_key: str) -> List[M]:
    """Search answers either a plain list or ``{<key>: [ids], "assets": {...}}``"""
    if isinstance(data, list):
        return _parse_list(model, data)
    if not isinstance(data, dict):
        return []
    assets = data.get("assets", {}).get(asset_key, {})
    results = []
    for object_id in data.get(result_key, []):
        item = assets.get(str(object_id))
        if item is not None:
            results.append(model.model_validate(item))
    return results


class ResourceClient:
    """Base class for sub-clients sharing the parent client's transport"""

    def __init__(self, client):
        self._client = client

    def _send(self, method: str, path: str, **kwargs) -> Any:
        return self._client.send(method, path, **kwargs)


class CrudResource(ResourceClient):
    """Standard list/get/create/update/delete/search resource"""

    path: str = ""
    model: Type[BaseModel] = BaseModel
    label: str = "Object"
    search_key: Optional[str] = None
    asset_key: Optional[str] = None
    paged: bool = True

    def list(self, page: int = 1, per_page: int = 50, expand: Optional[bool] = None) -> List[Any]:
        params = _paging(page, per_page) if self.paged else {}
        params["expand"] = _flag(expand)
        return _parse_list(self.model, self._send("GET", self.path, params=params))

    def get(self, object_id: int, expand: Optional[bool] = None) -> Any:
        _require_id(object_id, f"{self.label} ID")
        data = self._send("GET", f"{self.path}/{object_id}", params={"expand": _flag(expand)})
        return _parse(self.model, data)

    def create(self, request: Payload) -> Any:
        return _parse(self.model, self._send("POST", self.path, json=_payload(request)))

    def update(self, object_id: int, request: Payload) -> Any:
        _require_id(object_id, f"{self.label} ID")
        return _parse(self.model, self._send("PUT", f"{self.path}/{object_id}", json=_payload(request)))

    def delete(self, object_id: int) -> None:
        _require_id(object_id, f"{self.label} ID")
        self._send("DELETE", f"{self.path}/{object_id}")

    def search(self, query: str, limit: Optional[int] = None, expand: Optional[bool] = None) -> List[Any]:
        if self.search_key is None:
            raise NotImplementedError(f"{self.label} search is not supported")
        _require_text(query, "query")
        data = self._send(
            "GET",
            f"{self.path}/search",
            params={"query": query, "limit": limit, "expand": _flag(expand)},
        )
        return _parse_search(self.model, data, self.search_key, self.asset_key)


class TicketsClient(ResourceClient):
    """Ticket operations"""

    def get_tickets(self, page: int = 1, per_page: int = 50, expand: Optional[bool] = None) -> List[Ticket]:
        params = _paging(page, per_page)
        params["expand"] = _flag(expand)
        return _parse_list(Ticket, self._send("GET", "/tickets", params=params))

    def get_ticket(self, ticket_id: int, expand: Optional[bool] = None) -> Ticket:
        _require_id(ticket_id, "Ticket ID")
        return _parse(Ticket, self._send("GET", f"/tickets/{ticket_id}", params={"expand": _flag(expand)}))

    def create_ticket(self, request: Union[TicketCreateRequest, Dict[str, Any]], on_behalf_of: Optional[str] = None) -> Ticket:
        payload = _payload(request)
        _require_text(payload.get("title"), "title")
        if not payload.get("article"):
            raise ValueError("article is required")
        return _parse(Ticket, self._send("POST", "/tickets", json=payload, on_behalf_of=on_behalf_of))

    def update_ticket(
        self,
        ticket_id: int,
        request: Union[TicketUpdateRequest, Dict[str, Any]],
        on_behalf_of: Optional[str] = None,
    ) -> Ticket:
        _require_id(ticket_id, "Ticket ID")
        data = self._send("PUT", f"/tickets/{ticket_id}", json=_payload(request), on_behalf_of=on_behalf_of)
        return _parse(Ticket, data)

    def delete_ticket(self, ticket_id: int) -> None:
        _require_id(ticket_id, "Ticket ID")
        self._send("DELETE", f"/tickets/{ticket_id}")

    def search_tickets(self, query: str, limit: Optional[int] = None, expand: Optional[bool] = None) -> List[Ticket]:
        _require_text(query, "query")
        data = self._send("GET", "/tickets/search", params={"query": query, "limit": limit, "expand": _flag(expand)})
        return _parse_search(Ticket, data, "tickets", "Ticket")

    def get_ticket_articles(self, ticket_id: int) -> List[TicketArticle]:
        _require_id(ticket_id, "Ticket ID")
        return _parse_list(TicketArticle, self._send("GET", f"/ticket_articles/by_ticket/{ticket_id}"))


class TicketArticlesClient(ResourceClient):
    """Ticket article operations"""

    def get_articles_by_ticket(self, ticket_id: int) -> List[TicketArticle]:
        _require_id(ticket_id, "Ticket ID")
        return _parse_list(TicketArticle, self._send("GET", f"/ticket_articles/by_ticket/{ticket_id}"))

    def get_article(self, article_id: int) -> TicketArticle:
        _require_id(article_id, "Article ID")
        return _parse(TicketArticle, self._send("GET", f"/ticket_articles/{article_id}"))

    def create_article(self, request: Union[TicketArticleCreateRequest, Dict[str, Any]]) -> TicketArticle:
        payload = _payload(request)
        _require_id(payload.get("ticket_id"), "Ticket ID")
        _require_text(payload.get("body"), "body")
        return _parse(TicketArticle, self._send("POST", "/ticket_articles", json=payload))

    def download_attachment(self, ticket_id: int, article_id: int, attachment_id: int) -> bytes:
        _require_id(ticket_id, "Ticket ID")
        _require_id(article_id, "Article ID")
        _require_id(attachment_id, "Attachment ID")
        return self._client.download(f"/ticket_attachment/{ticket_id}/{article_id}/{attachment_id}")


class UsersClient(ResourceClient):
    """User operations"""

    def get_current_user(self) -> User:
        return _parse(User, self._send("GET", "/users/me"))

    def get_users(self, page: int = 1, per_page: int = 50, expand: Optional[bool] = None) -> List[User]:
        params = _paging(page, per_page)
        params["expand"] = _flag(expand)
        return _parse_list(User, self._send("GET", "/users", params=params))

    def get_user(self, user_id: int, expand: Optional[bool] = None) -> User:
        _require_id(user_id, "User ID")
        return _parse(User, self._send("GET", f"/users/{user_id}", params={"expand": _flag(expand)}))

    def create_user(self, request: Union[UserCreateRequest, Dict[str, Any]]) -> User:
        return _parse(User, self._send("POST", "/users", json=_payload(request)))

    def update_user(self, user_id: int, request: Union[UserUpdateRequest, Dict[str, Any]]) -> User:
        _require_id(user_id, "User ID")
        return _parse(User, self._send("PUT", f"/users/{user_id}", json=_payload(request)))

    def delete_user(self, user_id: int) -> None:
        _require_id(user_id, "User ID")
        self._send("DELETE", f"/users/{user_id}")

    def search_users(self, query: str, limit: Optional[int] = None, expand: Optional[bool] = None) -> List[User]:
        _require_text(query, "query")
        data = self._send("GET", "/users/search", params={"query": query, "limit": limit, "expand": _flag(expand)})
        return _parse_search(User, data, "users", "User")


class GroupsClient(CrudResource):
    path = "/groups"
    model = Group
    label = "Group"
    search_key = "groups"
    asset_key = "Group"


class OrganizationsClient(CrudResource):
    path = "/organizations"
    model = Organization
    label = "Organization"
    search_key = "organizations"
    asset_key = "Organization"


class RolesClient(CrudResource):
    path = "/roles"
    model = Role
    label = "Role"
    search_key = "roles"
    asset_key = "Role"


class TicketStatesClient(CrudResource):
    path = "/ticket_states"
    model = TicketState
    label = "Ticket state"
    paged = False


class TicketPrioritiesClient(CrudResource):
    path = "/ticket_priorities"
    model = TicketPriority
    label = "Ticket priority"
    paged = False


class PermissionsClient(ResourceClient):
    def get_permissions(self) -> List[Permission]:
        return _parse_list(Permission, self._send("GET", "/permissions"))


class TagsClient(ResourceClient):
    """Object tags and the administrative tag list"""

    def get_tags(self, object_type: str, object_id: int) -> List[str]:
        _require_text(object_type, "object type")
        _require_id(object_id, "Object ID")
        data = self._send("GET", "/tags", params={"object": object_type, "o_id": object_id})
        # The endpoint answers {"tags": [...]}
        if isinstance(data, dict):
            return list(data.get("tags", []))
        return list(data or [])

    def _tag_payload(self, item: str, object_type: str, object_id: int) -> Dict[str, Any]:
        _require_text(item, "item")
        _require_text(object_type, "object type")
        _require_id(object_id, "Object ID")
        return {"item": item, "object": object_type, "o_id": object_id}

    def add_tag(self, item: str, object_type: str, object_id: int) -> None:
        self._send("POST", "/tags/add", json=self._tag_payload(item, object_type, object_id))

    def remove_tag(self, item: str, object_type: str, object_id: int) -> None:
        self._send("DELETE", "/tags/remove", json=self._tag_payload(item, object_type, object_id))

    def get_all_tags(self) -> List[Tag]:
        return _parse_list(Tag, self._send("GET", "/tag_list"))

    def create_tag(self, name: str) -> Optional[Tag]:
        _require_text(name, "name")
        data = self._send("POST", "/tag_list", json={"name": name})
        return _parse(Tag, data) if data else None

    def update_tag(self, tag_id: int, name: str) -> Optional[Tag]:
        _require_id(tag_id, "Tag ID")
        _require_text(name, "name")
        data = self._send("PUT", f"/tag_list/{tag_id}", json={"name": name})
        return _parse(Tag, data) if data else None

    def delete_tag(self, tag_id: int) -> None:
        _require_id(tag_id, "Tag ID")
        self._send("DELETE", f"/tag_list/{tag_id}")


class LinksClient(ResourceClient):
    """Links between tickets"""

    def get_links(self, link_object: str, link_object_value: int) -> LinksResponse:
        _require_text(link_object, "link object")
        _require_id(link_object_value, "Link object value")
        data = self._send(
            "GET", "/links", params={"link_object": link_object, "link_object_value": link_object_value}
        )
        return _parse(LinksResponse, data or {})

    def _link_payload(self, link_type: str, source_ticket_number: str, target_ticket_id: int) -> Dict[str, Any]:
        _require_text(link_type, "link type")
        _require_text(source_ticket_number, "source ticket number")
        _require_id(target_ticket_id, "Target ticket ID")
        return {
            "link_type": link_type,
            "link_object_source": "Ticket",
            "link_object_source_number": source_ticket_number,
            "link_object_target": "Ticket",
            "link_object_target_value": target_ticket_id,
        }

    def add_link(self, link_type: str, source_ticket_number: str, target_ticket_id: int) -> None:
        self._send("POST", "/links/add", json=self._link_payload(link_type, source_ticket_number, target_ticket_id))

    def remove_link(self, link_type: str, source_ticket_number: str, target_ticket_id: int) -> None:
        self._send(
            "DELETE", "/links/remove", json=self._link_payload(link_type, source_ticket_number, target_ticket_id)
        )


class UserAccessTokensClient(ResourceClient):
    """Personal access tokens of the authenticated user"""

    def get_tokens(self) -> UserAccessTokenList:
        return _parse(UserAccessTokenList, self._send("GET", "/user_access_token") or {})

    def create_token(self, request: Union[UserAccessTokenCreateRequest, Dict[str, Any]]) -> UserAccessToken:
        payload = _payload(request)
        _require_text(payload.get("name"), "name")
        return _parse(UserAccessToken, self._send("POST", "/user_access_token", json=payload))

    def delete_token(self, token_id: int) -> None:
        _require_id(token_id, "Token ID")
        self._send("DELETE", f"/user_access_token/{token_id}")
