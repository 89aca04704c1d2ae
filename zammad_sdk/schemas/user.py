"""
User and access token schemas
"""
from typing import Dict, List, Any, Optional
from datetime import datetime
from pydantic import Field

from .base import ZammadModel, ZammadRequest


class User(ZammadModel):
    """Zammad user"""
    id: int
    login: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    web: Optional[str] = None
    organization_id: Optional[int] = None
    organization: Optional[str] = None
    role_ids: List[int] = Field(default_factory=list)
    group_ids: Optional[Dict[str, List[str]]] = None
    active: bool = True
    verified: bool = False
    vip: bool = False
    note: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    out_of_office: bool = False
    last_login: Optional[datetime] = None
    created_by_id: Optional[int] = None
    updated_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.firstname, self.lastname) if part)
        return full_name or self.login or self.email or f"user#{self.id}"


class UserAccessToken(ZammadModel):
    """Personal access token; `token` is only present right after creation"""
    id: Optional[int] = None
    name: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
    preferences: Optional[Dict[str, Any]] = None
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    token: Optional[str] = None


class UserAccessTokenList(ZammadModel):
    """Response of the access token listing endpoint"""
    tokens: List[UserAccessToken] = Field(default_factory=list)
    permissions: List[Dict[str, Any]] = Field(default_factory=list)


# Request payloads

class UserCreateRequest(ZammadRequest):
    """User creation payload"""
    login: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    web: Optional[str] = None
    organization_id: Optional[int] = None
    role_ids: Optional[List[int]] = None
    group_ids: Optional[Dict[str, List[str]]] = None
    active: Optional[bool] = None
    verified: Optional[bool] = None
    vip: Optional[bool] = None
    note: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None


class UserUpdateRequest(UserCreateRequest):
    """User update payload; only set fields are sent"""
    pass


class UserAccessTokenCreateRequest(ZammadRequest):
    """Access token creation payload"""
    name: str
    permissions: List[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None
