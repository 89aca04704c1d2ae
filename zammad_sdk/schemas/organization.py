"""
Organization, group, role and permission schemas
"""
from typing import Dict, List, Any, Optional
from datetime import datetime
from pydantic import Field

from .base import ZammadModel


class Group(ZammadModel):
    """Zammad group"""
    id: int
    name: Optional[str] = None
    signature_id: Optional[int] = None
    email_address_id: Optional[int] = None
    assignment_timeout: Optional[int] = None
    follow_up_possible: Optional[str] = None
    follow_up_assignment: Optional[bool] = None
    active: bool = True
    note: Optional[str] = None
    user_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Organization(ZammadModel):
    """Zammad organization"""
    id: int
    name: Optional[str] = None
    shared: Optional[bool] = None
    domain: Optional[str] = None
    domain_assignment: Optional[bool] = None
    active: bool = True
    note: Optional[str] = None
    vip: bool = False
    member_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Role(ZammadModel):
    """Zammad role"""
    id: int
    name: Optional[str] = None
    note: Optional[str] = None
    active: bool = True
    default_at_signup: Optional[bool] = None
    preferences: Optional[Dict[str, Any]] = None
    permission_ids: List[int] = Field(default_factory=list)
    group_ids: Optional[Dict[str, List[str]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Permission(ZammadModel):
    """Zammad permission"""
    id: int
    name: Optional[str] = None
    note: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    active: bool = True
