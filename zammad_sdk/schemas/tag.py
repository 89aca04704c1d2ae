"""
Tag and link schemas
"""
from typing import Dict, List, Any, Optional
from pydantic import Field

from .base import ZammadModel


class Tag(ZammadModel):
    """Entry of the administrative tag list"""
    id: int
    name: str
    count: Optional[int] = None


class Link(ZammadModel):
    """Link between two objects"""
    link_type: str
    link_object: str
    link_object_value: int


class LinksResponse(ZammadModel):
    """Response of the links endpoint"""
    links: List[Link] = Field(default_factory=list)
    assets: Dict[str, Any] = Field(default_factory=dict)
