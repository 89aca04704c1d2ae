"""
Base schemas shared by all Zammad API objects
"""
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class ZammadModel(BaseModel):
    """Base for API objects; unknown server fields are kept as extras"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ZammadRequest(BaseModel):
    """Base for request payloads"""
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, by_alias=True, mode="json")
