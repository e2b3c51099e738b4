"""
Common Response Schemas
"""
from typing import Optional, Any, List
from pydantic import BaseModel


class APIResponse(BaseModel):
    success: bool = True
    message: str = "OK"
    data: Optional[Any] = None
    errors: Optional[List[str]] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    locations: int
    pack_slots: int
