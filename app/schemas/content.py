"""
Schemas for guest-generated and posted content: gallery, memories, updates
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field

REACTION_KINDS = ("heart", "laugh", "cry")

class ReactionRequest(BaseModel):
    kind: Literal["heart", "laugh", "cry"]
    guest_id: str

class MemoryCreate(BaseModel):
    name: str = Field(..., max_length=50)
    message: str = Field(..., max_length=300)

class UpdateCreate(BaseModel):
    """Live update posted by the couple"""
    message: str = Field(..., max_length=500)
    event_id: Optional[str] = None
    map_link: Optional[str] = None
    time_update: Optional[str] = Field(None, max_length=100)
    notify_guests: bool = True
