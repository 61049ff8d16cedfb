"""
Wedding-related Pydantic schemas
"""

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr

THEMES = ["classic", "modern", "rustic", "beach", "garden", "minimal"]
DEFAULT_THEME = "modern"

class WeddingCreate(BaseModel):
    """Schema for creating a wedding"""
    partner1_name: str
    partner2_name: str
    wedding_date: date
    city: str
    theme: str = DEFAULT_THEME
    slug: str = ""

class WeddingUpdate(BaseModel):
    """Schema for the wedding settings form"""
    partner1_name: Optional[str] = None
    partner2_name: Optional[str] = None
    wedding_date: Optional[date] = None
    city: Optional[str] = None
    theme: Optional[str] = None
    story: Optional[str] = None

class CollaboratorCreate(BaseModel):
    """Schema for inviting a collaborator"""
    email: EmailStr
    name: Optional[str] = None
    role: Literal["viewer", "admin"] = "viewer"

class CollaboratorRoleUpdate(BaseModel):
    role: Literal["viewer", "admin"]
