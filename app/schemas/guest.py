"""
Guest-related Pydantic schemas
"""

from typing import List, Optional
from pydantic import BaseModel

class GuestCreate(BaseModel):
    """Schema for creating a guest"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    events_invited_to: List[str] = []
    email_consent: bool = False

class GuestUpdate(BaseModel):
    """Schema for updating a guest"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    events_invited_to: Optional[List[str]] = None
    email_consent: Optional[bool] = None

class QuickAddRequest(BaseModel):
    """Name plus one contact detail (email or phone)"""
    name: str
    contact: str = ""

class ImportRow(BaseModel):
    """One guest row from a CSV preview, possibly edited before commit"""
    row_number: int
    name: str = ""
    email: str = ""
    phone: str = ""
    events: str = ""
    email_consent: bool = False

class ImportCommitRequest(BaseModel):
    rows: List[ImportRow]
