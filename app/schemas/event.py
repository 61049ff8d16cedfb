"""
Event-related Pydantic schemas
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel

class FAQ(BaseModel):
    question: str
    answer: str = ""

class EventCreate(BaseModel):
    """Schema for creating an event"""
    name: str
    description: str = ""
    date: date
    time: str = ""
    location: str = ""
    location_address: str = ""
    dress_code: str = ""
    faqs: List[FAQ] = []

class EventUpdate(BaseModel):
    """Schema for updating an event"""
    name: Optional[str] = None
    description: Optional[str] = None
    date: Optional[date] = None
    time: Optional[str] = None
    location: Optional[str] = None
    location_address: Optional[str] = None
    dress_code: Optional[str] = None
    faqs: Optional[List[FAQ]] = None
