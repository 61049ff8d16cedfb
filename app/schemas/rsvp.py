"""
RSVP Pydantic schemas
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field

RSVP_STATUSES = ("yes", "maybe", "no")

class RSVPSubmit(BaseModel):
    """RSVP form submitted by a guest"""
    status: Literal["yes", "maybe", "no"]
    guest_name: str
    guest_email: str
    phone_number: str = ""
    plus_one: bool = False
    message: str = Field("", max_length=200)
    guest_id: Optional[str] = None
