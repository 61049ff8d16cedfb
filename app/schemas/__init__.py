"""
Pydantic schemas package
"""

from .common import *
from .wedding import *
from .event import *
from .guest import *
from .rsvp import *
from .content import *
from .invitation import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "WeddingCreate",
    "WeddingUpdate",
    "CollaboratorCreate",
    "CollaboratorRoleUpdate",
    "EventCreate",
    "EventUpdate",
    "GuestCreate",
    "GuestUpdate",
    "QuickAddRequest",
    "ImportRow",
    "ImportCommitRequest",
    "RSVPSubmit",
    "ReactionRequest",
    "MemoryCreate",
    "UpdateCreate",
    "InviteRequest",
    "BulkInviteRequest",
    "UpdateEmailRequest",
    "InviteEmailRequest"
]
