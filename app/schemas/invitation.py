"""
Invitation and email handler schemas
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

class InviteRequest(BaseModel):
    """Single invitation by email and/or SMS"""
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    send_email: bool = True
    send_sms: bool = False

class BulkInviteRequest(BaseModel):
    """One email address or phone number per line"""
    entries: str

class UpdateEmailRequest(BaseModel):
    """Body of the update / RSVP confirmation email handler"""
    model_config = ConfigDict(populate_by_name=True)

    recipient_emails: Optional[Any] = Field(None, alias="recipientEmails")
    wedding_name: Optional[str] = Field(None, alias="weddingName")
    update_message: Optional[str] = Field(None, alias="updateMessage")
    event_name: Optional[str] = Field(None, alias="eventName")
    time_update: Optional[str] = Field(None, alias="timeUpdate")
    map_link: Optional[str] = Field(None, alias="mapLink")
    website_url: Optional[str] = Field(None, alias="websiteUrl")
    email_type: Optional[str] = Field(None, alias="emailType")

class InviteEmailRequest(BaseModel):
    """Body of the invitation email handler"""
    model_config = ConfigDict(populate_by_name=True)

    to_email: Optional[str] = Field(None, alias="toEmail")
    to_name: Optional[str] = Field(None, alias="toName")
    couple_names: Optional[str] = Field(None, alias="coupleNames")
    wedding_date: Optional[str] = Field(None, alias="weddingDate")
    wedding_city: Optional[str] = Field(None, alias="weddingCity")
    invite_url: Optional[str] = Field(None, alias="inviteUrl")
    website_url: Optional[str] = Field(None, alias="websiteUrl")
    rsvp_url: Optional[str] = Field(None, alias="rsvpUrl")
    reply_to: Optional[str] = Field(None, alias="replyTo")
