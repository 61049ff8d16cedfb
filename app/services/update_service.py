"""
Live updates service with real-time broadcasting and email fan-out
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from app.api.ws import WebSocketManager
from app.schemas.content import UpdateCreate
from app.services.email_service import EmailService
from app.services.event_service import EventService
from app.services.guest_service import GuestService, clean_optional
from app.services.repositories import now_iso, wedding_collection
from app.services.wedding_service import WeddingService
from app.utils.responses import not_found_error, validation_error

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500
MAX_TIME_UPDATE_LENGTH = 100

ENTIRE_WEDDING = "Entire Wedding"
UNKNOWN_EVENT = "Unknown Event"


def event_label(event_id: Optional[str], events: List[Dict[str, Any]]) -> str:
    if not event_id:
        return ENTIRE_WEDDING
    for event in events:
        if event["id"] == event_id:
            return event.get("name") or UNKNOWN_EVENT
    return UNKNOWN_EVENT


def time_ago(timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    if not timestamp:
        return "Just now"
    now = now or datetime.utcnow()
    diff_seconds = (now - datetime.fromisoformat(timestamp)).total_seconds()
    minutes = int(diff_seconds // 60)
    hours = int(diff_seconds // 3600)
    days = int(diff_seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min{'s' if minutes != 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    return f"{days} day{'s' if days != 1 else ''} ago"


def share_text(update: Dict[str, Any], website_url: Optional[str] = None) -> str:
    """Plain-text rendering for copy/paste and messaging apps"""
    text = update.get("message") or ""
    if update.get("time_update"):
        text += f"\n\n⏰ Time: {update['time_update']}"
    if update.get("map_link"):
        text += f"\n\n📍 Location: {update['map_link']}"
    if website_url:
        text += f"\n\nView full details: {website_url}"
    return text


def whatsapp_url(update: Dict[str, Any], website_url: str) -> str:
    return f"https://wa.me/?text={quote(share_text(update, website_url), safe='')}"


class UpdateService:
    """Service for live updates posted by the couple"""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "updates")

    async def create_update(
        self,
        db: Session,
        wedding: Dict[str, Any],
        data: UpdateCreate,
        email_service: EmailService
    ) -> Dict[str, Any]:
        """Post an update, push it to live listeners and email opted-in guests"""
        message = data.message.strip()
        if not message:
            raise validation_error("Please enter a message")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise validation_error(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")
        time_update = clean_optional(data.time_update)
        if time_update and len(time_update) > MAX_TIME_UPDATE_LENGTH:
            raise validation_error(f"Time update must be at most {MAX_TIME_UPDATE_LENGTH} characters")

        event_id = clean_optional(data.event_id)
        event = EventService.get_event(db, wedding["id"], event_id) if event_id else None

        update = self._repo(db, wedding["id"]).add({
            "message": message,
            "event_id": event_id,
            "map_link": clean_optional(data.map_link),
            "time_update": time_update,
            "created_at": now_iso()
        })
        logger.info(f"Posted update {update['id']} for wedding {wedding['id']}")

        await self.broadcast(wedding, "update_posted", {"update": update})

        emails = None
        if data.notify_guests:
            emails = await self.notify_guests(
                db, wedding, update, event.get("name") if event else None, email_service
            )

        return {"update": update, "emails": emails}

    async def notify_guests(
        self,
        db: Session,
        wedding: Dict[str, Any],
        update: Dict[str, Any],
        event_name: Optional[str],
        email_service: EmailService
    ) -> Optional[Dict[str, Any]]:
        """Best-effort email to consenting guests; failures are logged only"""
        recipients = GuestService.consent_recipients(db, wedding["id"], update.get("event_id"))
        if not recipients:
            return None
        if not email_service.resend_configured:
            logger.info("Email not configured, skipping update notifications")
            return None

        try:
            return await email_service.send_update_emails(
                recipient_emails=recipients,
                wedding_name=WeddingService.couple_names(wedding),
                update_message=update["message"],
                event_name=event_name,
                time_update=update.get("time_update"),
                map_link=update.get("map_link"),
                website_url=WeddingService.website_url(wedding)
            )
        except Exception as e:
            logger.error(f"Error sending update emails: {e}")
            return None

    async def delete_update(self, db: Session, wedding: Dict[str, Any], update_id: str) -> None:
        if not self._repo(db, wedding["id"]).delete(update_id):
            raise not_found_error("Update")
        await self.broadcast(wedding, "update_deleted", {"update_id": update_id})

    async def broadcast(self, wedding: Dict[str, Any], message_type: str, payload: Dict[str, Any]) -> None:
        message = {
            "type": message_type,
            "timestamp": datetime.utcnow().isoformat(),
            **payload
        }
        try:
            await self.websocket_manager.broadcast_to_wedding(wedding["slug"], message)
        except Exception as e:
            logger.error(f"Error broadcasting {message_type}: {e}")

    @staticmethod
    def list_updates(
        db: Session,
        wedding_id: str,
        event_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Updates newest first, each with its event label and age"""
        where = {"event_id": event_id} if event_id else None
        updates = UpdateService._repo(db, wedding_id).list(where=where, order_by="created_at", descending=True)
        events = EventService.list_events(db, wedding_id)
        for update in updates:
            update["event_label"] = event_label(update.get("event_id"), events)
            update["time_ago"] = time_ago(update.get("created_at"), now)
        return updates
