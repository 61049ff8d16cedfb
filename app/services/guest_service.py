"""
Guest list service
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.schemas.guest import GuestCreate, GuestUpdate
from app.services.event_service import EventService
from app.services.repositories import now_iso, wedding_collection
from app.utils.responses import not_found_error, validation_error

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim a contact field; blank becomes None"""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class GuestService:
    """Service for the guest list"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "guests")

    @staticmethod
    def classify_contact(contact: Optional[str]) -> Optional[str]:
        """Return "email", "phone" or None for a free-text contact"""
        contact = (contact or "").strip()
        if not contact:
            return None
        if "@" in contact:
            return "email"
        if PHONE_PATTERN.match(contact):
            return "phone"
        return None

    @staticmethod
    def list_guests(
        db: Session,
        wedding_id: str,
        search: Optional[str] = None,
        event_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Guests by name, filtered by a name/email search and an invited event"""
        guests = GuestService._repo(db, wedding_id).list()
        events = EventService.list_events(db, wedding_id)

        term = (search or "").strip().lower()
        if term:
            guests = [
                g for g in guests
                if term in (g.get("name") or "").lower() or term in (g.get("email") or "").lower()
            ]
        if event_id:
            guests = [g for g in guests if event_id in (g.get("events_invited_to") or [])]

        guests.sort(key=lambda g: (g.get("name") or "").lower())
        for guest in guests:
            guest["event_names"] = EventService.event_names(guest.get("events_invited_to"), events)
        return guests

    @staticmethod
    def get_guest(db: Session, wedding_id: str, guest_id: str) -> Dict[str, Any]:
        guest = GuestService._repo(db, wedding_id).get(guest_id)
        if not guest:
            raise not_found_error("Guest")
        return guest

    @staticmethod
    def create_guest(db: Session, wedding_id: str, data: GuestCreate) -> Dict[str, Any]:
        name = data.name.strip()
        if not name:
            raise validation_error("Guest name is required")

        now = now_iso()
        return GuestService._repo(db, wedding_id).add({
            "name": name,
            "email": clean_optional(data.email),
            "phone": clean_optional(data.phone),
            "events_invited_to": list(data.events_invited_to),
            "email_consent": data.email_consent,
            "created_at": now,
            "updated_at": now
        })

    @staticmethod
    def update_guest(db: Session, wedding_id: str, guest_id: str, data: GuestUpdate) -> Dict[str, Any]:
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates:
            updates["name"] = (updates["name"] or "").strip()
            if not updates["name"]:
                raise validation_error("Guest name is required")
        for field in ("email", "phone"):
            if field in updates:
                updates[field] = clean_optional(updates[field])
        if "events_invited_to" in updates and updates["events_invited_to"] is None:
            updates["events_invited_to"] = []
        if "email_consent" in updates and updates["email_consent"] is None:
            updates["email_consent"] = False
        updates["updated_at"] = now_iso()

        guest = GuestService._repo(db, wedding_id).update(guest_id, updates)
        if guest is None:
            raise not_found_error("Guest")
        return guest

    @staticmethod
    def delete_guest(db: Session, wedding_id: str, guest_id: str) -> None:
        if not GuestService._repo(db, wedding_id).delete(guest_id):
            raise not_found_error("Guest")

    @staticmethod
    def quick_add(db: Session, wedding_id: str, name: str, contact: str) -> Dict[str, Any]:
        """Add a guest from a name and a single email or phone"""
        contact = (contact or "").strip()
        kind = GuestService.classify_contact(contact)
        if contact and kind is None:
            raise validation_error("Contact must be an email address or phone number")

        data = GuestCreate(
            name=name,
            email=contact if kind == "email" else None,
            phone=contact if kind == "phone" else None
        )
        return GuestService.create_guest(db, wedding_id, data)

    @staticmethod
    def consent_recipients(db: Session, wedding_id: str, event_id: Optional[str] = None) -> List[str]:
        """Emails of guests who opted in to updates, deduplicated case-insensitively"""
        recipients = []
        seen = set()
        for guest in GuestService._repo(db, wedding_id).list():
            email = clean_optional(guest.get("email"))
            if not email or not guest.get("email_consent"):
                continue
            if event_id and event_id not in (guest.get("events_invited_to") or []):
                continue
            if email.lower() in seen:
                continue
            seen.add(email.lower())
            recipients.append(email)
        return recipients
