"""
RSVP service: guest responses, summaries and confirmation emails
"""

import logging
import secrets
import string
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.schemas.rsvp import RSVP_STATUSES, RSVPSubmit
from app.services.email_service import EMAIL_TYPE_RSVP_CONFIRMATION, EmailService
from app.services.event_service import EventService
from app.services.repositories import now_iso, wedding_collection
from app.services.wedding_service import WeddingService
from app.utils.responses import validation_error

logger = logging.getLogger(__name__)

_GUEST_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_guest_id() -> str:
    """Anonymous guest id: guest_<epoch ms>_<9 random chars>"""
    suffix = "".join(secrets.choice(_GUEST_ID_ALPHABET) for _ in range(9))
    return f"guest_{int(time.time() * 1000)}_{suffix}"


class RSVPService:
    """Service for guest RSVPs"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "rsvps")

    @staticmethod
    def _find_existing(db: Session, wedding_id: str, guest_id: str, event_id: Optional[str]) -> Optional[Dict[str, Any]]:
        for rsvp in RSVPService._repo(db, wedding_id).list(where={"guest_id": guest_id}):
            if rsvp.get("event_id") == event_id:
                return rsvp
        return None

    @staticmethod
    async def submit_rsvp(
        db: Session,
        wedding: Dict[str, Any],
        payload: RSVPSubmit,
        email_service: EmailService,
        event_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Record (or update) a guest's RSVP, then try to send a confirmation.

        The RSVP is written first; a failed confirmation email is logged and
        reported as ``email_sent=False`` without failing the request.
        """
        guest_name = payload.guest_name.strip()
        guest_email = payload.guest_email.strip()
        if not guest_name or not guest_email:
            raise validation_error("Please fill in your name and email")

        event = EventService.get_event(db, wedding["id"], event_id) if event_id else None

        guest_id = (payload.guest_id or "").strip() or generate_guest_id()
        now = now_iso()
        data = {
            "event_id": event_id,
            "status": payload.status,
            "guest_name": guest_name,
            "guest_email": guest_email,
            "phone_number": payload.phone_number.strip(),
            "plus_one": payload.plus_one,
            "guest_id": guest_id,
            "message": payload.message.strip(),
            "updated_at": now
        }

        repo = RSVPService._repo(db, wedding["id"])
        existing = RSVPService._find_existing(db, wedding["id"], guest_id, event_id)
        if existing:
            rsvp = repo.update(existing["id"], data)
        else:
            rsvp = repo.add({**data, "submitted_at": now})
        logger.info(f"RSVP {rsvp['id']} ({payload.status}) recorded for wedding {wedding['id']}")

        email_sent = await RSVPService.send_confirmation(
            email_service,
            wedding,
            guest_email,
            payload.status,
            event.get("name") if event else None
        )

        return {
            "rsvp": rsvp,
            "guest_id": guest_id,
            "updated": existing is not None,
            "email_sent": email_sent
        }

    @staticmethod
    async def send_confirmation(
        email_service: EmailService,
        wedding: Dict[str, Any],
        guest_email: str,
        status: str,
        event_name: Optional[str] = None
    ) -> bool:
        """Best-effort RSVP confirmation email"""
        if not email_service.resend_configured:
            logger.info("Email not configured, skipping RSVP confirmation")
            return False

        try:
            result = await email_service.send_update_emails(
                recipient_emails=[guest_email],
                wedding_name=WeddingService.couple_names(wedding),
                update_message=status,
                event_name=event_name,
                website_url=WeddingService.website_url(wedding),
                email_type=EMAIL_TYPE_RSVP_CONFIRMATION
            )
            return result["sent"] > 0
        except Exception as e:
            logger.error(f"Error sending RSVP confirmation email: {e}")
            return False

    @staticmethod
    def get_guest_rsvp(db: Session, wedding_id: str, guest_id: str, event_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Previous response of an anonymous guest, if any"""
        if not guest_id:
            return None
        return RSVPService._find_existing(db, wedding_id, guest_id, event_id)

    @staticmethod
    def list_rsvps(db: Session, wedding_id: str, event_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """RSVPs newest first, optionally for a single event"""
        where = {"event_id": event_id} if event_id else None
        return RSVPService._repo(db, wedding_id).list(where=where, order_by="submitted_at", descending=True)

    @staticmethod
    def rsvp_summary(rsvps: List[Dict[str, Any]]) -> Dict[str, int]:
        summary = {status: 0 for status in RSVP_STATUSES}
        plus_ones = 0
        for rsvp in rsvps:
            status = rsvp.get("status")
            if status in summary:
                summary[status] += 1
            if status == "yes" and rsvp.get("plus_one"):
                plus_ones += 1
        summary["total"] = len(rsvps)
        summary["plus_ones"] = plus_ones
        summary["headcount"] = summary["yes"] + plus_ones
        return summary

    @staticmethod
    def list_contacts(db: Session, wedding_id: str) -> List[Dict[str, Any]]:
        """Guests who RSVPed, unique by email, with their notes"""
        contacts: Dict[str, Dict[str, Any]] = {}
        for rsvp in RSVPService._repo(db, wedding_id).list(order_by="submitted_at"):
            email = rsvp.get("guest_email")
            if not email:
                continue
            if email not in contacts:
                contacts[email] = {
                    "email": email,
                    "name": rsvp.get("guest_name") or "Guest",
                    "rsvp_count": 0,
                    "messages": []
                }
            contacts[email]["rsvp_count"] += 1
            if (rsvp.get("message") or "").strip():
                contacts[email]["messages"].append({
                    "message": rsvp["message"],
                    "status": rsvp.get("status"),
                    "event_id": rsvp.get("event_id")
                })
        return list(contacts.values())
