"""
Invitation service: email (template service) and SMS invitations
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.email_service import EmailService, is_valid_email
from app.services.event_service import EventService
from app.services.guest_service import GuestService, clean_optional
from app.services.repositories import now_iso, wedding_collection
from app.services.wedding_service import WeddingService
from app.utils.responses import validation_error

logger = logging.getLogger(__name__)


def format_wedding_date(value: Optional[str]) -> str:
    """ISO date as e.g. "June 15, 2025" """
    if not value:
        return ""
    try:
        parsed = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


class InvitationService:
    """Service for sending and recording invitations"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "invitations")

    @staticmethod
    def invite_url(wedding: Dict[str, Any]) -> str:
        return f"{settings.BASE_URL}/invite/{wedding.get('slug')}"

    @staticmethod
    def rsvp_url(db: Session, wedding: Dict[str, Any]) -> str:
        """Deep link to the first event's RSVP form, else the website"""
        website_url = WeddingService.website_url(wedding)
        events = EventService.list_events(db, wedding["id"])
        if events:
            return f"{website_url}#event-{events[0]['id']}"
        return website_url

    @staticmethod
    def template_params(db: Session, wedding: Dict[str, Any], name: str, email: str) -> Dict[str, Any]:
        return {
            "to_name": name or email.split("@")[0],
            "to_email": email,
            "couple_names": WeddingService.couple_names(wedding),
            "wedding_date": format_wedding_date(wedding.get("wedding_date")),
            "wedding_city": wedding.get("city") or "",
            "invite_url": InvitationService.invite_url(wedding),
            "website_url": WeddingService.website_url(wedding),
            "rsvp_url": InvitationService.rsvp_url(db, wedding),
            "reply_to": wedding.get("owner_email") or "noreply@oneknot.app"
        }

    @staticmethod
    async def send_email_invite(
        db: Session,
        wedding: Dict[str, Any],
        name: str,
        email: str,
        email_service: EmailService
    ) -> bool:
        """Best-effort invitation email; never raises"""
        if not is_valid_email(email):
            logger.warning(f"Invalid email address for invitation: {email}")
            return False
        if not email_service.invite_configured:
            logger.warning("Email template service not configured. Skipping email send.")
            return False

        try:
            await email_service.send_invite(InvitationService.template_params(db, wedding, name, email))
            return True
        except Exception as e:
            logger.error(f"Email invitation to {email} failed: {e}")
            return False

    @staticmethod
    def send_sms_invite(wedding: Dict[str, Any], name: str, phone: str) -> bool:
        # No SMS provider is wired up; the message is logged only
        message = (
            f"You're invited to {WeddingService.couple_names(wedding)}'s wedding! "
            f"{InvitationService.invite_url(wedding)}"
        )
        logger.info(f"SMS invitation for {name or phone} to {phone}: {message}")
        return True

    @staticmethod
    async def send_invite(
        db: Session,
        wedding: Dict[str, Any],
        email_service: EmailService,
        name: str = "",
        email: Optional[str] = None,
        phone: Optional[str] = None,
        send_email: bool = True,
        send_sms: bool = False
    ) -> Dict[str, Any]:
        """Send an invitation and record its outcome"""
        name = (name or "").strip()
        email = clean_optional(email)
        phone = clean_optional(phone)
        if not email and not phone:
            raise validation_error("Please provide either email or phone number")

        email_sent = False
        if send_email and email:
            email_sent = await InvitationService.send_email_invite(
                db, wedding, name or email.split("@")[0], email, email_service
            )

        sms_sent = False
        if send_sms and phone:
            sms_sent = InvitationService.send_sms_invite(wedding, name, phone)

        return InvitationService._repo(db, wedding["id"]).add({
            "guest_name": name,
            "guest_email": email,
            "guest_phone": phone,
            "sent_at": now_iso(),
            "email_sent": email_sent,
            "sms_sent": sms_sent
        })

    @staticmethod
    async def send_bulk(
        db: Session,
        wedding: Dict[str, Any],
        entries: str,
        email_service: EmailService
    ) -> Dict[str, int]:
        """One email address or phone number per line"""
        sent = failed = 0
        for line in (entries or "").splitlines():
            line = line.strip()
            if not line:
                continue

            kind = GuestService.classify_contact(line)
            if kind is None:
                failed += 1
                continue

            try:
                await InvitationService.send_invite(
                    db,
                    wedding,
                    email_service,
                    name=line.split("@")[0] if kind == "email" else line,
                    email=line if kind == "email" else None,
                    phone=line if kind == "phone" else None,
                    send_email=kind == "email",
                    send_sms=kind == "phone"
                )
                sent += 1
            except Exception as e:
                logger.error(f"Bulk invitation to {line} failed: {e}")
                failed += 1

        logger.info(f"Bulk invitations for wedding {wedding['id']}: {sent} sent, {failed} failed")
        return {"sent": sent, "failed": failed}

    @staticmethod
    def list_invitations(db: Session, wedding_id: str) -> List[Dict[str, Any]]:
        return InvitationService._repo(db, wedding_id).list(order_by="sent_at", descending=True)
