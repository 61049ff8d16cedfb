"""
Transactional email: Resend for updates and RSVP confirmations, EmailJS for invitations
"""

import asyncio
import logging
import os
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
EMAILJS_API_URL = "https://api.emailjs.com/api/v1.0/email/send"

EMAIL_TYPE_RSVP_CONFIRMATION = "rsvp-confirmation"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates", "email")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"])
)


class EmailNotConfiguredError(RuntimeError):
    """Raised when the provider credentials are missing"""


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(value.strip()))


def rsvp_status_text(status: Optional[str]) -> str:
    if status == "yes":
        return "Yes, I'll be there"
    if status == "maybe":
        return "Maybe"
    return "Can't make it"


def render_update_email(
    wedding_name: str,
    update_message: str,
    event_name: Optional[str] = None,
    time_update: Optional[str] = None,
    map_link: Optional[str] = None,
    website_url: Optional[str] = None
) -> Tuple[str, str]:
    """Subject and HTML body for a live update"""
    subject = f"Update: {wedding_name}" + (f" - {event_name}" if event_name else "")
    html = _env.get_template("update.html").render(
        wedding_name=wedding_name,
        update_message=update_message,
        event_name=event_name,
        time_update=time_update,
        map_link=map_link,
        website_url=website_url
    )
    return subject, html


def render_rsvp_confirmation_email(
    wedding_name: str,
    rsvp_status: str,
    event_name: Optional[str] = None,
    website_url: Optional[str] = None
) -> Tuple[str, str]:
    """Subject and HTML body confirming a guest's RSVP"""
    subject = f"RSVP Confirmation - {event_name or wedding_name}"
    html = _env.get_template("rsvp_confirmation.html").render(
        wedding_name=wedding_name,
        event_name=event_name,
        status_text=rsvp_status_text(rsvp_status),
        website_url=website_url
    )
    return subject, html


class EmailService:
    """Sends email through the Resend and EmailJS REST APIs.

    ``http_client_factory`` builds the ``httpx.AsyncClient`` used for each
    request; tests pass a factory wired to ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config=settings,
        http_client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient
    ):
        self._config = config
        self._client_factory = http_client_factory

    @property
    def resend_configured(self) -> bool:
        return bool(self._config.RESEND_API_KEY)

    @property
    def invite_configured(self) -> bool:
        return bool(
            self._config.EMAILJS_SERVICE_ID
            and self._config.EMAILJS_TEMPLATE_ID
            and self._config.EMAILJS_PUBLIC_KEY
        )

    @property
    def from_address(self) -> str:
        return f"{self._config.RESEND_FROM_NAME} <{self._config.RESEND_FROM_EMAIL}>"

    async def send(self, to_address: str, subject: str, html_body: str) -> Optional[str]:
        """Send one email via Resend and return the provider's message id"""
        if not self.resend_configured:
            raise EmailNotConfiguredError("Resend API key not configured")

        async with self._client_factory() as client:
            response = await client.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {self._config.RESEND_API_KEY}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self.from_address,
                    "to": [to_address],
                    "subject": subject,
                    "html": html_body,
                },
            )
            response.raise_for_status()
            return response.json().get("id")

    async def send_many(self, recipients: List[str], subject: str, html_body: str) -> Tuple[int, int]:
        """Send the same email to every recipient concurrently.

        One failed recipient never aborts the others. Returns (sent, failed).
        """
        results = await asyncio.gather(
            *(self.send(email, subject, html_body) for email in recipients),
            return_exceptions=True
        )

        failed = 0
        for email, result in zip(recipients, results):
            if isinstance(result, Exception):
                failed += 1
                logger.warning(f"Failed to send email to {email}: {result}")
        return len(recipients) - failed, failed

    async def send_update_emails(
        self,
        recipient_emails: List[str],
        wedding_name: str,
        update_message: str,
        event_name: Optional[str] = None,
        time_update: Optional[str] = None,
        map_link: Optional[str] = None,
        website_url: Optional[str] = None,
        email_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """Render the update (or RSVP confirmation) template and fan it out"""
        if email_type == EMAIL_TYPE_RSVP_CONFIRMATION:
            subject, html = render_rsvp_confirmation_email(
                wedding_name=wedding_name,
                rsvp_status=update_message,
                event_name=event_name,
                website_url=website_url
            )
        else:
            subject, html = render_update_email(
                wedding_name=wedding_name,
                update_message=update_message,
                event_name=event_name,
                time_update=time_update,
                map_link=map_link,
                website_url=website_url
            )

        sent, failed = await self.send_many(recipient_emails, subject, html)
        logger.info(f"Sent '{subject}' to {sent}/{len(recipient_emails)} recipients")
        return {
            "success": True,
            "sent": sent,
            "failed": failed,
            "total": len(recipient_emails)
        }

    async def send_invite(self, template_params: Dict[str, Any]) -> None:
        """Send an invitation through the EmailJS template service"""
        if not self.invite_configured:
            raise EmailNotConfiguredError("Email template service not configured")

        payload = {
            "service_id": self._config.EMAILJS_SERVICE_ID,
            "template_id": self._config.EMAILJS_TEMPLATE_ID,
            "user_id": self._config.EMAILJS_PUBLIC_KEY,
            "template_params": template_params,
        }
        if self._config.EMAILJS_PRIVATE_KEY:
            payload["accessToken"] = self._config.EMAILJS_PRIVATE_KEY

        async with self._client_factory() as client:
            response = await client.post(EMAILJS_API_URL, json=payload)
            response.raise_for_status()


def get_email_service() -> EmailService:
    """FastAPI dependency; overridden in tests"""
    return EmailService()
