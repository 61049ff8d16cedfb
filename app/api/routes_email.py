"""
Email forwarding handlers used by the browser client.

These keep their own response contract: ``{success, sent, failed, total}`` on
success and ``{error, details?}`` on failure.
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.schemas.invitation import UpdateEmailRequest, InviteEmailRequest
from app.services.email_service import EmailService, get_email_service, is_valid_email

logger = logging.getLogger(__name__)

router = APIRouter()

def _error(status_code: int, error: str, details: str = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)

@router.post("/send-update-email")
async def send_update_email(
    body: UpdateEmailRequest,
    email_service: EmailService = Depends(get_email_service)
):
    """Send a live update (or an RSVP confirmation) to a list of recipients"""
    if not email_service.resend_configured:
        return _error(500, "Resend API key not configured")

    recipients = body.recipient_emails
    if not isinstance(recipients, list) or not recipients:
        return _error(400, "No valid recipient emails provided")
    if not body.wedding_name or not body.update_message:
        return _error(400, "Missing required fields")

    try:
        result = await email_service.send_update_emails(
            recipient_emails=[str(r) for r in recipients],
            wedding_name=body.wedding_name,
            update_message=body.update_message,
            event_name=body.event_name,
            time_update=body.time_update,
            map_link=body.map_link,
            website_url=body.website_url,
            email_type=body.email_type
        )
    except Exception as e:
        logger.error(f"Error sending emails: {e}")
        return _error(500, "Failed to send emails", str(e))

    return result

@router.post("/send-invite-email")
async def send_invite_email(
    body: InviteEmailRequest,
    email_service: EmailService = Depends(get_email_service)
):
    """Send one invitation through the email template service"""
    if not email_service.invite_configured:
        return _error(500, "Email template service not configured")
    if not is_valid_email(body.to_email):
        return _error(400, "Invalid email address")
    if not body.couple_names or not body.invite_url:
        return _error(400, "Missing required fields")

    to_email = body.to_email.strip()
    template_params = {
        "to_name": body.to_name or to_email.split("@")[0],
        "to_email": to_email,
        "couple_names": body.couple_names,
        "wedding_date": body.wedding_date or "",
        "wedding_city": body.wedding_city or "",
        "invite_url": body.invite_url,
        "website_url": body.website_url or body.invite_url,
        "rsvp_url": body.rsvp_url or body.website_url or body.invite_url,
        "reply_to": body.reply_to or "noreply@oneknot.app"
    }

    try:
        await email_service.send_invite(template_params)
    except Exception as e:
        logger.error(f"Error sending invitation email: {e}")
        return _error(500, "Failed to send invitation", str(e))

    return {"success": True, "sent": 1, "failed": 0, "total": 1}
