"""
Guest-facing API routes: RSVPs, memories and the shared gallery
"""

from typing import List
from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.rsvp import RSVPSubmit
from app.schemas.content import MemoryCreate, ReactionRequest
from app.services.wedding_service import WeddingService
from app.services.rsvp_service import RSVPService
from app.services.memory_service import MemoryService
from app.services.gallery_service import GalleryService
from app.services.email_service import EmailService, get_email_service
from app.utils.security import rate_limit_check, get_client_ip
from app.utils.responses import success_response, rate_limit_error

router = APIRouter()

def check_rate_limit(request: Request):
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        raise rate_limit_error()

# -------- RSVP --------

async def _submit(db, slug, rsvp_data, email_service, event_id=None):
    wedding = WeddingService.get_by_slug(db, slug)
    result = await RSVPService.submit_rsvp(db, wedding, rsvp_data, email_service, event_id=event_id)

    message = "RSVP updated successfully!" if result["updated"] else "RSVP submitted successfully!"
    if result["email_sent"]:
        message += " A confirmation email is on its way."
    return success_response(message=message, data=result)

@router.post("/weddings/{slug}/rsvp")
async def submit_wedding_rsvp(
    request: Request,
    slug: str,
    rsvp_data: RSVPSubmit,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    """RSVP to the wedding as a whole"""
    check_rate_limit(request)
    return await _submit(db, slug, rsvp_data, email_service)

@router.post("/weddings/{slug}/events/{event_id}/rsvp")
async def submit_event_rsvp(
    request: Request,
    slug: str,
    event_id: str,
    rsvp_data: RSVPSubmit,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    """RSVP to a single event"""
    check_rate_limit(request)
    return await _submit(db, slug, rsvp_data, email_service, event_id=event_id)

@router.get("/weddings/{slug}/rsvp")
async def get_wedding_rsvp(
    slug: str,
    guest_id: str,
    db: Session = Depends(get_db)
):
    """Previous wedding-level response of this guest, if any"""
    wedding = WeddingService.get_by_slug(db, slug)
    rsvp = RSVPService.get_guest_rsvp(db, wedding["id"], guest_id)
    return success_response(message="RSVP retrieved" if rsvp else "No RSVP yet", data=rsvp)

@router.get("/weddings/{slug}/events/{event_id}/rsvp")
async def get_event_rsvp(
    slug: str,
    event_id: str,
    guest_id: str,
    db: Session = Depends(get_db)
):
    wedding = WeddingService.get_by_slug(db, slug)
    rsvp = RSVPService.get_guest_rsvp(db, wedding["id"], guest_id, event_id)
    return success_response(message="RSVP retrieved" if rsvp else "No RSVP yet", data=rsvp)

# -------- Memories --------

@router.get("/weddings/{slug}/memories")
async def list_memories(slug: str, db: Session = Depends(get_db)):
    wedding = WeddingService.get_by_slug(db, slug)
    return success_response(message="Memories retrieved", data=MemoryService.list_memories(db, wedding["id"]))

@router.post("/weddings/{slug}/memories")
async def post_memory(
    request: Request,
    slug: str,
    memory: MemoryCreate,
    db: Session = Depends(get_db)
):
    """Leave a message on the memory wall"""
    check_rate_limit(request)
    wedding = WeddingService.get_by_slug(db, slug)
    created = MemoryService.create_memory(db, wedding["id"], memory.name, memory.message)
    return success_response(message="Memory shared!", data=created, status_code=201)

@router.post("/weddings/{slug}/memories/{memory_id}/reactions")
async def react_to_memory(
    request: Request,
    slug: str,
    memory_id: str,
    reaction: ReactionRequest,
    db: Session = Depends(get_db)
):
    check_rate_limit(request)
    wedding = WeddingService.get_by_slug(db, slug)
    memory = MemoryService.toggle_reaction(db, wedding["id"], memory_id, reaction.kind, reaction.guest_id)
    return success_response(message="Reaction updated", data=memory)

# -------- Gallery --------

@router.get("/weddings/{slug}/gallery")
async def list_gallery(slug: str, db: Session = Depends(get_db)):
    wedding = WeddingService.get_by_slug(db, slug)
    return success_response(message="Gallery retrieved", data=GalleryService.list_items(db, wedding["id"]))

@router.post("/weddings/{slug}/gallery")
async def upload_to_gallery(
    request: Request,
    slug: str,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db)
):
    """Guests share their own photos and videos"""
    check_rate_limit(request)
    wedding = WeddingService.get_by_slug(db, slug)
    payload = [
        {"file_name": f.filename, "content_type": f.content_type, "content": await f.read()}
        for f in files
    ]
    result = GalleryService.upload_items(db, wedding["id"], payload)
    return success_response(
        message=f"Uploaded {len(result['uploaded'])} of {len(payload)} files",
        data=result
    )

@router.post("/weddings/{slug}/gallery/{item_id}/reactions")
async def react_to_gallery_item(
    request: Request,
    slug: str,
    item_id: str,
    reaction: ReactionRequest,
    db: Session = Depends(get_db)
):
    check_rate_limit(request)
    wedding = WeddingService.get_by_slug(db, slug)
    item = GalleryService.toggle_reaction(db, wedding["id"], item_id, reaction.kind, reaction.guest_id)
    return success_response(message="Reaction updated", data=item)
