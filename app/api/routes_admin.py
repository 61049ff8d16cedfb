"""
Admin API routes for the couple and collaborators - requires authentication
"""

from typing import List
from fastapi import APIRouter, Depends, UploadFile, File
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.wedding import WeddingCreate, WeddingUpdate, CollaboratorCreate, CollaboratorRoleUpdate
from app.schemas.event import EventCreate, EventUpdate
from app.schemas.content import UpdateCreate
from app.schemas.invitation import InviteRequest, BulkInviteRequest
from app.services.wedding_service import WeddingService
from app.services.event_service import EventService
from app.services.update_service import UpdateService
from app.services.invitation_service import InvitationService
from app.services.gallery_service import GalleryService
from app.services.memory_service import MemoryService
from app.services.email_service import EmailService, get_email_service
from app.api.ws import websocket_manager
from app.utils.security import AuthUser, get_current_user, require_view, require_edit, collaborator_role
from app.utils.responses import success_response

router = APIRouter()

update_service = UpdateService(websocket_manager)

def load_wedding(db: Session, wedding_id: str, user: AuthUser, edit: bool = False) -> dict:
    """Fetch a wedding and check the user's role on it"""
    wedding = WeddingService.get_wedding(db, wedding_id)
    if edit:
        require_edit(wedding, user)
    else:
        require_view(wedding, user)
    return wedding

# -------- Weddings --------

@router.post("/weddings")
async def create_wedding(
    wedding_data: WeddingCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Create a new wedding owned by the signed-in user"""
    wedding = WeddingService.create_wedding(db, user, wedding_data)
    return success_response(
        message="Wedding created successfully",
        data=wedding,
        status_code=201
    )

@router.get("/weddings")
async def list_weddings(
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Weddings the user owns or collaborates on"""
    weddings = WeddingService.list_user_weddings(db, user)
    for wedding in weddings:
        wedding["role"] = collaborator_role(wedding, user)
    return success_response(
        message="Weddings retrieved",
        data=weddings
    )

@router.get("/weddings/{wedding_id}")
async def get_wedding(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user)
    wedding["role"] = collaborator_role(wedding, user)
    return success_response(message="Wedding retrieved", data=wedding)

@router.patch("/weddings/{wedding_id}")
async def update_wedding(
    wedding_id: str,
    wedding_data: WeddingUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Save wedding settings"""
    load_wedding(db, wedding_id, user, edit=True)
    wedding = WeddingService.update_wedding(db, wedding_id, wedding_data)
    return success_response(message="Settings saved successfully", data=wedding)

@router.post("/weddings/{wedding_id}/cover")
async def upload_cover_image(
    wedding_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Upload a cover image (images only, up to 5MB)"""
    wedding = load_wedding(db, wedding_id, user, edit=True)
    content = await file.read()
    wedding = WeddingService.set_cover_image(db, wedding, file.filename, file.content_type, content)
    return success_response(message="Cover image uploaded", data=wedding)

@router.delete("/weddings/{wedding_id}/cover")
async def remove_cover_image(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    wedding = WeddingService.remove_cover_image(db, wedding)
    return success_response(message="Cover image removed", data=wedding)

@router.get("/weddings/{wedding_id}/dashboard")
async def get_dashboard(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Counts shown on the dashboard"""
    wedding = load_wedding(db, wedding_id, user)
    return success_response(
        message="Dashboard statistics retrieved",
        data={
            "wedding": wedding,
            "role": collaborator_role(wedding, user),
            "website_url": WeddingService.website_url(wedding),
            "stats": WeddingService.dashboard_stats(db, wedding_id)
        }
    )

# -------- Collaborators --------

@router.get("/weddings/{wedding_id}/collaborators")
async def list_collaborators(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user)
    return success_response(message="Collaborators retrieved", data=wedding.get("collaborators") or [])

@router.post("/weddings/{wedding_id}/collaborators")
async def add_collaborator(
    wedding_id: str,
    collaborator: CollaboratorCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    wedding = WeddingService.add_collaborator(db, wedding, collaborator)
    return success_response(
        message="Collaborator added",
        data=wedding["collaborators"],
        status_code=201
    )

@router.patch("/weddings/{wedding_id}/collaborators/{index}")
async def update_collaborator_role(
    wedding_id: str,
    index: int,
    role_data: CollaboratorRoleUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    wedding = WeddingService.update_collaborator_role(db, wedding, index, role_data.role)
    return success_response(message="Collaborator role updated", data=wedding["collaborators"])

@router.delete("/weddings/{wedding_id}/collaborators/{index}")
async def remove_collaborator(
    wedding_id: str,
    index: int,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    wedding = WeddingService.remove_collaborator(db, wedding, index)
    return success_response(message="Collaborator removed", data=wedding["collaborators"])

# -------- Events --------

@router.get("/weddings/{wedding_id}/events")
async def list_events(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    return success_response(message="Events retrieved", data=EventService.list_events(db, wedding_id))

@router.post("/weddings/{wedding_id}/events")
async def create_event(
    wedding_id: str,
    event_data: EventCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Create a new event"""
    load_wedding(db, wedding_id, user, edit=True)
    event = EventService.create_event(db, wedding_id, event_data)
    return success_response(message="Event created successfully", data=event, status_code=201)

@router.get("/weddings/{wedding_id}/events/{event_id}")
async def get_event(
    wedding_id: str,
    event_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    return success_response(message="Event retrieved", data=EventService.get_event(db, wedding_id, event_id))

@router.patch("/weddings/{wedding_id}/events/{event_id}")
async def update_event(
    wedding_id: str,
    event_id: str,
    event_data: EventUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    event = EventService.update_event(db, wedding_id, event_id, event_data)
    return success_response(message="Event updated successfully", data=event)

@router.delete("/weddings/{wedding_id}/events/{event_id}")
async def delete_event(
    wedding_id: str,
    event_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Delete an event. Guests keep the dangling reference and show it as Unknown."""
    load_wedding(db, wedding_id, user, edit=True)
    EventService.delete_event(db, wedding_id, event_id)
    return success_response(message="Event deleted successfully")

# -------- Updates --------

@router.get("/weddings/{wedding_id}/updates")
async def list_updates(
    wedding_id: str,
    event_id: str = None,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    return success_response(
        message="Updates retrieved",
        data=UpdateService.list_updates(db, wedding_id, event_id=event_id)
    )

@router.post("/weddings/{wedding_id}/updates")
async def create_update(
    wedding_id: str,
    update_data: UpdateCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service)
):
    """Post a live update and notify opted-in guests"""
    wedding = load_wedding(db, wedding_id, user, edit=True)
    result = await update_service.create_update(db, wedding, update_data, email_service)
    return success_response(message="Update posted", data=result, status_code=201)

@router.delete("/weddings/{wedding_id}/updates/{update_id}")
async def delete_update(
    wedding_id: str,
    update_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    await update_service.delete_update(db, wedding, update_id)
    return success_response(message="Update deleted")

# -------- Invitations --------

@router.get("/weddings/{wedding_id}/invitations")
async def list_invitations(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    return success_response(
        message="Invitations retrieved",
        data=InvitationService.list_invitations(db, wedding_id)
    )

@router.post("/weddings/{wedding_id}/invitations")
async def send_invitation(
    wedding_id: str,
    invite: InviteRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service)
):
    """Send one invitation by email and/or SMS"""
    wedding = load_wedding(db, wedding_id, user, edit=True)
    invitation = await InvitationService.send_invite(
        db,
        wedding,
        email_service,
        name=invite.name,
        email=invite.email,
        phone=invite.phone,
        send_email=invite.send_email,
        send_sms=invite.send_sms
    )
    return success_response(message="Invitation sent successfully!", data=invitation, status_code=201)

@router.post("/weddings/{wedding_id}/invitations/bulk")
async def send_bulk_invitations(
    wedding_id: str,
    bulk: BulkInviteRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service)
):
    wedding = load_wedding(db, wedding_id, user, edit=True)
    result = await InvitationService.send_bulk(db, wedding, bulk.entries, email_service)
    return success_response(
        message=f"Sent {result['sent']} invitations. {result['failed']} failed.",
        data=result
    )

# -------- Gallery & memories moderation --------

@router.get("/weddings/{wedding_id}/gallery")
async def list_gallery(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    return success_response(message="Gallery retrieved", data=GalleryService.list_items(db, wedding_id))

@router.post("/weddings/{wedding_id}/gallery")
async def upload_gallery(
    wedding_id: str,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Upload photos and videos; each file succeeds or fails on its own"""
    load_wedding(db, wedding_id, user, edit=True)
    payload = []
    for f in files:
        payload.append({
            "file_name": f.filename,
            "content_type": f.content_type,
            "content": await f.read()
        })
    result = GalleryService.upload_items(db, wedding_id, payload)
    return success_response(
        message=f"Uploaded {len(result['uploaded'])} of {len(payload)} files",
        data=result
    )

@router.patch("/weddings/{wedding_id}/gallery/{item_id}/pin")
async def toggle_gallery_pin(
    wedding_id: str,
    item_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    item = GalleryService.toggle_pin(db, wedding_id, item_id)
    return success_response(message="Pin updated", data=item)

@router.delete("/weddings/{wedding_id}/gallery/{item_id}")
async def delete_gallery_item(
    wedding_id: str,
    item_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    GalleryService.delete_item(db, wedding_id, item_id)
    return success_response(message="Gallery item deleted")

@router.delete("/weddings/{wedding_id}/memories/{memory_id}")
async def delete_memory(
    wedding_id: str,
    memory_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    MemoryService.delete_memory(db, wedding_id, memory_id)
    return success_response(message="Memory deleted")
