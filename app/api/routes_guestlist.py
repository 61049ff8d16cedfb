"""
Guest list, CSV import, RSVP and export routes - requires authentication
"""

from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.guest import GuestCreate, GuestUpdate, QuickAddRequest, ImportCommitRequest
from app.services.event_service import EventService
from app.services.guest_service import GuestService
from app.services.import_service import ImportService
from app.services.export_service import ExportService
from app.services.rsvp_service import RSVPService
from app.api.routes_admin import load_wedding
from app.utils.security import AuthUser, get_current_user
from app.utils.responses import success_response, error_response

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# -------- Guests --------

@router.get("/weddings/{wedding_id}/guests")
async def list_guests(
    wedding_id: str,
    search: Optional[str] = None,
    event_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Search the guest list by name/email and filter by invited event"""
    load_wedding(db, wedding_id, user)
    guests = GuestService.list_guests(db, wedding_id, search=search, event_id=event_id)
    return success_response(
        message=f"Found {len(guests)} guests",
        data=guests
    )

@router.post("/weddings/{wedding_id}/guests")
async def create_guest(
    wedding_id: str,
    guest_data: GuestCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    guest = GuestService.create_guest(db, wedding_id, guest_data)
    return success_response(message="Guest added", data=guest, status_code=201)

@router.post("/weddings/{wedding_id}/guests/quick-add")
async def quick_add_guest(
    wedding_id: str,
    quick_add: QuickAddRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Add a guest from a name plus one email or phone number"""
    load_wedding(db, wedding_id, user, edit=True)
    guest = GuestService.quick_add(db, wedding_id, quick_add.name, quick_add.contact)
    return success_response(message="Guest added", data=guest, status_code=201)

@router.patch("/weddings/{wedding_id}/guests/{guest_id}")
async def update_guest(
    wedding_id: str,
    guest_id: str,
    guest_update: GuestUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Update guest information"""
    load_wedding(db, wedding_id, user, edit=True)
    guest = GuestService.update_guest(db, wedding_id, guest_id, guest_update)
    return success_response(message="Guest updated successfully", data=guest)

@router.delete("/weddings/{wedding_id}/guests/{guest_id}")
async def delete_guest(
    wedding_id: str,
    guest_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user, edit=True)
    GuestService.delete_guest(db, wedding_id, guest_id)
    return success_response(message="Guest deleted")

# -------- CSV import --------

@router.post("/weddings/{wedding_id}/guests/import/preview")
async def preview_guest_import(
    wedding_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Parse and validate a guest CSV without writing anything"""
    load_wedding(db, wedding_id, user, edit=True)

    if not (file.filename or "").lower().endswith((".csv", ".txt")):
        return error_response(
            message="Invalid file format. Please upload a CSV file",
            status_code=400
        )

    content = await file.read()
    preview = ImportService.preview_import(db, wedding_id, content)
    return success_response(
        message=f"{preview['ok']} of {preview['total']} rows ready to import",
        data=preview
    )

@router.post("/weddings/{wedding_id}/guests/import")
async def commit_guest_import(
    wedding_id: str,
    commit: ImportCommitRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Import the (possibly edited) preview rows in one batch"""
    load_wedding(db, wedding_id, user, edit=True)
    result = ImportService.commit_import(db, wedding_id, user, commit.rows)
    return success_response(
        message=f"Imported {result['imported']} guests. {result['skipped']} skipped.",
        data=result
    )

@router.post("/weddings/{wedding_id}/guests/import/{import_id}/undo")
async def undo_guest_import(
    wedding_id: str,
    import_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Remove the guests of a recent import while the undo window is open"""
    load_wedding(db, wedding_id, user, edit=True)
    deleted = ImportService.undo_import(db, wedding_id, import_id)
    return success_response(
        message=f"Import undone. {deleted} guests removed.",
        data={"import_id": import_id, "deleted": deleted}
    )

# -------- Exports --------

@router.get("/weddings/{wedding_id}/guests/export.xlsx")
async def export_guests(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Export the guest list to Excel"""
    load_wedding(db, wedding_id, user)
    excel_bytes = ExportService.export_guests_xlsx(
        GuestService.list_guests(db, wedding_id),
        EventService.list_events(db, wedding_id)
    )
    return Response(
        content=excel_bytes,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=guests_{wedding_id}.xlsx"}
    )

@router.get("/weddings/{wedding_id}/rsvps/export.xlsx")
async def export_rsvps(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    excel_bytes = ExportService.export_rsvps_xlsx(
        RSVPService.list_rsvps(db, wedding_id),
        EventService.list_events(db, wedding_id)
    )
    return Response(
        content=excel_bytes,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=rsvps_{wedding_id}.xlsx"}
    )

# -------- RSVPs & contacts --------

@router.get("/weddings/{wedding_id}/rsvps")
async def list_rsvps(
    wedding_id: str,
    event_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    load_wedding(db, wedding_id, user)
    rsvps = RSVPService.list_rsvps(db, wedding_id, event_id=event_id)
    return success_response(
        message="RSVPs retrieved",
        data={
            "rsvps": rsvps,
            "summary": RSVPService.rsvp_summary(rsvps)
        }
    )

@router.get("/weddings/{wedding_id}/contacts")
async def list_contacts(
    wedding_id: str,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(get_current_user)
):
    """Guests who RSVPed, unique by email"""
    load_wedding(db, wedding_id, user)
    return success_response(message="Contacts retrieved", data=RSVPService.list_contacts(db, wedding_id))
