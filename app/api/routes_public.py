"""
Public API routes - no authentication required
"""

import os
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.import_service import ImportService
from app.services.qr_service import QRService
from app.services.wedding_service import WeddingService
from app.services.website_service import WebsiteService
from app.utils.responses import success_response
from app.utils.security import AuthUser, get_optional_user

router = APIRouter()

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
templates = Jinja2Templates(directory=TEMPLATE_DIR)

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/w/{slug}", response_class=HTMLResponse)
async def wedding_website(
    request: Request,
    slug: str,
    db: Session = Depends(get_db)
):
    """Themed wedding website"""
    site = WebsiteService.get_site(db, slug)
    return templates.TemplateResponse(request, "wedding_website.html", {"site": site})

@router.get("/invite/{slug}")
async def invite_link(slug: str, db: Session = Depends(get_db)):
    """Invitation links land on the wedding website"""
    WeddingService.get_by_slug(db, slug)
    return RedirectResponse(url=f"/w/{slug}")

@router.get("/public/weddings/{slug}")
async def get_public_site(
    slug: str,
    db: Session = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_optional_user)
):
    """Everything the wedding website shows, as JSON, plus the viewer's role"""
    return success_response(
        message="Wedding website retrieved",
        data=WebsiteService.get_site(db, slug, user=user)
    )

@router.get("/public/weddings/{slug}/events/{event_id}")
async def get_public_event(slug: str, event_id: str, db: Session = Depends(get_db)):
    """Event details with the updates posted for that event"""
    return success_response(
        message="Event retrieved",
        data=WebsiteService.get_event_page(db, slug, event_id)
    )

@router.get("/public/weddings/{slug}/qr.png")
async def get_qr_code(slug: str, db: Session = Depends(get_db)):
    """Get QR code image for the wedding website"""
    WeddingService.get_by_slug(db, slug)
    qr_bytes = QRService.generate_website_qr(slug)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=qr_{slug}.png"}
    )

@router.get("/template/guest_import_template.csv")
async def download_import_template():
    """Download the CSV template for bulk guest imports"""
    return Response(
        content=ImportService.csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=guest_import_template.csv"}
    )
