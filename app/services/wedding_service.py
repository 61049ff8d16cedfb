"""
Wedding service: creation, settings, cover image, collaborators and dashboard stats
"""

import logging
import re
import secrets
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.wedding import (
    DEFAULT_THEME, THEMES, WeddingCreate, WeddingUpdate, CollaboratorCreate
)
from app.services.repositories import now_iso, wedding_collection, weddings_repo
from app.services.storage_service import StorageService
from app.utils.responses import conflict_error, forbidden_error, not_found_error, validation_error
from app.utils.security import AuthUser, ROLE_OWNER, collaborator_role

logger = logging.getLogger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9-]")


class WeddingService:
    """Service for wedding records"""

    @staticmethod
    def sanitize_slug(raw: Optional[str]) -> str:
        """Lowercase and drop everything outside [a-z0-9-]"""
        return _SLUG_INVALID.sub("", (raw or "").strip().lower())

    @staticmethod
    def generate_slug(partner1_name: str, partner2_name: str) -> str:
        """name1-name2-<last 6 digits of the current time in ms>"""
        name1 = WeddingService.sanitize_slug(re.sub(r"\s+", "", partner1_name or ""))
        name2 = WeddingService.sanitize_slug(re.sub(r"\s+", "", partner2_name or ""))
        suffix = str(int(time.time() * 1000))[-6:]
        return f"{name1}-{name2}-{suffix}"

    @staticmethod
    def normalize_theme(theme: Optional[str]) -> str:
        return theme if theme in THEMES else DEFAULT_THEME

    @staticmethod
    def website_url(wedding: Dict[str, Any]) -> str:
        return f"{settings.BASE_URL}/w/{wedding.get('slug')}"

    @staticmethod
    def couple_names(wedding: Dict[str, Any]) -> str:
        return f"{wedding.get('partner1_name', '')} & {wedding.get('partner2_name', '')}"

    @staticmethod
    def get_wedding(db: Session, wedding_id: str) -> Dict[str, Any]:
        wedding = weddings_repo(db).get(wedding_id)
        if not wedding:
            raise not_found_error("Wedding")
        return wedding

    @staticmethod
    def find_by_slug(db: Session, slug: str) -> Optional[Dict[str, Any]]:
        matches = weddings_repo(db).list(where={"slug": slug})
        return matches[0] if matches else None

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Dict[str, Any]:
        wedding = WeddingService.find_by_slug(db, slug)
        if not wedding:
            raise not_found_error("Wedding")
        return wedding

    @staticmethod
    def create_wedding(db: Session, user: AuthUser, data: WeddingCreate) -> Dict[str, Any]:
        """Create a wedding owned by user"""
        partner1 = data.partner1_name.strip()
        partner2 = data.partner2_name.strip()
        city = data.city.strip()
        if not partner1 or not partner2 or not city:
            raise validation_error("Partner names and city are required")

        slug = WeddingService.sanitize_slug(data.slug)
        if slug:
            if WeddingService.find_by_slug(db, slug):
                raise conflict_error(f"The URL '{slug}' is already taken")
        else:
            slug = WeddingService.generate_slug(partner1, partner2)
            while WeddingService.find_by_slug(db, slug):
                slug = f"{slug}-{secrets.randbelow(10)}"

        now = now_iso()
        wedding = weddings_repo(db).add({
            "partner1_name": partner1,
            "partner2_name": partner2,
            "wedding_date": data.wedding_date.isoformat(),
            "city": city,
            "theme": WeddingService.normalize_theme(data.theme),
            "slug": slug,
            "story": "",
            "cover_image_url": None,
            "cover_storage_path": None,
            "owner_id": user.uid,
            "owner_email": user.email,
            "collaborators": [{
                "email": user.email,
                "name": (user.email or "").split("@")[0] or "Owner",
                "role": ROLE_OWNER,
                "user_id": user.uid,
                "invited_at": now
            }],
            "created_at": now,
            "updated_at": now
        })
        logger.info(f"Created wedding {wedding['id']} with slug {slug}")
        return wedding

    @staticmethod
    def list_user_weddings(db: Session, user: AuthUser) -> List[Dict[str, Any]]:
        """Weddings the user owns or collaborates on, newest first"""
        weddings = weddings_repo(db).list(order_by="created_at", descending=True)
        return [w for w in weddings if collaborator_role(w, user) is not None]

    @staticmethod
    def update_wedding(db: Session, wedding_id: str, data: WeddingUpdate) -> Dict[str, Any]:
        updates = data.model_dump(exclude_unset=True)
        for field in ("partner1_name", "partner2_name", "city"):
            if field in updates:
                value = (updates[field] or "").strip()
                if not value:
                    raise validation_error(f"{field} cannot be empty")
                updates[field] = value
        if "wedding_date" in updates:
            if updates["wedding_date"] is None:
                raise validation_error("wedding_date cannot be empty")
            updates["wedding_date"] = updates["wedding_date"].isoformat()
        if "theme" in updates:
            updates["theme"] = WeddingService.normalize_theme(updates["theme"])
        updates["updated_at"] = now_iso()

        wedding = weddings_repo(db).update(wedding_id, updates)
        if wedding is None:
            raise not_found_error("Wedding")
        return wedding

    # -------- Cover image --------

    @staticmethod
    def set_cover_image(
        db: Session,
        wedding: Dict[str, Any],
        file_name: str,
        content_type: Optional[str],
        content: bytes
    ) -> Dict[str, Any]:
        """Upload a new cover image and delete the previous one"""
        if not (content_type or "").startswith("image/"):
            raise validation_error("Please select an image file")
        if len(content) > settings.MAX_COVER_IMAGE_SIZE:
            raise validation_error("Image size must be less than 5MB")

        path = StorageService.build_path(wedding["id"], file_name, prefix="cover_")
        url, storage_path = StorageService.upload(path, content, content_type)
        StorageService.delete_wedding_object(wedding["id"], wedding.get("cover_storage_path"))

        return weddings_repo(db).update(wedding["id"], {
            "cover_image_url": url,
            "cover_storage_path": storage_path,
            "updated_at": now_iso()
        })

    @staticmethod
    def remove_cover_image(db: Session, wedding: Dict[str, Any]) -> Dict[str, Any]:
        StorageService.delete_wedding_object(wedding["id"], wedding.get("cover_storage_path"))
        return weddings_repo(db).update(wedding["id"], {
            "cover_image_url": None,
            "cover_storage_path": None,
            "updated_at": now_iso()
        })

    # -------- Collaborators --------

    @staticmethod
    def _collaborator_at(wedding: Dict[str, Any], index: int) -> Dict[str, Any]:
        collaborators = wedding.get("collaborators") or []
        if index < 0 or index >= len(collaborators):
            raise not_found_error("Collaborator")
        return collaborators[index]

    @staticmethod
    def add_collaborator(db: Session, wedding: Dict[str, Any], data: CollaboratorCreate) -> Dict[str, Any]:
        email = data.email.strip().lower()
        collaborators = list(wedding.get("collaborators") or [])
        if any((c.get("email") or "").lower() == email for c in collaborators):
            raise conflict_error("This person is already a collaborator")

        collaborators.append({
            "email": email,
            "name": (data.name or "").strip() or email.split("@")[0],
            "role": data.role,
            "user_id": None,
            "invited_at": now_iso()
        })
        logger.info(f"Added {data.role} collaborator to wedding {wedding['id']}")
        return weddings_repo(db).update(wedding["id"], {
            "collaborators": collaborators,
            "updated_at": now_iso()
        })

    @staticmethod
    def update_collaborator_role(db: Session, wedding: Dict[str, Any], index: int, role: str) -> Dict[str, Any]:
        collaborator = WeddingService._collaborator_at(wedding, index)
        if collaborator.get("role") == ROLE_OWNER:
            raise forbidden_error("The owner's role cannot be changed")

        collaborators = [dict(c) for c in wedding.get("collaborators") or []]
        collaborators[index]["role"] = role
        return weddings_repo(db).update(wedding["id"], {
            "collaborators": collaborators,
            "updated_at": now_iso()
        })

    @staticmethod
    def remove_collaborator(db: Session, wedding: Dict[str, Any], index: int) -> Dict[str, Any]:
        collaborator = WeddingService._collaborator_at(wedding, index)
        if collaborator.get("role") == ROLE_OWNER:
            raise forbidden_error("The owner cannot be removed")

        collaborators = [c for i, c in enumerate(wedding.get("collaborators") or []) if i != index]
        return weddings_repo(db).update(wedding["id"], {
            "collaborators": collaborators,
            "updated_at": now_iso()
        })

    # -------- Dashboard --------

    @staticmethod
    def dashboard_stats(db: Session, wedding_id: str) -> Dict[str, int]:
        rsvps = wedding_collection(db, wedding_id, "rsvps").list()
        unique_guests = {
            (r.get("guest_email") or "").strip().lower()
            for r in rsvps
            if (r.get("guest_email") or "").strip()
        }
        return {
            "events": wedding_collection(db, wedding_id, "events").count(),
            "rsvps": len(rsvps),
            "guests": len(unique_guests),
            "gallery": wedding_collection(db, wedding_id, "gallery").count(),
            "guest_list": wedding_collection(db, wedding_id, "guests").count()
        }
