"""
Public wedding website data: countdown, themes and page content
"""

from datetime import date, datetime, time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.schemas.wedding import DEFAULT_THEME
from app.services.event_service import EventService
from app.services.gallery_service import GalleryService
from app.services.memory_service import MemoryService
from app.services.update_service import UpdateService
from app.services.wedding_service import WeddingService
from app.utils.security import AuthUser, collaborator_role

# newest updates shown on the site; the event pages list the rest
SITE_UPDATE_LIMIT = 3

# hero gradient, accent text, button and card colours per theme
THEME_STYLES = {
    "classic": {"hero_from": "#ffe4e6", "hero_to": "#fecdd3", "accent": "#e11d48", "button": "#e11d48", "card": "#fff1f2"},
    "modern": {"hero_from": "#fce7f3", "hero_to": "#f3e8ff", "accent": "#db2777", "button": "#db2777", "card": "#fdf2f8"},
    "rustic": {"hero_from": "#fef3c7", "hero_to": "#ffedd5", "accent": "#b45309", "button": "#d97706", "card": "#fffbeb"},
    "beach": {"hero_from": "#dbeafe", "hero_to": "#cffafe", "accent": "#2563eb", "button": "#2563eb", "card": "#eff6ff"},
    "garden": {"hero_from": "#dcfce7", "hero_to": "#d1fae5", "accent": "#16a34a", "button": "#16a34a", "card": "#f0fdf4"},
    "minimal": {"hero_from": "#f3f4f6", "hero_to": "#e5e7eb", "accent": "#374151", "button": "#374151", "card": "#f9fafb"},
}


def theme_styles(theme: Optional[str]) -> Dict[str, str]:
    return THEME_STYLES.get(theme or DEFAULT_THEME, THEME_STYLES[DEFAULT_THEME])


def countdown(wedding_date: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Time left until midnight of the wedding day"""
    now = now or datetime.utcnow()
    target = datetime.combine(date.fromisoformat(wedding_date[:10]), time.min)
    diff = (target - now).total_seconds()
    is_past = diff < 0

    remaining = int(abs(diff))
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)

    if is_past:
        label = f"We're Married! {days} day{'s' if days != 1 else ''} ago"
    elif days == 0 and hours == 0 and minutes == 0:
        label = "Today's the day!"
    elif days == 0:
        label = f"Today! {hours}h {minutes}m {seconds}s"
    elif days == 1:
        label = "Tomorrow!"
    else:
        label = f"{days} days to go"

    return {
        "days": days,
        "hours": hours,
        "minutes": minutes,
        "seconds": seconds,
        "is_past": is_past,
        "label": label
    }


class WebsiteService:
    """Assembles the public wedding website"""

    @staticmethod
    def get_site(
        db: Session,
        slug: str,
        now: Optional[datetime] = None,
        user: Optional[AuthUser] = None
    ) -> Dict[str, Any]:
        """Public page content; role is the signed-in viewer's role, or None"""
        wedding = WeddingService.get_by_slug(db, slug)
        wedding_id = wedding["id"]
        public_wedding = {
            k: v for k, v in wedding.items()
            if k not in ("collaborators", "owner_id", "owner_email", "cover_storage_path")
        }
        return {
            "wedding": public_wedding,
            "couple_names": WeddingService.couple_names(wedding),
            "website_url": WeddingService.website_url(wedding),
            "events": EventService.list_events(db, wedding_id),
            "updates": UpdateService.list_updates(db, wedding_id, now=now)[:SITE_UPDATE_LIMIT],
            "memories": MemoryService.list_memories(db, wedding_id),
            "gallery": GalleryService.preview(db, wedding_id),
            "countdown": countdown(wedding["wedding_date"], now),
            "theme": theme_styles(wedding.get("theme")),
            "role": collaborator_role(wedding, user)
        }

    @staticmethod
    def get_event_page(db: Session, slug: str, event_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Event details plus updates scoped to that event"""
        wedding = WeddingService.get_by_slug(db, slug)
        event = EventService.get_event(db, wedding["id"], event_id)
        return {
            "wedding": {
                "id": wedding["id"],
                "slug": wedding["slug"],
                "couple_names": WeddingService.couple_names(wedding),
                "theme": wedding.get("theme")
            },
            "event": event,
            "updates": UpdateService.list_updates(db, wedding["id"], event_id=event_id, now=now)
        }
