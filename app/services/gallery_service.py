"""
Gallery service: uploads, pinning, reactions
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.content import REACTION_KINDS
from app.services.repositories import now_iso, wedding_collection
from app.services.storage_service import StorageService
from app.utils.responses import not_found_error, validation_error

logger = logging.getLogger(__name__)


def empty_reactions() -> Dict[str, List[str]]:
    return {kind: [] for kind in REACTION_KINDS}


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Gallery type for a MIME type, or None when it is not a photo or video"""
    content_type = content_type or ""
    if content_type.startswith("video/"):
        return "video"
    if content_type.startswith("image/"):
        return "photo"
    return None


def toggled_reactions(reactions: Optional[Dict[str, List[str]]], kind: str, guest_id: str) -> Dict[str, List[str]]:
    """Add guest_id to the kind's list, or remove it when already present"""
    if kind not in REACTION_KINDS:
        raise validation_error(f"Unknown reaction '{kind}'")
    if not guest_id:
        raise validation_error("guest_id is required")

    result = empty_reactions()
    for k, ids in (reactions or {}).items():
        result[k] = list(ids or [])

    if guest_id in result[kind]:
        result[kind] = [g for g in result[kind] if g != guest_id]
    else:
        result[kind].append(guest_id)
    return result


class GalleryService:
    """Service for the photo and video gallery"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "gallery")

    @staticmethod
    def _with_defaults(item: Dict[str, Any]) -> Dict[str, Any]:
        item["reactions"] = {**empty_reactions(), **(item.get("reactions") or {})}
        item.setdefault("pinned", False)
        return item

    @staticmethod
    def upload_item(db: Session, wedding_id: str, file_name: str, content_type: Optional[str], content: bytes) -> Dict[str, Any]:
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise validation_error(f"{file_name} is too large")

        kind = media_type(content_type)
        if kind is None:
            raise validation_error(f"{file_name} is not a photo or video")

        path = StorageService.build_path(wedding_id, file_name, prefix="gallery_")
        url, storage_path = StorageService.upload(path, content, content_type)

        return GalleryService._repo(db, wedding_id).add({
            "url": url,
            "storage_path": storage_path,
            "file_name": file_name,
            "type": kind,
            "pinned": False,
            "reactions": empty_reactions(),
            "uploaded_at": now_iso()
        })

    @staticmethod
    def upload_items(db: Session, wedding_id: str, files: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Upload several files; one failure does not stop the rest"""
        unsupported = [f["file_name"] for f in files if media_type(f.get("content_type")) is None]
        if unsupported:
            raise validation_error("Only photos and videos can be uploaded", errors=unsupported)

        uploaded, errors = [], []
        for f in files:
            try:
                uploaded.append(GalleryService.upload_item(
                    db, wedding_id, f["file_name"], f.get("content_type"), f["content"]
                ))
            except Exception as e:
                detail = getattr(e, "detail", None) or str(e)
                logger.error(f"Error uploading {f['file_name']}: {detail}")
                errors.append({"file_name": f["file_name"], "error": detail})
        return {"uploaded": uploaded, "errors": errors}

    @staticmethod
    def list_items(db: Session, wedding_id: str) -> List[Dict[str, Any]]:
        """Pinned items first, then newest"""
        items = GalleryService._repo(db, wedding_id).list(order_by="uploaded_at", descending=True)
        items = [GalleryService._with_defaults(i) for i in items]
        return [i for i in items if i["pinned"]] + [i for i in items if not i["pinned"]]

    @staticmethod
    def preview(db: Session, wedding_id: str, limit: int = 6) -> List[Dict[str, Any]]:
        items = GalleryService._repo(db, wedding_id).list(order_by="uploaded_at", descending=True)
        return [GalleryService._with_defaults(i) for i in items[:limit]]

    @staticmethod
    def get_item(db: Session, wedding_id: str, item_id: str) -> Dict[str, Any]:
        item = GalleryService._repo(db, wedding_id).get(item_id)
        if not item:
            raise not_found_error("Gallery item")
        return GalleryService._with_defaults(item)

    @staticmethod
    def delete_item(db: Session, wedding_id: str, item_id: str) -> None:
        item = GalleryService.get_item(db, wedding_id, item_id)
        path = item.get("storage_path") or StorageService.path_from_url(item.get("url"))
        StorageService.delete_wedding_object(wedding_id, path)
        GalleryService._repo(db, wedding_id).delete(item_id)
        logger.info(f"Deleted gallery item {item_id} from wedding {wedding_id}")

    @staticmethod
    def toggle_pin(db: Session, wedding_id: str, item_id: str) -> Dict[str, Any]:
        item = GalleryService.get_item(db, wedding_id, item_id)
        return GalleryService._repo(db, wedding_id).update(item_id, {"pinned": not item["pinned"]})

    @staticmethod
    def toggle_reaction(db: Session, wedding_id: str, item_id: str, kind: str, guest_id: str) -> Dict[str, Any]:
        item = GalleryService.get_item(db, wedding_id, item_id)
        reactions = toggled_reactions(item["reactions"], kind, guest_id)
        return GalleryService._repo(db, wedding_id).update(item_id, {"reactions": reactions})
