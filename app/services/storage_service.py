"""
Object storage for cover images and gallery media (Firebase Storage or local disk)
"""

import logging
import os
import uuid
from typing import Optional, Tuple
from urllib.parse import quote, unquote

from app.core.config import settings
from app.services.firebase_client import get_storage_bucket
from app.services.repositories import use_firestore

logger = logging.getLogger(__name__)

class StorageService:
    """Upload, locate and delete stored objects"""

    @staticmethod
    def build_path(wedding_id: str, file_name: str, prefix: str = "") -> str:
        """Storage path for a wedding asset, unique per upload"""
        safe_name = os.path.basename(file_name or "file").replace(" ", "_")
        return f"weddings/{wedding_id}/{prefix}{uuid.uuid4().hex[:12]}_{safe_name}"

    @staticmethod
    def upload(path: str, content: bytes, content_type: str) -> Tuple[str, str]:
        """Store bytes at path and return (download_url, storage_path)"""
        if use_firestore():
            bucket = get_storage_bucket()
            blob = bucket.blob(path)
            token = uuid.uuid4().hex
            blob.metadata = {"firebaseStorageDownloadTokens": token}
            blob.upload_from_string(content, content_type=content_type)
            url = (
                f"https://firebasestorage.googleapis.com/v0/b/{bucket.name}/o/"
                f"{quote(path, safe='')}?alt=media&token={token}"
            )
            return url, path

        full_path = os.path.join(settings.UPLOAD_DIR, path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(content)
        return f"{settings.BASE_URL}/uploads/{path}", path

    @staticmethod
    def path_from_url(url: Optional[str]) -> Optional[str]:
        """Recover the storage path from a download URL"""
        if not url:
            return None
        if "/o/" in url:
            return unquote(url.split("/o/", 1)[1].split("?", 1)[0])
        if "/uploads/" in url:
            return unquote(url.split("/uploads/", 1)[1].split("?", 1)[0])
        return None

    @staticmethod
    def belongs_to(wedding_id: str, path: Optional[str]) -> bool:
        """True when path lies inside the wedding's own storage folder"""
        if not path or not wedding_id:
            return False
        normalized = os.path.normpath(path).replace(os.sep, "/")
        return normalized.startswith(f"weddings/{wedding_id}/") and ".." not in normalized.split("/")

    @staticmethod
    def delete(path: Optional[str]) -> bool:
        """Remove a stored object. Returns False when nothing was deleted."""
        if not path:
            return False

        if use_firestore():
            blob = get_storage_bucket().blob(path)
            if not blob.exists():
                return False
            blob.delete()
            return True

        full_path = os.path.join(settings.UPLOAD_DIR, path)
        if not os.path.exists(full_path):
            return False
        os.remove(full_path)
        return True

    @staticmethod
    def delete_quietly(path: Optional[str]) -> None:
        """Best-effort delete; failures are logged and ignored"""
        try:
            StorageService.delete(path)
        except Exception as e:
            logger.error(f"Error deleting stored object {path}: {e}")

    @staticmethod
    def delete_wedding_object(wedding_id: str, path: Optional[str]) -> None:
        """Best-effort delete restricted to the wedding's own objects"""
        if not path:
            return
        if not StorageService.belongs_to(wedding_id, path):
            logger.warning(f"Refusing to delete {path}: not stored under wedding {wedding_id}")
            return
        StorageService.delete_quietly(path)
