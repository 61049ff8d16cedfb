"""
Memory wall service
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.services.gallery_service import empty_reactions, toggled_reactions
from app.services.repositories import now_iso, wedding_collection
from app.utils.responses import not_found_error, validation_error

logger = logging.getLogger(__name__)


class MemoryService:
    """Service for guest memories"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "memories")

    @staticmethod
    def create_memory(db: Session, wedding_id: str, name: str, message: str) -> Dict[str, Any]:
        name = (name or "").strip()
        message = (message or "").strip()
        if not name or not message:
            raise validation_error("Please enter your name and a message")

        return MemoryService._repo(db, wedding_id).add({
            "name": name,
            "message": message,
            "reactions": empty_reactions(),
            "created_at": now_iso()
        })

    @staticmethod
    def list_memories(db: Session, wedding_id: str) -> List[Dict[str, Any]]:
        memories = MemoryService._repo(db, wedding_id).list(order_by="created_at", descending=True)
        for memory in memories:
            memory["reactions"] = {**empty_reactions(), **(memory.get("reactions") or {})}
        return memories

    @staticmethod
    def toggle_reaction(db: Session, wedding_id: str, memory_id: str, kind: str, guest_id: str) -> Dict[str, Any]:
        repo = MemoryService._repo(db, wedding_id)
        memory = repo.get(memory_id)
        if not memory:
            raise not_found_error("Memory")
        return repo.update(memory_id, {"reactions": toggled_reactions(memory.get("reactions"), kind, guest_id)})

    @staticmethod
    def delete_memory(db: Session, wedding_id: str, memory_id: str) -> None:
        if not MemoryService._repo(db, wedding_id).delete(memory_id):
            raise not_found_error("Memory")
