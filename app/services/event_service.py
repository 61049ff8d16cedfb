"""
Event service
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.schemas.event import EventCreate, EventUpdate
from app.services.repositories import now_iso, wedding_collection
from app.utils.responses import not_found_error, validation_error

logger = logging.getLogger(__name__)

NO_EVENTS = "No events"
UNKNOWN_EVENT = "Unknown"


class EventService:
    """Service for wedding events"""

    @staticmethod
    def _repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "events")

    @staticmethod
    def _clean_faqs(faqs) -> List[Dict[str, str]]:
        cleaned = []
        for faq in faqs or []:
            question = faq.question.strip()
            answer = faq.answer.strip()
            if not question and not answer:
                continue
            if not question:
                raise validation_error("Every FAQ needs a question")
            cleaned.append({"question": question, "answer": answer})
        return cleaned

    @staticmethod
    def list_events(db: Session, wedding_id: str) -> List[Dict[str, Any]]:
        """Events ordered by date"""
        return EventService._repo(db, wedding_id).list(order_by="date")

    @staticmethod
    def get_event(db: Session, wedding_id: str, event_id: str) -> Dict[str, Any]:
        event = EventService._repo(db, wedding_id).get(event_id)
        if not event:
            raise not_found_error("Event")
        return event

    @staticmethod
    def create_event(db: Session, wedding_id: str, data: EventCreate) -> Dict[str, Any]:
        name = data.name.strip()
        if not name:
            raise validation_error("Event name is required")

        now = now_iso()
        event = EventService._repo(db, wedding_id).add({
            "name": name,
            "description": data.description.strip(),
            "date": data.date.isoformat(),
            "time": data.time.strip(),
            "location": data.location.strip(),
            "location_address": data.location_address.strip(),
            "dress_code": data.dress_code.strip(),
            "faqs": EventService._clean_faqs(data.faqs),
            "created_at": now,
            "updated_at": now
        })
        logger.info(f"Created event {event['id']} for wedding {wedding_id}")
        return event

    @staticmethod
    def update_event(db: Session, wedding_id: str, event_id: str, data: EventUpdate) -> Dict[str, Any]:
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates:
            updates["name"] = (updates["name"] or "").strip()
            if not updates["name"]:
                raise validation_error("Event name is required")
        if "date" in updates:
            if updates["date"] is None:
                raise validation_error("Event date is required")
            updates["date"] = updates["date"].isoformat()
        if "faqs" in updates:
            updates["faqs"] = EventService._clean_faqs(data.faqs)
        for field in ("description", "time", "location", "location_address", "dress_code"):
            if field in updates:
                updates[field] = (updates[field] or "").strip()
        updates["updated_at"] = now_iso()

        event = EventService._repo(db, wedding_id).update(event_id, updates)
        if event is None:
            raise not_found_error("Event")
        return event

    @staticmethod
    def delete_event(db: Session, wedding_id: str, event_id: str) -> None:
        if not EventService._repo(db, wedding_id).delete(event_id):
            raise not_found_error("Event")
        logger.info(f"Deleted event {event_id} from wedding {wedding_id}")

    @staticmethod
    def event_names(event_ids: Optional[Iterable[str]], events: List[Dict[str, Any]]) -> str:
        """Comma-separated event names; dangling references render as Unknown"""
        event_ids = list(event_ids or [])
        if not event_ids:
            return NO_EVENTS
        by_id = {e["id"]: e.get("name") for e in events}
        return ", ".join(by_id.get(event_id) or UNKNOWN_EVENT for event_id in event_ids)
