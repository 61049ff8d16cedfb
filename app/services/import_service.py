"""
CSV guest import: parse, preview, batched commit and time-boxed undo
"""

import io
import logging
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.guest import ImportRow
from app.services.event_service import EventService
from app.services.guest_service import clean_optional
from app.services.repositories import new_document_id, wedding_collection
from app.utils.responses import conflict_error, not_found_error, validation_error
from app.utils.security import AuthUser

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    "name": ["name", "full name", "guest name"],
    "email": ["email", "email address", "e-mail"],
    "phone": ["phone", "mobile", "phone number"],
    "events": ["events", "event"],
    "email_consent": ["email consent", "email_consent", "consent"],
}

TRUE_VALUES = {"yes", "y", "true", "1", "x"}

EVENT_SEPARATORS = re.compile(r"[;,|]")

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def normalize_phone(value: Optional[str]) -> str:
    return re.sub(r"[^\d+]", "", value or "")


def dedup_key(email: Optional[str], phone: Optional[str]) -> Optional[str]:
    """Composite email|phone key, None when both are blank"""
    email = normalize_email(email)
    phone = normalize_phone(phone)
    if not email and not phone:
        return None
    return f"{email}|{phone}"


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class ImportService:
    """Service for bulk guest imports"""

    @staticmethod
    def _imports_repo(db: Session, wedding_id: str):
        return wedding_collection(db, wedding_id, "guest_imports")

    @staticmethod
    def csv_template() -> str:
        """Header row plus sample rows"""
        df = pd.DataFrame(columns=["name", "email", "phone", "events", "email_consent"])

        sample_data = [
            ["Jane Smith", "jane@example.com", "+1 555 0100", "Ceremony; Reception", "yes"],
            ["John Doe", "", "+1 555 0101", "Reception", "no"],
            ["Alex Lee", "alex@example.com", "", "", "yes"],
        ]
        for row in sample_data:
            df.loc[len(df)] = row

        return df.to_csv(index=False)

    @staticmethod
    def _column_mapping(columns) -> Dict[str, str]:
        mapping = {}
        for col in columns:
            col_lower = str(col).lower().strip()
            for field, aliases in COLUMN_ALIASES.items():
                if col_lower in aliases and field not in mapping:
                    mapping[field] = col
        return mapping

    @staticmethod
    def _decode(content: bytes) -> str:
        """UTF-8 (with or without BOM), else Windows-1252 as saved by Excel"""
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass
        try:
            text = content.decode("cp1252")
        except UnicodeDecodeError:
            raise validation_error("Could not read CSV file: please save it as UTF-8")
        logger.info("Guest CSV is not UTF-8; read it as Windows-1252")
        return text

    @staticmethod
    def parse_csv(content: bytes) -> List[Dict[str, Any]]:
        """Read a guest CSV (comma, semicolon or tab separated) into row dicts"""
        text = ImportService._decode(content)
        if not text.strip():
            raise validation_error("The CSV file is empty")

        # Blank lines above the header shift every file line number
        body = text.lstrip("\r\n")
        leading_lines = text[:len(text) - len(body)].count("\n")

        header = body.splitlines()[0]
        sniff = any(sep in header for sep in (",", ";", "\t"))
        try:
            df = pd.read_csv(
                io.StringIO(body),
                sep=None if sniff else ",",
                engine="python",
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False
            )
        except Exception as e:
            raise validation_error(f"Could not read CSV file: {e}")
        # blank lines come back as rows of missing cells
        df = df.fillna("")

        mapping = ImportService._column_mapping(df.columns)
        if "name" not in mapping:
            raise validation_error("CSV must have a 'name' column")

        rows = []
        for position, (_, record) in enumerate(df.iterrows()):
            values = {
                field: str(record[col]).strip()
                for field, col in mapping.items()
            }
            if not any(values.values()):
                continue
            rows.append({
                "row_number": position + 2 + leading_lines,
                "name": values.get("name", ""),
                "email": values.get("email", ""),
                "phone": values.get("phone", ""),
                "events": values.get("events", ""),
                "email_consent": values.get("email_consent", "").lower() in TRUE_VALUES
            })
        return rows

    @staticmethod
    def map_events(raw: str, events: List[Dict[str, Any]]):
        """Map a free-text events cell to event ids by case-insensitive name"""
        by_name = {(e.get("name") or "").strip().lower(): e["id"] for e in events}
        event_ids, unknown = [], []
        for name in EVENT_SEPARATORS.split(raw or ""):
            name = name.strip()
            if not name:
                continue
            event_id = by_name.get(name.lower())
            if event_id is None:
                unknown.append(name)
            elif event_id not in event_ids:
                event_ids.append(event_id)
        return event_ids, unknown

    @staticmethod
    def build_preview(
        rows: List[Dict[str, Any]],
        events: List[Dict[str, Any]],
        existing_guests: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Validate rows and mark each one ok or skipped with its reasons"""
        existing_keys = {
            key for key in (dedup_key(g.get("email"), g.get("phone")) for g in existing_guests)
            if key
        }
        first_seen: Dict[str, int] = {}
        preview = []

        for row in rows:
            name = (row.get("name") or "").strip()
            email = (row.get("email") or "").strip()
            phone = (row.get("phone") or "").strip()
            event_ids, unknown = ImportService.map_events(row.get("events", ""), events)
            key = dedup_key(email, phone)

            reasons = []
            if not name:
                reasons.append("Missing name")
            if unknown:
                reasons.append(f"Unknown event(s): {', '.join(unknown)}")
            if key:
                if key in first_seen:
                    reasons.append(f"Duplicate of row {first_seen[key]}")
                else:
                    first_seen[key] = row["row_number"]
                if key in existing_keys:
                    reasons.append("Already on the guest list")

            preview.append({
                "row_number": row["row_number"],
                "name": name,
                "email": email,
                "phone": phone,
                "events": row.get("events", ""),
                "event_ids": event_ids,
                "email_consent": bool(row.get("email_consent")),
                "dedup_key": key,
                "status": STATUS_SKIPPED if reasons else STATUS_OK,
                "reasons": reasons
            })

        ok_count = sum(1 for r in preview if r["status"] == STATUS_OK)
        return {
            "rows": preview,
            "total": len(preview),
            "ok": ok_count,
            "skipped": len(preview) - ok_count
        }

    @staticmethod
    def preview_import(db: Session, wedding_id: str, content: bytes) -> Dict[str, Any]:
        rows = ImportService.parse_csv(content)
        return ImportService.build_preview(
            rows,
            EventService.list_events(db, wedding_id),
            wedding_collection(db, wedding_id, "guests").list()
        )

    @staticmethod
    def commit_import(
        db: Session,
        wedding_id: str,
        user: AuthUser,
        rows: List[ImportRow],
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Write every valid row in one batch and open the undo window"""
        now = now or datetime.utcnow()
        preview = ImportService.build_preview(
            [row.model_dump() for row in rows],
            EventService.list_events(db, wedding_id),
            wedding_collection(db, wedding_id, "guests").list()
        )
        survivors = [r for r in preview["rows"] if r["status"] == STATUS_OK]
        skipped_rows = [r for r in preview["rows"] if r["status"] == STATUS_SKIPPED]

        if not survivors:
            return {
                "import_id": None,
                "imported": 0,
                "skipped": len(skipped_rows),
                "skipped_rows": skipped_rows,
                "undo_expires_at": None
            }

        import_id = new_document_id()
        timestamp = now.isoformat()
        guest_ids = wedding_collection(db, wedding_id, "guests").add_many([
            {
                "name": r["name"],
                "email": clean_optional(r["email"]),
                "phone": clean_optional(r["phone"]),
                "events_invited_to": r["event_ids"],
                "email_consent": r["email_consent"],
                "import_id": import_id,
                "created_at": timestamp,
                "updated_at": timestamp
            }
            for r in survivors
        ])

        expires_at = (now + timedelta(seconds=settings.IMPORT_UNDO_SECONDS)).isoformat()
        ImportService._imports_repo(db, wedding_id).add({
            "guest_ids": guest_ids,
            "created_at": timestamp,
            "expires_at": expires_at,
            "undone": False,
            "created_by": user.uid
        }, doc_id=import_id)

        logger.info(f"Imported {len(guest_ids)} guests into wedding {wedding_id} ({len(skipped_rows)} skipped)")
        return {
            "import_id": import_id,
            "imported": len(guest_ids),
            "skipped": len(skipped_rows),
            "skipped_rows": skipped_rows,
            "undo_expires_at": expires_at
        }

    @staticmethod
    def undo_import(
        db: Session,
        wedding_id: str,
        import_id: str,
        now: Optional[datetime] = None
    ) -> int:
        """Delete the guests written by an import while the undo window is open"""
        now = now or datetime.utcnow()
        repo = ImportService._imports_repo(db, wedding_id)
        record = repo.get(import_id)
        if not record:
            raise not_found_error("Import")
        if record.get("undone"):
            raise conflict_error("This import has already been undone")
        if now > _parse_datetime(record["expires_at"]):
            raise conflict_error("Undo window has expired")

        deleted = wedding_collection(db, wedding_id, "guests").delete_many(record.get("guest_ids") or [])
        repo.update(import_id, {"undone": True, "undone_at": now.isoformat()})
        logger.info(f"Undid import {import_id} for wedding {wedding_id}: {deleted} guests removed")
        return deleted
