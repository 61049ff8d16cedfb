"""
Repository layer abstracting document storage (SQLAlchemy vs Firebase Firestore).

Every record is a document addressed by a collection path such as
``weddings/<wedding_id>/guests``. With Firebase enabled the documents live in
Firestore; otherwise they are stored as JSON rows in the ``documents`` table.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import Document
from app.services.firebase_client import get_firestore_client

# Firestore rejects batches with more than 500 writes
FIRESTORE_BATCH_LIMIT = 500

_ID_ALPHABET = string.ascii_letters + string.digits


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def new_document_id() -> str:
    """Generate a Firestore-style 20 character document id"""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(20))


def now_iso() -> str:
    return datetime.utcnow().isoformat()


def _strip_id(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k != "id"}


def _sort_documents(docs: List[Dict[str, Any]], field: str, descending: bool) -> List[Dict[str, Any]]:
    present = [d for d in docs if d.get(field) is not None]
    missing = [d for d in docs if d.get(field) is None]
    present.sort(key=lambda d: d[field], reverse=descending)
    return present + missing


class DocumentRepo:
    """CRUD access to one collection of documents"""

    def __init__(self, db: Optional[Session], *path: str):
        self.db = db
        self.path = "/".join(path)

    # -------- Firestore helpers --------

    def _collection_fs(self):
        fs = get_firestore_client()
        return fs.collection(self.path)

    @staticmethod
    def _snapshot_to_dict(snapshot) -> Dict[str, Any]:
        data = snapshot.to_dict() or {}
        data["id"] = snapshot.id
        return data

    # -------- SQL helpers --------

    def _row(self, doc_id: str) -> Optional[Document]:
        return self.db.query(Document).filter(
            Document.collection == self.path,
            Document.doc_id == doc_id
        ).first()

    @staticmethod
    def _row_to_dict(row: Document) -> Dict[str, Any]:
        data = dict(row.data or {})
        data["id"] = row.doc_id
        return data

    # -------- Operations --------

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        if not doc_id:
            return None
        if use_firestore():
            snapshot = self._collection_fs().document(doc_id).get()
            return self._snapshot_to_dict(snapshot) if snapshot.exists else None

        row = self._row(doc_id)
        return self._row_to_dict(row) if row else None

    def list(
        self,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        """List documents matching all equality filters.

        Sorting happens after the fetch so Firestore never needs a composite index.
        """
        where = where or {}
        if use_firestore():
            query = self._collection_fs()
            for field, value in where.items():
                query = query.where(field, "==", value)
            docs = [self._snapshot_to_dict(s) for s in query.get()]
        else:
            rows = self.db.query(Document).filter(Document.collection == self.path).all()
            docs = [
                d for d in (self._row_to_dict(r) for r in rows)
                if all(d.get(field) == value for field, value in where.items())
            ]

        if order_by:
            docs = _sort_documents(docs, order_by, descending)
        return docs

    def count(self, where: Optional[Dict[str, Any]] = None) -> int:
        return len(self.list(where=where))

    def add(self, data: Dict[str, Any], doc_id: Optional[str] = None) -> Dict[str, Any]:
        doc_id = doc_id or new_document_id()
        payload = _strip_id(data)
        if use_firestore():
            self._collection_fs().document(doc_id).set(payload)
        else:
            self.db.add(Document(collection=self.path, doc_id=doc_id, data=payload))
            self.db.commit()
        return {**payload, "id": doc_id}

    def set(self, doc_id: str, data: Dict[str, Any], merge: bool = False) -> Dict[str, Any]:
        payload = _strip_id(data)
        if use_firestore():
            self._collection_fs().document(doc_id).set(payload, merge=merge)
            return self.get(doc_id)

        row = self._row(doc_id)
        if row is None:
            row = Document(collection=self.path, doc_id=doc_id, data=payload)
            self.db.add(row)
        else:
            # Reassign so SQLAlchemy notices the JSON change
            row.data = {**(row.data or {}), **payload} if merge else payload
        self.db.commit()
        return self._row_to_dict(row)

    def update(self, doc_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge fields into an existing document. Returns None when it does not exist."""
        payload = _strip_id(updates)
        if use_firestore():
            ref = self._collection_fs().document(doc_id)
            if not ref.get().exists:
                return None
            ref.update(payload)
            return self.get(doc_id)

        row = self._row(doc_id)
        if row is None:
            return None
        row.data = {**(row.data or {}), **payload}
        self.db.commit()
        return self._row_to_dict(row)

    def delete(self, doc_id: str) -> bool:
        if use_firestore():
            ref = self._collection_fs().document(doc_id)
            if not ref.get().exists:
                return False
            ref.delete()
            return True

        row = self._row(doc_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def add_many(self, items: Iterable[Dict[str, Any]]) -> List[str]:
        """Write several new documents in one batch and return their ids"""
        prepared = [(new_document_id(), _strip_id(item)) for item in items]
        if not prepared:
            return []

        if use_firestore():
            fs = get_firestore_client()
            collection = self._collection_fs()
            for start in range(0, len(prepared), FIRESTORE_BATCH_LIMIT):
                batch = fs.batch()
                for doc_id, payload in prepared[start:start + FIRESTORE_BATCH_LIMIT]:
                    batch.set(collection.document(doc_id), payload)
                batch.commit()
        else:
            try:
                for doc_id, payload in prepared:
                    self.db.add(Document(collection=self.path, doc_id=doc_id, data=payload))
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        return [doc_id for doc_id, _ in prepared]

    def delete_many(self, doc_ids: Iterable[str]) -> int:
        """Delete several documents in one batch and return the number removed"""
        doc_ids = [d for d in doc_ids if d]
        if not doc_ids:
            return 0

        if use_firestore():
            fs = get_firestore_client()
            collection = self._collection_fs()
            deleted = 0
            for start in range(0, len(doc_ids), FIRESTORE_BATCH_LIMIT):
                batch = fs.batch()
                for doc_id in doc_ids[start:start + FIRESTORE_BATCH_LIMIT]:
                    batch.delete(collection.document(doc_id))
                    deleted += 1
                batch.commit()
            return deleted

        try:
            deleted = self.db.query(Document).filter(
                Document.collection == self.path,
                Document.doc_id.in_(doc_ids)
            ).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return deleted


# -------- Collection shortcuts --------

def weddings_repo(db: Optional[Session]) -> DocumentRepo:
    return DocumentRepo(db, "weddings")


def wedding_collection(db: Optional[Session], wedding_id: str, name: str) -> DocumentRepo:
    """Subcollection of a wedding: events, guests, rsvps, gallery, memories, updates, invitations"""
    return DocumentRepo(db, "weddings", wedding_id, name)
