"""
Document model - generic storage for Firestore-shaped documents
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint

from app.core.db import Base

class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String(255), nullable=False, index=True)  # e.g. weddings/<id>/guests
    doc_id = Column(String(64), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc"),
    )
