"""
Document: one schemaless JSON record inside a named collection.

The table stands in for a hosted document database: (collection, id) is the
address, data holds the record exactly as the application wrote it, and
version increments on every write so callers can compare-and-set.
"""
from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from app.db.base import Base


class Document(Base):
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    # Insertion order inside a collection; timestamps are too coarse on SQLite
    seq = Column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_documents_collection_seq", "collection", "seq"),)

    def __repr__(self):
        return f"<Document {self.collection}/{self.id} v{self.version}>"
