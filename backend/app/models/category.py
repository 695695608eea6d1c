"""
Category model

Self-referential tree through parent_id. The ORM relationship is deliberately
absent: parents are looked up by id, and cycles are rejected by
CatalogService before anything is written.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from app.core.database import Base
from app.core.utils import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"
