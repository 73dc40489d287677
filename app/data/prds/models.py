"""Product requirement document model."""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Prd(Base):
    """Free-form PRD contents, one per project."""

    __tablename__ = "prds"

    id = Column(String, primary_key=True, default=lambda: generate_id("prd"))
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    contents = Column(Text, nullable=False, default="")
    author_id = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
