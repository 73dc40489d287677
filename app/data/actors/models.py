"""Actor model."""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Actor(Base):
    """Someone (or something) that uses the product. Ordered within its project."""

    __tablename__ = "actors"

    id = Column(String, primary_key=True, default=lambda: generate_id("actor"))
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    author_id = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    usecases = relationship("Usecase", back_populates="actor", cascade="all, delete-orphan")
