"""Usecase model."""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Usecase(Base):
    """A goal an actor pursues. Ordered within its actor."""

    __tablename__ = "usecases"

    id = Column(String, primary_key=True, default=lambda: generate_id("uc"))
    actor_id = Column(String, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    author_id = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    actor = relationship("Actor", back_populates="usecases")
    features = relationship("Feature", back_populates="usecase", cascade="all, delete-orphan")
