"""Feature model."""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Feature(Base):
    """A product capability realising a usecase. Ordered within its usecase."""

    __tablename__ = "features"

    id = Column(String, primary_key=True, default=lambda: generate_id("feat"))
    usecase_id = Column(String, ForeignKey("usecases.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    author_id = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    usecase = relationship("Usecase", back_populates="features")
    policy_bindings = relationship("FeaturePolicy", back_populates="feature", cascade="all, delete-orphan")
