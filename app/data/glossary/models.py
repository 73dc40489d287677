"""Glossary term models."""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Glossary(Base):
    """A shared vocabulary term, ordered by `sequence` within its project."""

    __tablename__ = "glossaries"

    id = Column(String, primary_key=True, default=lambda: generate_id("term"))
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    definition = Column(Text, nullable=False)
    author_id = Column(String, nullable=False)

    # Dense 1..N within project_id
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    links = relationship("GlossaryLink", back_populates="glossary", cascade="all, delete-orphan")


class GlossaryLink(Base):
    """Reference link attached to a glossary term."""

    __tablename__ = "glossary_links"

    id = Column(String, primary_key=True, default=lambda: generate_id("glink"))
    glossary_id = Column(String, ForeignKey("glossaries.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(Text, nullable=False)
    type = Column(String, nullable=False, default="github")  # "github"
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    glossary = relationship("Glossary", back_populates="links")
