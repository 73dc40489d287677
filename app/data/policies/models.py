"""Policy models: policies, their links, term tags and feature bindings."""
from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.data.base import generate_id


class Policy(Base):
    """A business rule. Belongs to a project, bound to any number of features."""

    __tablename__ = "policies"

    id = Column(String, primary_key=True, default=lambda: generate_id("pol"))
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    contents = Column(Text, nullable=False)
    author_id = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    links = relationship("PolicyLink", back_populates="policy", cascade="all, delete-orphan")
    terms = relationship("PolicyTerm", back_populates="policy", cascade="all, delete-orphan")
    feature_bindings = relationship("FeaturePolicy", back_populates="policy", cascade="all, delete-orphan")


class PolicyLink(Base):
    """Context or general reference link attached to a policy."""

    __tablename__ = "policy_links"

    id = Column(String, primary_key=True, default=lambda: generate_id("plink"))
    policy_id = Column(String, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(Text, nullable=False)
    type = Column(String, nullable=False)  # "context" | "general"
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="links")


class PolicyTerm(Base):
    """Tags a policy with a glossary term."""

    __tablename__ = "policy_terms"
    __table_args__ = (
        UniqueConstraint("policy_id", "glossary_id", name="uq_policy_terms_policy_glossary"),
    )

    id = Column(String, primary_key=True, default=lambda: generate_id("pterm"))
    policy_id = Column(String, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True)
    glossary_id = Column(String, ForeignKey("glossaries.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="terms")
    glossary = relationship("Glossary")


class FeaturePolicy(Base):
    """Binds a policy to a feature. Ordered within its feature."""

    __tablename__ = "feature_policies"
    __table_args__ = (
        UniqueConstraint("feature_id", "policy_id", name="uq_feature_policies_feature_policy"),
    )

    id = Column(String, primary_key=True, default=lambda: generate_id("fpol"))
    feature_id = Column(String, ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True)
    policy_id = Column(String, ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    feature = relationship("Feature", back_populates="policy_bindings")
    policy = relationship("Policy", back_populates="feature_bindings")
