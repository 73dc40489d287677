"""Database models for the glossary / policy / PRD workspace."""
from app.data.organizations.models import Organization, Project, Membership
from app.data.glossary.models import Glossary, GlossaryLink
from app.data.actors.models import Actor
from app.data.usecases.models import Usecase
from app.data.features.models import Feature
from app.data.policies.models import Policy, PolicyLink, PolicyTerm, FeaturePolicy
from app.data.prds.models import Prd

__all__ = [
    "Organization",
    "Project",
    "Membership",
    "Glossary",
    "GlossaryLink",
    "Actor",
    "Usecase",
    "Feature",
    "Policy",
    "PolicyLink",
    "PolicyTerm",
    "FeaturePolicy",
    "Prd",
]
