"""Registry of sequenced entity kinds and the column that scopes each one."""
from dataclasses import dataclass
from typing import Dict, Optional

from app.data.models import Glossary, Actor, Usecase, Feature, FeaturePolicy


@dataclass(frozen=True)
class SequenceScope:
    """Where a sequenced entity lives and which column groups its siblings."""
    kind: str
    model: type
    parent_attr: str
    label_attr: Optional[str] = None

    @property
    def parent_column(self):
        return getattr(self.model, self.parent_attr)

    @property
    def label_column(self):
        return getattr(self.model, self.label_attr) if self.label_attr else None


SCOPES: Dict[str, SequenceScope] = {
    "glossaries": SequenceScope("glossaries", Glossary, "project_id", "name"),
    "actors": SequenceScope("actors", Actor, "project_id", "name"),
    "usecases": SequenceScope("usecases", Usecase, "actor_id", "name"),
    "features": SequenceScope("features", Feature, "usecase_id", "name"),
    "feature_policies": SequenceScope("feature_policies", FeaturePolicy, "feature_id"),
}


def get_scope(kind: str) -> SequenceScope:
    """Look up a scope by kind. Raises KeyError for unknown kinds."""
    return SCOPES[kind]
