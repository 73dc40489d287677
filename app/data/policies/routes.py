"""Policy API routes - policies, term tags, links and feature bindings."""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from typing import Dict, List, Sequence, Tuple

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.features.routes import get_feature_with_project
from app.data.policies.schemas import (
    FeaturePolicyResponse,
    PolicyCreate,
    PolicyDeleteResponse,
    PolicyResponse,
    PolicyUpdate,
)
from app.database import get_db
from app.sequencing.errors import PartialReorderError, ReorderError
from app.sequencing.models import ReorderState
from app.sequencing.routes import get_coordinator, to_response
from app.sequencing.schemas import ReorderResponse, SequencedItemResponse

logger = logging.getLogger(__name__)

router = APIRouter()

POLICY_LOAD_OPTIONS = (
    selectinload(models.Policy.links),
    selectinload(models.Policy.terms),
    selectinload(models.Policy.feature_bindings),
)


def _clean_links(urls: Sequence[str]) -> List[str]:
    return [url.strip() for url in urls if url.strip()]


async def _get_policy(db: AsyncSession, policy_id: str) -> models.Policy:
    result = await db.execute(
        select(models.Policy)
        .options(*POLICY_LOAD_OPTIONS)
        .where(models.Policy.id == policy_id)
        .execution_options(populate_existing=True)
    )
    policy = result.scalar_one_or_none()
    if not policy:
        raise HTTPException(status_code=404, detail="Policy not found")
    return policy


async def _validate_features(db: AsyncSession, project_id: str, feature_ids: Sequence[str]) -> None:
    if not feature_ids:
        return
    result = await db.execute(
        select(models.Feature.id)
        .join(models.Usecase, models.Usecase.id == models.Feature.usecase_id)
        .join(models.Actor, models.Actor.id == models.Usecase.actor_id)
        .where(models.Actor.project_id == project_id, models.Feature.id.in_(feature_ids))
    )
    unknown = set(feature_ids) - set(result.scalars().all())
    if unknown:
        raise HTTPException(status_code=400, detail=f"Features not in project: {', '.join(sorted(unknown))}")


async def _validate_glossaries(db: AsyncSession, project_id: str, glossary_ids: Sequence[str]) -> None:
    if not glossary_ids:
        return
    result = await db.execute(
        select(models.Glossary.id).where(
            models.Glossary.project_id == project_id,
            models.Glossary.id.in_(glossary_ids),
        )
    )
    unknown = set(glossary_ids) - set(result.scalars().all())
    if unknown:
        raise HTTPException(status_code=400, detail=f"Glossary terms not in project: {', '.join(sorted(unknown))}")


def _add_links(db: AsyncSession, policy_id: str, context_links: Sequence[str], general_links: Sequence[str]) -> None:
    for url in _clean_links(context_links):
        db.add(models.PolicyLink(policy_id=policy_id, url=url, type="context"))
    for url in _clean_links(general_links):
        db.add(models.PolicyLink(policy_id=policy_id, url=url, type="general"))


async def _bind_to_features(db: AsyncSession, policy_id: str, feature_ids: Sequence[str]) -> None:
    """Append the policy to the end of each feature's list."""
    coordinator = get_coordinator(db, "feature_policies")
    for feature_id in dict.fromkeys(feature_ids):
        db.add(models.FeaturePolicy(
            feature_id=feature_id,
            policy_id=policy_id,
            sequence=await coordinator.next_sequence(feature_id),
        ))
        await db.flush()


async def _close_gaps(db: AsyncSession, bindings: Sequence[Tuple[str, str]]) -> Tuple[List[ReorderResponse], List[str]]:
    """Renumber each feature's policy list after its (feature_id, binding_id) rows were deleted.

    Runs only once the rows are committed. A feature that cannot be renumbered
    keeps its gap until the next compaction and is reported in the second list;
    a partial failure reports that feature's persisted order instead.
    """
    coordinator = get_coordinator(db, "feature_policies")
    renumbered: List[ReorderResponse] = []
    failed_feature_ids: List[str] = []
    for feature_id, binding_id in bindings:
        try:
            result = await coordinator.delete(feature_id, binding_id)
        except PartialReorderError as e:
            logger.warning(f"Policy list of feature {feature_id} only partly renumbered: {e}")
            renumbered.append(ReorderResponse(
                parent_scope_id=feature_id,
                state=ReorderState.PARTIALLY_FAILED.value,
                writes=0,
                items=[SequencedItemResponse(**item.to_dict()) for item in e.items],
            ))
        except ReorderError as e:
            logger.error(f"Policy list of feature {feature_id} not renumbered: {e}")
            failed_feature_ids.append(feature_id)
        else:
            renumbered.append(to_response(result))
    return renumbered, failed_feature_ids


@router.get("/projects/{project_id}/policies", response_model=List[PolicyResponse])
async def list_policies(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """All policies of a project, newest first."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(
        select(models.Policy)
        .options(*POLICY_LOAD_OPTIONS)
        .where(models.Policy.project_id == project_id)
        .order_by(models.Policy.updated_at.desc())
    )
    return result.scalars().all()


@router.get("/features/{feature_id}/policies", response_model=List[FeaturePolicyResponse])
async def list_feature_policies(
    feature_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Policies bound to a feature, in the feature's sequence order."""
    _, project_id = await get_feature_with_project(db, feature_id)
    await require_project_member(db, project_id, current_user)

    result = await db.execute(
        select(models.FeaturePolicy)
        .options(
            selectinload(models.FeaturePolicy.policy).selectinload(models.Policy.links),
            selectinload(models.FeaturePolicy.policy).selectinload(models.Policy.terms),
            selectinload(models.FeaturePolicy.policy).selectinload(models.Policy.feature_bindings),
        )
        .where(models.FeaturePolicy.feature_id == feature_id)
        .order_by(models.FeaturePolicy.sequence.asc(), models.FeaturePolicy.created_at.asc())
    )
    return result.scalars().all()


@router.post("/projects/{project_id}/policies", response_model=PolicyResponse)
async def create_policy(
    project_id: str,
    data: PolicyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create a policy with its links, term tags and feature bindings."""
    await require_project_member(db, project_id, current_user)
    await _validate_features(db, project_id, data.feature_ids)
    await _validate_glossaries(db, project_id, data.glossary_ids)

    policy = models.Policy(
        project_id=project_id,
        contents=data.contents.strip(),
        author_id=current_user.id,
    )
    db.add(policy)
    await db.flush()

    _add_links(db, policy.id, data.context_links, data.general_links)
    for glossary_id in dict.fromkeys(data.glossary_ids):
        db.add(models.PolicyTerm(policy_id=policy.id, glossary_id=glossary_id))
    await _bind_to_features(db, policy.id, data.feature_ids)

    await db.commit()
    return await _get_policy(db, policy.id)


@router.put("/policies/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: str,
    data: PolicyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Edit a policy.

    Re-binding keeps the position of features that stay bound, appends the
    policy to newly bound features and closes the gap in features it leaves.
    """
    policy = await _get_policy(db, policy_id)
    project_id = policy.project_id
    await require_project_member(db, project_id, current_user)

    if data.feature_ids is not None:
        await _validate_features(db, project_id, data.feature_ids)
    if data.glossary_ids is not None:
        await _validate_glossaries(db, project_id, data.glossary_ids)

    if data.contents is not None:
        policy.contents = data.contents.strip()

    if data.context_links is not None or data.general_links is not None:
        kept: Dict[str, List[str]] = {"context": [], "general": []}
        for link in policy.links:
            kept.setdefault(link.type, []).append(link.url)
        await db.execute(delete(models.PolicyLink).where(models.PolicyLink.policy_id == policy_id))
        _add_links(
            db,
            policy_id,
            data.context_links if data.context_links is not None else kept["context"],
            data.general_links if data.general_links is not None else kept["general"],
        )

    if data.glossary_ids is not None:
        await db.execute(delete(models.PolicyTerm).where(models.PolicyTerm.policy_id == policy_id))
        for glossary_id in dict.fromkeys(data.glossary_ids):
            db.add(models.PolicyTerm(policy_id=policy_id, glossary_id=glossary_id))

    await db.commit()

    if data.feature_ids is not None:
        wanted = list(dict.fromkeys(data.feature_ids))
        current = {binding.feature_id: binding for binding in policy.feature_bindings}
        dropped = [(feature_id, binding.id) for feature_id, binding in current.items() if feature_id not in wanted]
        if dropped:
            await db.execute(
                delete(models.FeaturePolicy).where(models.FeaturePolicy.id.in_([binding_id for _, binding_id in dropped]))
            )
            await db.commit()
            await _close_gaps(db, dropped)
        await _bind_to_features(db, policy_id, [feature_id for feature_id in wanted if feature_id not in current])
        await db.commit()

    return await _get_policy(db, policy_id)


@router.delete("/policies/{policy_id}", response_model=PolicyDeleteResponse)
async def delete_policy(
    policy_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a policy, closing its gap in every feature it was bound to."""
    policy = await _get_policy(db, policy_id)
    await require_project_member(db, policy.project_id, current_user)
    bindings = [(binding.feature_id, binding.id) for binding in policy.feature_bindings]

    await db.execute(delete(models.PolicyLink).where(models.PolicyLink.policy_id == policy_id))
    await db.execute(delete(models.PolicyTerm).where(models.PolicyTerm.policy_id == policy_id))
    await db.execute(delete(models.FeaturePolicy).where(models.FeaturePolicy.policy_id == policy_id))
    await db.execute(delete(models.Policy).where(models.Policy.id == policy_id))
    await db.commit()

    renumbered, failed_feature_ids = await _close_gaps(db, bindings)
    return PolicyDeleteResponse(
        message="Policy deleted successfully",
        renumbered=renumbered,
        failed_feature_ids=failed_feature_ids,
    )
