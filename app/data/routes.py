"""Data API routes - organizations, projects and their knowledge base."""
from fastapi import APIRouter

from app.data.organizations import routes as organization_routes
from app.data.glossary import routes as glossary_routes
from app.data.actors import routes as actor_routes
from app.data.usecases import routes as usecase_routes
from app.data.features import routes as feature_routes
from app.data.policies import routes as policy_routes
from app.data.prds import routes as prd_routes

router = APIRouter()

router.include_router(organization_routes.router, tags=["Organizations"])
router.include_router(glossary_routes.router, tags=["Glossary"])
router.include_router(actor_routes.router, tags=["Actors"])
router.include_router(usecase_routes.router, tags=["Usecases"])
router.include_router(feature_routes.router, tags=["Features"])
router.include_router(policy_routes.router, tags=["Policies"])
router.include_router(prd_routes.router, tags=["PRD"])
