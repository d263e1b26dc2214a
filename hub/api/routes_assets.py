"""
Routes des assets: création, édition, consultation, files de contenus,
soumission en revue et transitions manuelles de statut.
"""

from fastapi import APIRouter, Depends, Response

from hub.api.deps import (
    current_user_dep,
    get_asset_service,
    get_workflow_service,
)
from hub.api.schemas import AssetCreate, AssetDetailOut, AssetUpdate, StatusChange
from hub.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from hub.domain.entities import Asset, AssetStatus, ContentCategory, User
from hub.domain.services import AssetService
from hub.domain.workflow import WorkflowService

router = APIRouter(tags=["assets"])
asset_service_dep = Depends(get_asset_service)
workflow_service_dep = Depends(get_workflow_service)


@router.post(
    "/projects/{project_id}/assets", response_model=Asset, status_code=HTTP_CREATED
)
def create_asset(
    project_id: str,
    payload: AssetCreate,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    """Crée un asset en brouillon (version 1) dans le projet."""
    return service.create_asset(
        project_id, user.id, payload.fields(), payload.athlete_ids, payload.club_ids
    )


@router.get("/projects/{project_id}/assets", response_model=list[Asset])
def list_queue(
    project_id: str,
    status: AssetStatus | None = None,
    category: ContentCategory | None = None,
    phase_id: str | None = None,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    """File de contenus du projet, du plus récemment modifié au plus ancien."""
    return service.list_queue(
        project_id, user.id, status=status, category=category, phase_id=phase_id
    )


@router.get("/projects/{project_id}/library", response_model=list[Asset])
def list_library(
    project_id: str,
    status: AssetStatus | None = None,
    category: ContentCategory | None = None,
    phase_id: str | None = None,
    q: str | None = None,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    """Bibliothèque: assets approuvés, publiés ou archivés (recherche sur le titre)."""
    return service.list_library(
        project_id,
        user.id,
        status=status,
        category=category,
        phase_id=phase_id,
        query=q,
    )


@router.get("/assets/{asset_id}", response_model=AssetDetailOut)
def get_asset(
    asset_id: str,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    return AssetDetailOut.model_validate(service.get_detail(asset_id, user.id))


@router.patch("/assets/{asset_id}", response_model=Asset)
def update_asset(
    asset_id: str,
    payload: AssetUpdate,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    return service.update_asset(
        asset_id, user.id, payload.changes(), payload.athlete_ids, payload.club_ids
    )


@router.delete("/assets/{asset_id}", status_code=HTTP_NO_CONTENT, response_class=Response)
def delete_asset(
    asset_id: str,
    user: User = current_user_dep,
    service: AssetService = asset_service_dep,
):
    service.delete_asset(asset_id, user.id)
    return Response(status_code=HTTP_NO_CONTENT)


@router.post("/assets/{asset_id}/submit", response_model=Asset)
def submit_for_review(
    asset_id: str,
    user: User = current_user_dep,
    service: WorkflowService = workflow_service_dep,
):
    """
    Soumet (ou resoumet) l'asset en revue.

    Erreurs possibles: NOT_CONFIGURED et NO_APPROVERS_FOUND (409, asset inchangé),
    INVALID_TRANSITION (409), NOT_AUTHORIZED (403).
    """
    return service.submit_for_review(asset_id, user.id)


@router.post("/assets/{asset_id}/status", response_model=Asset)
def change_status(
    asset_id: str,
    payload: StatusChange,
    user: User = current_user_dep,
    service: WorkflowService = workflow_service_dep,
):
    """Transition manuelle (publication, archivage, restauration), administrateurs seulement."""
    return service.change_status(asset_id, user.id, payload.status)
