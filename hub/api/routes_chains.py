"""Configuration des chaînes d'approbation d'un projet."""

from fastapi import APIRouter, Depends

from hub.api.deps import current_user_dep, get_chain_service
from hub.api.schemas import ChainPayload
from hub.domain.administration import ChainService
from hub.domain.entities import ApprovalChain, ContentCategory, User

router = APIRouter(prefix="/projects/{project_id}/chains", tags=["chains"])
chain_service_dep = Depends(get_chain_service)


@router.get("", response_model=list[ApprovalChain])
def list_chains(
    project_id: str,
    user: User = current_user_dep,
    service: ChainService = chain_service_dep,
):
    return service.list_chains(project_id, user.id)


@router.put("/{category}", response_model=ApprovalChain)
def upsert_chain(
    project_id: str,
    category: ContentCategory,
    payload: ChainPayload,
    user: User = current_user_dep,
    service: ChainService = chain_service_dep,
):
    """Crée ou remplace la chaîne de la catégorie (rôles requis, type de chaîne)."""
    return service.upsert_chain(
        project_id, user.id, category, list(payload.required_roles), payload.chain_type
    )
