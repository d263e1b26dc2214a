"""Décisions des approbateurs sur leurs enregistrements d'approbation."""

from fastapi import APIRouter, Depends

from hub.api.deps import current_user_dep, get_workflow_service
from hub.api.schemas import DecisionOut, DecisionPayload
from hub.domain.entities import User
from hub.domain.workflow import WorkflowService

router = APIRouter(prefix="/approvals", tags=["approvals"])
workflow_service_dep = Depends(get_workflow_service)


@router.post("/{approval_id}/decision", response_model=DecisionOut)
def submit_decision(
    approval_id: str,
    payload: DecisionPayload,
    user: User = current_user_dep,
    service: WorkflowService = workflow_service_dep,
):
    """
    Enregistre la décision de l'approbateur courant.

    Retour: l'enregistrement mis à jour et l'asset avec son statut recalculé.
    NOT_AUTHORIZED si l'enregistrement n'appartient pas à l'appelant ou est déjà décidé.
    """
    outcome = service.submit_decision(approval_id, user.id, payload.decision, payload.comment)
    return DecisionOut.model_validate(outcome)
