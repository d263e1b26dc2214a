"""
Vues de synthèse: tableau de bord d'un projet, roster des athlètes et
liste des projets de l'utilisateur courant.
"""

from fastapi import APIRouter, Depends

from hub.api.deps import current_user_dep, get_dashboard_service
from hub.api.schemas import DashboardOut, MyProjectOut, RosterEntryOut
from hub.domain.dashboard import DashboardService
from hub.domain.entities import User

router = APIRouter(tags=["dashboard"])
dashboard_service_dep = Depends(get_dashboard_service)


@router.get("/projects/{project_id}/dashboard", response_model=DashboardOut)
def get_dashboard(
    project_id: str,
    user: User = current_user_dep,
    service: DashboardService = dashboard_service_dep,
):
    """Indicateurs, timeline par phase, revues en attente de l'appelant et activité récente."""
    return DashboardOut.model_validate(service.dashboard(project_id, user.id))


@router.get("/projects/{project_id}/roster", response_model=list[RosterEntryOut])
def get_roster(
    project_id: str,
    user: User = current_user_dep,
    service: DashboardService = dashboard_service_dep,
):
    return [RosterEntryOut.model_validate(e) for e in service.roster(project_id, user.id)]


@router.get("/me/projects", response_model=list[MyProjectOut])
def my_projects(
    user: User = current_user_dep,
    service: DashboardService = dashboard_service_dep,
):
    return [MyProjectOut(project=p, role=role) for p, role in service.my_projects(user.id)]
