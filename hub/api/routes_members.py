"""Gestion des membres d'un projet (invitation, rôle, retrait)."""

from fastapi import APIRouter, Depends, Response

from hub.api.deps import current_user_dep, get_member_service
from hub.api.schemas import InvitePayload, MemberOut, RoleUpdate
from hub.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from hub.domain.administration import MemberService
from hub.domain.entities import ProjectMember, User

router = APIRouter(prefix="/projects/{project_id}/members", tags=["members"])
member_service_dep = Depends(get_member_service)


@router.get("", response_model=list[MemberOut])
def list_members(
    project_id: str,
    user: User = current_user_dep,
    service: MemberService = member_service_dep,
):
    return [MemberOut.model_validate(m) for m in service.list_members(project_id, user.id)]


@router.post("", response_model=ProjectMember, status_code=HTTP_CREATED)
def invite_member(
    project_id: str,
    payload: InvitePayload,
    user: User = current_user_dep,
    service: MemberService = member_service_dep,
):
    """Ajoute un utilisateur (existant ou nouveau profil) au projet; 409 s'il est déjà membre."""
    return service.invite(
        project_id, user.id, str(payload.email), payload.role, payload.full_name
    )


@router.patch("/{member_id}", response_model=ProjectMember)
def update_member_role(
    project_id: str,
    member_id: str,
    payload: RoleUpdate,
    user: User = current_user_dep,
    service: MemberService = member_service_dep,
):
    return service.update_role(project_id, user.id, member_id, payload.role)


@router.delete("/{member_id}", status_code=HTTP_NO_CONTENT, response_class=Response)
def remove_member(
    project_id: str,
    member_id: str,
    user: User = current_user_dep,
    service: MemberService = member_service_dep,
):
    service.remove(project_id, user.id, member_id)
    return Response(status_code=HTTP_NO_CONTENT)
