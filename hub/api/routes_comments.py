"""Fil de commentaires des assets (un niveau de réponses)."""

from fastapi import APIRouter, Depends, Response

from hub.api.deps import current_user_dep, get_comment_service
from hub.api.schemas import CommentCreate, CommentThreadOut
from hub.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from hub.domain.entities import Comment, User
from hub.domain.services import CommentService

router = APIRouter(tags=["comments"])
comment_service_dep = Depends(get_comment_service)


@router.get("/assets/{asset_id}/comments", response_model=list[CommentThreadOut])
def list_comments(
    asset_id: str,
    user: User = current_user_dep,
    service: CommentService = comment_service_dep,
):
    return [CommentThreadOut.model_validate(t) for t in service.threads(asset_id, user.id)]


@router.post(
    "/assets/{asset_id}/comments", response_model=Comment, status_code=HTTP_CREATED
)
def add_comment(
    asset_id: str,
    payload: CommentCreate,
    user: User = current_user_dep,
    service: CommentService = comment_service_dep,
):
    return service.add_comment(asset_id, user.id, payload.body, payload.parent_id)


@router.delete("/comments/{comment_id}", status_code=HTTP_NO_CONTENT, response_class=Response)
def delete_comment(
    comment_id: str,
    user: User = current_user_dep,
    service: CommentService = comment_service_dep,
):
    service.delete_comment(comment_id, user.id)
    return Response(status_code=HTTP_NO_CONTENT)
