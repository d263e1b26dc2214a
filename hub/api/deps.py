"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Ouvrir une session SQLAlchemy par requête (commit en sortie normale,
  rollback sur erreur) et exposer les dépôts associés.
- Authentifier l'appelant à partir du JWT du fournisseur d'identité.
- Construire les services métier liés à la session courante; les notifications
  sont différées après commit via `register_action_after_commit`.
"""

from collections.abc import Iterator
from functools import partial

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from hub.core.container import container
from hub.core.http_constants import HTTP_UNAUTHORIZED
from hub.domain.administration import ChainService, MemberService
from hub.domain.auth import decode_token
from hub.domain.dashboard import DashboardService
from hub.domain.entities import User
from hub.domain.services import AssetService, CommentService
from hub.domain.workflow import WorkflowService
from hub.infra.ops.post_commit import register_action_after_commit
from hub.infra.repo.db import session_scope
from hub.infra.repo.unit import Repositories


def get_session() -> Iterator[Session]:
    """Session de requête: commit si la route réussit, rollback sinon."""
    with session_scope(container.session_factory) as session:
        yield session


def get_repos(session: Session = Depends(get_session)) -> Repositories:
    return Repositories.for_session(session)


def get_current_user(
    authorization: str | None = Header(None),
    repos: Repositories = Depends(get_repos),
) -> User:
    """Extrait et valide l'utilisateur courant à partir du token d'autorisation."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="missing_token")
    token = authorization.split(" ", 1)[1]
    settings = container.settings
    data = decode_token(token, settings.JWT_SECRET, settings.JWT_ALG, settings.JWT_AUDIENCE)
    if not data:
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="invalid_token")
    user = repos.users.get(data.sub)
    if not user:
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="user_not_found")
    return user


def get_workflow_service(
    session: Session = Depends(get_session),
    repos: Repositories = Depends(get_repos),
) -> WorkflowService:
    return WorkflowService(
        repos,
        notifier=container.notifier,
        defer=partial(register_action_after_commit, session),
    )


def get_asset_service(repos: Repositories = Depends(get_repos)) -> AssetService:
    return AssetService(repos)


def get_comment_service(repos: Repositories = Depends(get_repos)) -> CommentService:
    return CommentService(repos)


def get_member_service(repos: Repositories = Depends(get_repos)) -> MemberService:
    return MemberService(repos)


def get_chain_service(repos: Repositories = Depends(get_repos)) -> ChainService:
    return ChainService(repos)


def get_dashboard_service(repos: Repositories = Depends(get_repos)) -> DashboardService:
    return DashboardService(repos, activity_limit=container.settings.ACTIVITY_FEED_LIMIT)


current_user_dep = Depends(get_current_user)
