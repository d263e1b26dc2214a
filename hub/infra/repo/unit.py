"""Regroupe les dépôts liés à une même session SQLAlchemy."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from .activity_repo import ActivityRepo
from .approvals_repo import ApprovalRepo
from .assets_repo import AssetRepo
from .chains_repo import ChainRepo
from .comments_repo import CommentRepo
from .members_repo import MemberRepo, UserRepo
from .projects_repo import ProjectRepo


@dataclass
class Repositories:
    assets: AssetRepo
    approvals: ApprovalRepo
    chains: ChainRepo
    members: MemberRepo
    users: UserRepo
    comments: CommentRepo
    activity: ActivityRepo
    projects: ProjectRepo

    @classmethod
    def for_session(cls, session: Session) -> Repositories:
        return cls(
            assets=AssetRepo(session),
            approvals=ApprovalRepo(session),
            chains=ChainRepo(session),
            members=MemberRepo(session),
            users=UserRepo(session),
            comments=CommentRepo(session),
            activity=ActivityRepo(session),
            projects=ProjectRepo(session),
        )
