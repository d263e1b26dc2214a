"""Accès SQL aux utilisateurs et aux rattachements projet/rôle."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.entities import ProjectMember, User
from .db import flush_or_fail
from .models import ProjectMemberORM, UserORM


class UserRepo:
    """Profils utilisateurs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserORM, user_id)
        return User.model_validate(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        stmt = select(UserORM).where(UserORM.email == email.strip().lower())
        row = self._session.execute(stmt).scalars().first()
        return User.model_validate(row) if row else None

    def get_many(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = self._session.execute(select(UserORM).where(UserORM.id.in_(ids))).scalars()
        return {r.id: User.model_validate(r) for r in rows}

    def create(self, email: str, full_name: str, user_id: str | None = None) -> User:
        row = UserORM(email=email.strip().lower(), full_name=full_name)
        if user_id:
            row.id = user_id
        self._session.add(row)
        flush_or_fail(self._session)
        return User.model_validate(row)


class MemberRepo:
    """Rattachements (projet, utilisateur, rôle)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, member_id: str) -> ProjectMember | None:
        row = self._session.get(ProjectMemberORM, member_id)
        return ProjectMember.model_validate(row) if row else None

    def get_membership(self, project_id: str, user_id: str) -> ProjectMember | None:
        stmt = select(ProjectMemberORM).where(
            ProjectMemberORM.project_id == project_id, ProjectMemberORM.user_id == user_id
        )
        row = self._session.execute(stmt).scalars().first()
        return ProjectMember.model_validate(row) if row else None

    def memberships_for_user(self, user_id: str) -> list[ProjectMember]:
        stmt = (
            select(ProjectMemberORM)
            .where(ProjectMemberORM.user_id == user_id)
            .order_by(ProjectMemberORM.created_at)
        )
        return [ProjectMember.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def list_for_project(self, project_id: str) -> list[ProjectMember]:
        stmt = (
            select(ProjectMemberORM)
            .where(ProjectMemberORM.project_id == project_id)
            .order_by(ProjectMemberORM.created_at)
        )
        return [ProjectMember.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def with_roles(self, project_id: str, roles: Iterable[str]) -> list[ProjectMember]:
        """Membres du projet détenant l'un des rôles donnés (ordre d'ancienneté)."""
        stmt = (
            select(ProjectMemberORM)
            .where(
                ProjectMemberORM.project_id == project_id,
                ProjectMemberORM.role.in_(list(roles)),
            )
            .order_by(ProjectMemberORM.created_at, ProjectMemberORM.id)
        )
        return [ProjectMember.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def add(self, project_id: str, user_id: str, role: str) -> ProjectMember:
        row = ProjectMemberORM(project_id=project_id, user_id=user_id, role=role)
        self._session.add(row)
        flush_or_fail(self._session)
        return ProjectMember.model_validate(row)

    def update_role(self, member_id: str, project_id: str, role: str) -> ProjectMember | None:
        row = self._session.get(ProjectMemberORM, member_id)
        if row is None or row.project_id != project_id:
            return None
        row.role = role
        flush_or_fail(self._session)
        return ProjectMember.model_validate(row)

    def remove(self, member_id: str, project_id: str) -> bool:
        row = self._session.get(ProjectMemberORM, member_id)
        if row is None or row.project_id != project_id:
            return False
        self._session.delete(row)
        flush_or_fail(self._session)
        return True
