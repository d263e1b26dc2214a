"""Accès SQL aux chaînes d'approbation (une par projet et catégorie)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.entities import ApprovalChain
from .db import flush_or_fail
from .models import ApprovalChainORM


class ChainRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, project_id: str, category: str) -> ApprovalChain | None:
        """Retourne la chaîne configurée pour (projet, catégorie), ou None."""
        stmt = select(ApprovalChainORM).where(
            ApprovalChainORM.project_id == project_id,
            ApprovalChainORM.content_category == category,
        )
        row = self._session.execute(stmt).scalars().first()
        return ApprovalChain.model_validate(row) if row else None

    def list_for_project(self, project_id: str) -> list[ApprovalChain]:
        stmt = (
            select(ApprovalChainORM)
            .where(ApprovalChainORM.project_id == project_id)
            .order_by(ApprovalChainORM.content_category)
        )
        return [ApprovalChain.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def upsert(
        self, project_id: str, category: str, required_roles: list[str], chain_type: str
    ) -> ApprovalChain:
        """Crée ou remplace la chaîne de (projet, catégorie)."""
        stmt = select(ApprovalChainORM).where(
            ApprovalChainORM.project_id == project_id,
            ApprovalChainORM.content_category == category,
        )
        row = self._session.execute(stmt).scalars().first()
        if row is None:
            row = ApprovalChainORM(project_id=project_id, content_category=category)
            self._session.add(row)
        row.required_roles = list(required_roles)
        row.chain_type = chain_type
        flush_or_fail(self._session)
        return ApprovalChain.model_validate(row)
