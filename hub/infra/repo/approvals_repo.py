# ============================================================
# Module : hub/infra/repo/approvals_repo.py
# Objet  : Accès SQL aux enregistrements d'approbation.
# ============================================================

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ...domain.entities import ApprovalRecord
from .db import flush_or_fail
from .models import ApprovalORM


class ApprovalRepo:
    """Lecture/écriture des décisions par (asset, approbateur, version)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_pending(self, asset_id: str, user_ids: list[str], version: int) -> list[ApprovalRecord]:
        """Insère en lot un enregistrement `pending` par approbateur."""
        rows = [
            ApprovalORM(asset_id=asset_id, user_id=uid, status="pending", version_reviewed=version)
            for uid in user_ids
        ]
        self._session.add_all(rows)
        flush_or_fail(self._session)
        return [ApprovalRecord.model_validate(r) for r in rows]

    def delete_stale_pending(self, asset_id: str, version: int) -> int:
        """Supprime les enregistrements encore en attente des versions antérieures.

        Les décisions déjà rendues sont conservées comme historique.
        """
        result = self._session.execute(
            delete(ApprovalORM).where(
                ApprovalORM.asset_id == asset_id,
                ApprovalORM.status == "pending",
                ApprovalORM.version_reviewed < version,
            )
        )
        flush_or_fail(self._session)
        return result.rowcount or 0

    def list_for_version(self, asset_id: str, version: int) -> list[ApprovalRecord]:
        stmt = (
            select(ApprovalORM)
            .where(ApprovalORM.asset_id == asset_id, ApprovalORM.version_reviewed == version)
            .order_by(ApprovalORM.created_at)
        )
        return [ApprovalRecord.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def history(self, asset_id: str) -> list[ApprovalRecord]:
        """Toutes les décisions de l'asset, version la plus récente d'abord."""
        stmt = (
            select(ApprovalORM)
            .where(ApprovalORM.asset_id == asset_id)
            .order_by(ApprovalORM.version_reviewed.desc(), ApprovalORM.created_at)
        )
        return [ApprovalRecord.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def has_decisions(self, asset_id: str, version: int) -> bool:
        stmt = (
            select(ApprovalORM.id)
            .where(
                ApprovalORM.asset_id == asset_id,
                ApprovalORM.version_reviewed == version,
                ApprovalORM.status != "pending",
            )
            .limit(1)
        )
        return self._session.execute(stmt).first() is not None

    def get(self, approval_id: str) -> ApprovalRecord | None:
        row = self._session.get(ApprovalORM, approval_id)
        return ApprovalRecord.model_validate(row) if row else None

    def update_decision(
        self,
        approval_id: str,
        user_id: str,
        status: str,
        comment: str | None,
        responded_at: datetime,
    ) -> ApprovalRecord | None:
        """Enregistre la décision si (id, user_id) désigne un enregistrement en attente.

        Retourne None sinon (aucune écriture).
        """
        stmt = select(ApprovalORM).where(
            ApprovalORM.id == approval_id,
            ApprovalORM.user_id == user_id,
            ApprovalORM.status == "pending",
        )
        row = self._session.execute(stmt).scalars().first()
        if row is None:
            return None
        row.status = status
        row.comment = comment
        row.responded_at = responded_at
        flush_or_fail(self._session)
        return ApprovalRecord.model_validate(row)

    def pending_asset_ids(self, user_id: str) -> set[str]:
        """Assets en attente de la décision d'un utilisateur."""
        stmt = select(ApprovalORM.asset_id).where(
            ApprovalORM.user_id == user_id, ApprovalORM.status == "pending"
        )
        return set(self._session.execute(stmt).scalars())
