"""Accès SQL (CRUD) pour les assets et leurs étiquettes (athlètes, clubs)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ...domain.entities import Asset
from .db import flush_or_fail
from .models import AssetAthleteORM, AssetClubORM, AssetORM


class AssetRepo:
    """CRUD des assets d'un projet."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, **fields: Any) -> Asset:
        """Insère un asset (statut `draft`, version 1 par défaut)."""
        row = AssetORM(**fields)
        self._session.add(row)
        flush_or_fail(self._session)
        return Asset.model_validate(row)

    def get(self, asset_id: str) -> Asset | None:
        row = self._session.get(AssetORM, asset_id)
        return Asset.model_validate(row) if row else None

    def update(self, asset_id: str, **fields: Any) -> Asset | None:
        """Met à jour les colonnes fournies et retourne l'asset à jour."""
        row = self._session.get(AssetORM, asset_id)
        if row is None:
            return None
        for key, value in fields.items():
            setattr(row, key, value)
        flush_or_fail(self._session)
        return Asset.model_validate(row)

    def delete(self, asset_id: str) -> bool:
        row = self._session.get(AssetORM, asset_id)
        if row is None:
            return False
        self._session.delete(row)
        flush_or_fail(self._session)
        return True

    def list_for_project(
        self,
        project_id: str,
        *,
        statuses: Iterable[str] | None = None,
        status: str | None = None,
        category: str | None = None,
        phase_id: str | None = None,
        query: str | None = None,
    ) -> list[Asset]:
        """Liste filtrée des assets, les plus récemment modifiés d'abord."""
        stmt = select(AssetORM).where(AssetORM.project_id == project_id)
        if statuses is not None:
            stmt = stmt.where(AssetORM.status.in_(list(statuses)))
        if status:
            stmt = stmt.where(AssetORM.status == status)
        if category:
            stmt = stmt.where(AssetORM.content_category == category)
        if phase_id:
            stmt = stmt.where(AssetORM.phase_id == phase_id)
        if query:
            stmt = stmt.where(func.lower(AssetORM.title).contains(query.lower()))
        stmt = stmt.order_by(AssetORM.updated_at.desc())
        return [Asset.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def set_tags(
        self,
        asset_id: str,
        athlete_ids: list[str] | None = None,
        club_ids: list[str] | None = None,
    ) -> None:
        """Remplace les tables de jonction fournies (None = inchangé)."""
        if athlete_ids is not None:
            self._session.execute(delete(AssetAthleteORM).where(AssetAthleteORM.asset_id == asset_id))
            self._session.add_all(
                AssetAthleteORM(asset_id=asset_id, athlete_id=a) for a in dict.fromkeys(athlete_ids)
            )
        if club_ids is not None:
            self._session.execute(delete(AssetClubORM).where(AssetClubORM.asset_id == asset_id))
            self._session.add_all(
                AssetClubORM(asset_id=asset_id, club_id=c) for c in dict.fromkeys(club_ids)
            )
        flush_or_fail(self._session)

    def tags(self, asset_id: str) -> tuple[list[str], list[str]]:
        """Retourne (athlete_ids, club_ids) rattachés à l'asset."""
        athletes = self._session.execute(
            select(AssetAthleteORM.athlete_id).where(AssetAthleteORM.asset_id == asset_id)
        ).scalars()
        clubs = self._session.execute(
            select(AssetClubORM.club_id).where(AssetClubORM.asset_id == asset_id)
        ).scalars()
        return list(athletes), list(clubs)
