"""Accès SQL aux projets, phases et au roster (athlètes, clubs)."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ...domain.entities import Athlete, Club, Phase, Project
from .models import AssetAthleteORM, AthleteORM, ClubORM, PhaseORM, ProjectORM


class ProjectRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, project_id: str) -> Project | None:
        row = self._session.get(ProjectORM, project_id)
        return Project.model_validate(row) if row else None

    def get_phase(self, phase_id: str) -> Phase | None:
        row = self._session.get(PhaseORM, phase_id)
        return Phase.model_validate(row) if row else None

    def list_phases(self, project_id: str) -> list[Phase]:
        stmt = (
            select(PhaseORM)
            .where(PhaseORM.project_id == project_id)
            .order_by(PhaseORM.sort_order, PhaseORM.name)
        )
        return [Phase.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def roster(self, project_id: str) -> list[tuple[Athlete, Club | None, int]]:
        """Athlètes du projet avec leur club et le nombre d'assets étiquetés."""
        counts = (
            select(AssetAthleteORM.athlete_id, func.count().label("n"))
            .group_by(AssetAthleteORM.athlete_id)
            .subquery()
        )
        stmt = (
            select(AthleteORM, ClubORM, func.coalesce(counts.c.n, 0))
            .outerjoin(ClubORM, ClubORM.id == AthleteORM.club_id)
            .outerjoin(counts, counts.c.athlete_id == AthleteORM.id)
            .where(AthleteORM.project_id == project_id)
            .order_by(AthleteORM.full_name)
        )
        return [
            (
                Athlete.model_validate(athlete),
                Club.model_validate(club) if club is not None else None,
                int(count),
            )
            for athlete, club, count in self._session.execute(stmt).all()
        ]
