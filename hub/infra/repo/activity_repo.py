"""Journal d'activité des projets."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.entities import ActivityEntry
from .db import flush_or_fail
from .models import ActivityLogORM


def _to_entry(row: ActivityLogORM) -> ActivityEntry:
    return ActivityEntry(
        id=row.id,
        project_id=row.project_id,
        user_id=row.user_id,
        asset_id=row.asset_id,
        action=row.action,
        metadata=row.meta or {},
        created_at=row.created_at,
    )


class ActivityRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def log(
        self,
        project_id: str,
        user_id: str,
        action: str,
        metadata: dict[str, Any],
        asset_id: str | None = None,
    ) -> ActivityEntry:
        row = ActivityLogORM(
            project_id=project_id,
            user_id=user_id,
            asset_id=asset_id,
            action=action,
            meta=metadata,
        )
        self._session.add(row)
        flush_or_fail(self._session)
        return _to_entry(row)

    def recent(self, project_id: str, limit: int) -> list[ActivityEntry]:
        """Dernières entrées du projet, plus récentes d'abord."""
        stmt = (
            select(ActivityLogORM)
            .where(ActivityLogORM.project_id == project_id)
            .order_by(ActivityLogORM.created_at.desc())
            .limit(limit)
        )
        return [_to_entry(r) for r in self._session.execute(stmt).scalars()]
