"""Accès SQL aux commentaires d'assets."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.entities import Comment
from .db import flush_or_fail
from .models import CommentORM


class CommentRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, asset_id: str, user_id: str, body: str, parent_id: str | None) -> Comment:
        row = CommentORM(asset_id=asset_id, user_id=user_id, body=body, parent_id=parent_id)
        self._session.add(row)
        flush_or_fail(self._session)
        return Comment.model_validate(row)

    def get(self, comment_id: str) -> Comment | None:
        row = self._session.get(CommentORM, comment_id)
        return Comment.model_validate(row) if row else None

    def list_for_asset(self, asset_id: str) -> list[Comment]:
        """Commentaires d'un asset par ordre chronologique."""
        stmt = (
            select(CommentORM)
            .where(CommentORM.asset_id == asset_id)
            .order_by(CommentORM.created_at, CommentORM.id)
        )
        return [Comment.model_validate(r) for r in self._session.execute(stmt).scalars()]

    def delete(self, comment_id: str) -> bool:
        row = self._session.get(CommentORM, comment_id)
        if row is None:
            return False
        self._session.delete(row)
        flush_or_fail(self._session)
        return True
