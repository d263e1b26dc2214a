"""Services métier des assets et des commentaires."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from hub.domain.activity import build_metadata
from hub.domain.comments import CommentThread, build_threads
from hub.domain.entities import ApprovalRecord, Asset, Comment
from hub.domain.errors import NotAuthorized, NotFound, ValidationFailed
from hub.domain.permissions import (
    has_permission,
    require_admin,
    require_member,
    require_permission,
)
from hub.domain.status_engine import active_records

log = structlog.get_logger(__name__)

LIBRARY_STATUSES = ("approved", "published", "archived")

_EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "phase_id",
        "content_category",
        "platforms",
        "format",
        "source_station",
        "external_url",
        "thumbnail_url",
        "approval_due",
    }
)


@dataclass
class AssetDetail:
    """Vue complète d'un asset: approbations actives, historique, fil de commentaires."""

    asset: Asset
    active_approvals: list[ApprovalRecord]
    approval_history: list[ApprovalRecord]
    threads: list[CommentThread]
    athlete_ids: list[str] = field(default_factory=list)
    club_ids: list[str] = field(default_factory=list)


class AssetService:
    """Création, édition, consultation et suppression des assets."""

    def __init__(self, repos):
        self.repos = repos

    def _load(self, asset_id: str) -> Asset:
        asset = self.repos.assets.get(asset_id)
        if asset is None:
            raise NotFound("Asset not found")
        return asset

    def _check_phase(self, project_id: str, phase_id: str) -> None:
        phase = self.repos.projects.get_phase(phase_id)
        if phase is None or phase.project_id != project_id:
            raise ValidationFailed("Phase does not belong to this project")

    def create_asset(
        self,
        project_id: str,
        actor_id: str,
        fields: dict[str, Any],
        athlete_ids: list[str] | None = None,
        club_ids: list[str] | None = None,
    ) -> Asset:
        """Crée un asset en brouillon (version 1) et journalise `uploaded`."""
        require_permission(self.repos.members.get_membership(project_id, actor_id), "can_upload")
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationFailed(f"Unknown fields: {', '.join(sorted(unknown))}")
        self._check_phase(project_id, fields.get("phase_id", ""))
        asset = self.repos.assets.create(
            project_id=project_id, created_by=actor_id, status="draft", version=1, **fields
        )
        if athlete_ids or club_ids:
            self.repos.assets.set_tags(asset.id, athlete_ids or [], club_ids or [])
        self.repos.activity.log(
            project_id,
            actor_id,
            "uploaded",
            build_metadata("uploaded", asset_title=asset.title),
            asset_id=asset.id,
        )
        log.info("asset_created", asset_id=asset.id, project_id=project_id)
        return asset

    def update_asset(
        self,
        asset_id: str,
        actor_id: str,
        changes: dict[str, Any],
        athlete_ids: list[str] | None = None,
        club_ids: list[str] | None = None,
    ) -> Asset:
        """Met à jour les champs éditables; les listes d'étiquettes fournies remplacent l'existant."""
        asset = self._load(asset_id)
        member = require_member(self.repos.members.get_membership(asset.project_id, actor_id))
        if asset.created_by != actor_id and not has_permission(member.role, "can_upload"):
            raise NotAuthorized("Only the uploader or an admin can edit this asset")
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationFailed(f"Unknown fields: {', '.join(sorted(unknown))}")
        if "phase_id" in changes:
            self._check_phase(asset.project_id, changes["phase_id"])
        if changes:
            asset = self.repos.assets.update(asset_id, **changes)
        if athlete_ids is not None or club_ids is not None:
            self.repos.assets.set_tags(asset_id, athlete_ids, club_ids)
        return asset

    def get_detail(self, asset_id: str, actor_id: str) -> AssetDetail:
        asset = self._load(asset_id)
        require_member(self.repos.members.get_membership(asset.project_id, actor_id))
        history = self.repos.approvals.history(asset.id)
        athlete_ids, club_ids = self.repos.assets.tags(asset.id)
        return AssetDetail(
            asset=asset,
            active_approvals=active_records(history, asset.version),
            approval_history=history,
            threads=build_threads(self.repos.comments.list_for_asset(asset.id)),
            athlete_ids=athlete_ids,
            club_ids=club_ids,
        )

    def list_queue(
        self,
        project_id: str,
        actor_id: str,
        status: str | None = None,
        category: str | None = None,
        phase_id: str | None = None,
    ) -> list[Asset]:
        """File de contenus (tous statuts), filtrable."""
        require_permission(
            self.repos.members.get_membership(project_id, actor_id), "can_view_queue"
        )
        return self.repos.assets.list_for_project(
            project_id, status=status, category=category, phase_id=phase_id
        )

    def list_library(
        self,
        project_id: str,
        actor_id: str,
        status: str | None = None,
        category: str | None = None,
        phase_id: str | None = None,
        query: str | None = None,
    ) -> list[Asset]:
        """Bibliothèque: assets approuvés, publiés ou archivés."""
        require_member(self.repos.members.get_membership(project_id, actor_id))
        return self.repos.assets.list_for_project(
            project_id,
            statuses=LIBRARY_STATUSES,
            status=status,
            category=category,
            phase_id=phase_id,
            query=query,
        )

    def delete_asset(self, asset_id: str, actor_id: str) -> None:
        """Suppression explicite, réservée aux administrateurs du projet."""
        asset = self._load(asset_id)
        require_admin(self.repos.members.get_membership(asset.project_id, actor_id))
        self.repos.assets.delete(asset_id)
        log.info("asset_deleted", asset_id=asset_id, project_id=asset.project_id)


class CommentService:
    """Commentaires d'assets (un niveau de réponses)."""

    def __init__(self, repos):
        self.repos = repos

    def add_comment(
        self, asset_id: str, actor_id: str, body: str, parent_id: str | None = None
    ) -> Comment:
        asset = self.repos.assets.get(asset_id)
        if asset is None:
            raise NotFound("Asset not found")
        require_permission(
            self.repos.members.get_membership(asset.project_id, actor_id), "can_comment"
        )
        body = (body or "").strip()
        if not body:
            raise ValidationFailed("Comment body cannot be empty")
        if parent_id is not None:
            parent = self.repos.comments.get(parent_id)
            if parent is None or parent.asset_id != asset_id:
                raise ValidationFailed("Parent comment not found on this asset")
            if parent.parent_id is not None:
                raise ValidationFailed("Replies cannot be nested")
        comment = self.repos.comments.add(asset_id, actor_id, body, parent_id)
        self.repos.activity.log(
            asset.project_id,
            actor_id,
            "commented",
            build_metadata("commented", asset_title=asset.title),
            asset_id=asset_id,
        )
        return comment

    def delete_comment(self, comment_id: str, actor_id: str) -> None:
        """Supprime un commentaire (auteur ou administrateur)."""
        comment = self.repos.comments.get(comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        if comment.user_id != actor_id:
            asset = self.repos.assets.get(comment.asset_id)
            require_admin(self.repos.members.get_membership(asset.project_id, actor_id))
        self.repos.comments.delete(comment_id)

    def threads(self, asset_id: str, actor_id: str) -> list[CommentThread]:
        asset = self.repos.assets.get(asset_id)
        if asset is None:
            raise NotFound("Asset not found")
        require_member(self.repos.members.get_membership(asset.project_id, actor_id))
        return build_threads(self.repos.comments.list_for_asset(asset_id))
