# Schémas Pydantic exposés par l'API (requêtes et réponses).

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hub.domain.entities import (
    ActivityEntry,
    ApprovalRecord,
    Asset,
    AssetFormat,
    AssetStatus,
    Athlete,
    ChainType,
    Club,
    Comment,
    ContentCategory,
    Decision,
    Phase,
    Project,
    ProjectMember,
    SourceStation,
    User,
    UserRole,
)

_NULLABLE = frozenset({"description", "source_station", "thumbnail_url", "approval_due"})


class AssetCreate(BaseModel):
    """Requête de création d'un asset (brouillon, version 1).

    Champs:
    - phase_id, title, content_category, format, external_url: obligatoires
    - athlete_ids / club_ids: étiquettes optionnelles
    """

    phase_id: str
    title: str = Field(min_length=1)
    description: str | None = None
    content_category: ContentCategory
    platforms: list[str] = []
    format: AssetFormat
    source_station: SourceStation | None = None
    external_url: str
    thumbnail_url: str | None = None
    approval_due: datetime | None = None
    athlete_ids: list[str] = []
    club_ids: list[str] = []

    def fields(self) -> dict:
        return self.model_dump(exclude={"athlete_ids", "club_ids"})


class AssetUpdate(BaseModel):
    """Mise à jour partielle; seuls les champs envoyés sont modifiés."""

    phase_id: str | None = None
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    content_category: ContentCategory | None = None
    platforms: list[str] | None = None
    format: AssetFormat | None = None
    source_station: SourceStation | None = None
    external_url: str | None = None
    thumbnail_url: str | None = None
    approval_due: datetime | None = None
    athlete_ids: list[str] | None = None
    club_ids: list[str] | None = None

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"athlete_ids", "club_ids"})
        return {k: v for k, v in data.items() if v is not None or k in _NULLABLE}


class StatusChange(BaseModel):
    status: AssetStatus


class DecisionPayload(BaseModel):
    decision: Decision
    comment: str | None = None


class CommentCreate(BaseModel):
    body: str
    parent_id: str | None = None


class InvitePayload(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1)
    role: UserRole


class RoleUpdate(BaseModel):
    role: UserRole


class ChainPayload(BaseModel):
    required_roles: list[UserRole] = Field(min_length=1)
    chain_type: ChainType = "parallel"


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CommentThreadOut(_Out):
    comment: Comment
    replies: list[Comment]


class AssetDetailOut(_Out):
    """Asset avec approbations de la version courante, historique et commentaires."""

    asset: Asset
    active_approvals: list[ApprovalRecord]
    approval_history: list[ApprovalRecord]
    threads: list[CommentThreadOut]
    athlete_ids: list[str]
    club_ids: list[str]


class DecisionOut(_Out):
    record: ApprovalRecord
    asset: Asset


class MemberOut(_Out):
    member: ProjectMember
    user: User | None


class DashboardStatsOut(_Out):
    total_assets: int
    pending_approvals: int
    overdue_items: int
    published_this_week: int


class PhaseColumnOut(_Out):
    phase: Phase
    assets: list[Asset]


class DashboardOut(_Out):
    project: Project
    role: UserRole
    stats: DashboardStatsOut
    timeline: list[PhaseColumnOut]
    pending_for_me: list[Asset]
    activity: list[ActivityEntry]


class RosterEntryOut(_Out):
    athlete: Athlete
    club: Club | None
    content_count: int


class MyProjectOut(_Out):
    project: Project
    role: UserRole
