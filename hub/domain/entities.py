"""
Entités du domaine métier.

Ce module définit les modèles de données manipulés par le workflow d'approbation:
projets, membres, assets, chaînes d'approbation et enregistrements d'approbation.
"""

from datetime import datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

UserRole = Literal["admin", "brand", "league", "pa", "club", "viewer"]
AssetStatus = Literal[
    "draft",
    "in_review",
    "approved",
    "changes_requested",
    "rejected",
    "published",
    "archived",
]
ContentCategory = Literal[
    "partnership", "product", "collecting", "spotlight", "hype", "pr", "trust"
]
AssetFormat = Literal[
    "static", "carousel", "short_video", "long_video", "story", "document"
]
SourceStation = Literal["field", "pack_rips", "social", "vnr", "signing", "na"]
ApprovalStatus = Literal["pending", "approved", "changes_requested", "rejected"]
Decision = Literal["approved", "changes_requested", "rejected"]
ChainType = Literal["parallel", "sequential"]

USER_ROLES: tuple[str, ...] = get_args(UserRole)
ASSET_STATUSES: tuple[str, ...] = get_args(AssetStatus)
CONTENT_CATEGORIES: tuple[str, ...] = get_args(ContentCategory)


class _Entity(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class User(_Entity):
    """Profil utilisateur (miroir du fournisseur d'authentification)."""

    id: str
    email: str
    full_name: str
    organization: str | None = None
    avatar_url: str | None = None


class Project(_Entity):
    """Projet (tenant) regroupant membres, phases et assets."""

    id: str
    name: str
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class ProjectMember(_Entity):
    """Rattachement d'un utilisateur à un projet avec exactement un rôle."""

    id: str
    project_id: str
    user_id: str
    role: UserRole
    created_at: datetime | None = None


class Phase(_Entity):
    """Phase du projet (jalon de la timeline du tableau de bord)."""

    id: str
    project_id: str
    name: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_order: int = 0


class Asset(_Entity):
    """Contenu soumis à approbation.

    Attributs clés
    - status: état du cycle de vie, recalculé depuis les approbations actives.
    - version: entier positif, incrémenté à chaque resoumission.
    - content_category: détermine la chaîne d'approbation applicable.
    """

    id: str
    project_id: str
    phase_id: str
    title: str
    description: str | None = None
    content_category: ContentCategory
    platforms: list[str] = Field(default_factory=list)
    format: AssetFormat
    source_station: SourceStation | None = None
    external_url: str
    thumbnail_url: str | None = None
    version: int = 1
    status: AssetStatus = "draft"
    approval_due: datetime | None = None
    publish_date: datetime | None = None
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApprovalChain(_Entity):
    """Configuration d'approbation pour un couple (projet, catégorie)."""

    id: str
    project_id: str
    content_category: ContentCategory
    required_roles: list[UserRole]
    chain_type: ChainType = "parallel"


class ApprovalRecord(_Entity):
    """Décision d'un approbateur pour une version donnée d'un asset."""

    id: str
    asset_id: str
    user_id: str
    status: ApprovalStatus = "pending"
    comment: str | None = None
    version_reviewed: int
    responded_at: datetime | None = None
    created_at: datetime | None = None


class Comment(_Entity):
    """Commentaire sur un asset (réponse si `parent_id` renseigné)."""

    id: str
    asset_id: str
    user_id: str
    body: str
    parent_id: str | None = None
    created_at: datetime | None = None


class Club(_Entity):
    id: str
    project_id: str
    name: str
    market: str | None = None


class Athlete(_Entity):
    id: str
    project_id: str
    full_name: str
    club_id: str | None = None
    headshot_url: str | None = None
    embargo_until: datetime | None = None


class ActivityEntry(_Entity):
    """Entrée du journal d'activité d'un projet."""

    id: str
    project_id: str
    user_id: str
    asset_id: str | None = None
    action: str
    metadata: dict = Field(default_factory=dict)
    created_at: datetime | None = None
