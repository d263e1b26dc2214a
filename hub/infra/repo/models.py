"""SQLAlchemy models for the persistence layer (projects, assets, approvals)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Horodatage UTC courant (évalué à chaque insertion)."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class ProjectORM(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(320), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    organization = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ProjectMemberORM(Base):
    """Rôle d'un utilisateur dans un projet (un seul rôle par couple)."""

    __tablename__ = "project_members"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_member_project_user"),)


class PhaseORM(Base):
    __tablename__ = "phases"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ClubORM(Base):
    __tablename__ = "clubs"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    market = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AthleteORM(Base):
    __tablename__ = "athletes"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    full_name = Column(String(255), nullable=False)
    club_id = Column(String(36), ForeignKey("clubs.id", ondelete="SET NULL"), nullable=True)
    headshot_url = Column(String(1024), nullable=True)
    embargo_until = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AssetORM(Base):
    """Modèle ORM des assets soumis à approbation."""

    __tablename__ = "assets"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    phase_id = Column(String(36), ForeignKey("phases.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content_category = Column(String(32), nullable=False)
    platforms = Column(JSON, nullable=False, default=list)
    format = Column(String(32), nullable=False)
    source_station = Column(String(32), nullable=True)
    external_url = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(1024), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    status = Column(String(32), nullable=False, default="draft")
    approval_due = Column(DateTime(timezone=True), nullable=True)
    publish_date = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (CheckConstraint("version >= 1", name="ck_asset_version_positive"),)


class AssetAthleteORM(Base):
    __tablename__ = "asset_athletes"

    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True)
    athlete_id = Column(String(36), ForeignKey("athletes.id", ondelete="CASCADE"), primary_key=True)


class AssetClubORM(Base):
    __tablename__ = "asset_clubs"

    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True)
    club_id = Column(String(36), ForeignKey("clubs.id", ondelete="CASCADE"), primary_key=True)


class ApprovalChainORM(Base):
    """Chaîne d'approbation: au plus une par (projet, catégorie)."""

    __tablename__ = "approval_chains"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    content_category = Column(String(32), nullable=False)
    required_roles = Column(JSON, nullable=False, default=list)
    chain_type = Column(String(16), nullable=False, default="parallel")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("project_id", "content_category", name="uq_chain_project_category"),
    )


class ApprovalORM(Base):
    """Décision d'un approbateur pour une version d'asset."""

    __tablename__ = "approvals"

    id = Column(String(36), primary_key=True, default=_uuid)
    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    comment = Column(Text, nullable=True)
    version_reviewed = Column(Integer, nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class CommentORM(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=_uuid)
    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    body = Column(Text, nullable=False)
    parent_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ActivityLogORM(Base):
    __tablename__ = "activity_log"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(64), nullable=False)
    # "metadata" est réservé par la déclarative SQLAlchemy
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
