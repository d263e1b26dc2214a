"""
Métadonnées typées du journal d'activité.

Chaque action du journal possède un schéma Pydantic dédié; `build_metadata`
valide les champs fournis avant écriture, ce qui évite de stocker des sacs de
clés arbitraires.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from hub.domain.entities import ASSET_STATUSES, ChainType, UserRole


class _Meta(BaseModel):
    model_config = ConfigDict(extra="forbid")


class AssetMeta(_Meta):
    asset_title: str


class SubmittedMeta(AssetMeta):
    version: int


class DecisionMeta(AssetMeta):
    comment: str | None = None


class StatusChangeMeta(AssetMeta):
    new_status: str


class InviteMeta(_Meta):
    invited_email: str
    role: UserRole


class RoleChangeMeta(_Meta):
    member_id: str
    new_role: UserRole


class MemberRemovedMeta(_Meta):
    member_id: str


class ChainUpdatedMeta(_Meta):
    content_category: str
    required_roles: list[UserRole]
    chain_type: ChainType


ACTION_SCHEMAS: dict[str, type[_Meta]] = {
    "uploaded": AssetMeta,
    "commented": AssetMeta,
    "submitted_for_review": SubmittedMeta,
    "approved": DecisionMeta,
    "changes_requested": DecisionMeta,
    "rejected": DecisionMeta,
    "published": StatusChangeMeta,
    "user_invited": InviteMeta,
    "role_changed": RoleChangeMeta,
    "member_removed": MemberRemovedMeta,
    "chain_updated": ChainUpdatedMeta,
}
for _status in ASSET_STATUSES:
    ACTION_SCHEMAS.setdefault(f"status_changed_to_{_status}", StatusChangeMeta)


def status_action(status: str) -> str:
    return "published" if status == "published" else f"status_changed_to_{status}"


def build_metadata(action: str, **fields: Any) -> dict[str, Any]:
    """Valide les métadonnées d'une action et retourne le dict sérialisable.

    Raises:
        KeyError: action inconnue.
        pydantic.ValidationError: champs manquants ou inattendus.
    """
    schema = ACTION_SCHEMAS[action]
    return schema(**fields).model_dump(exclude_none=True)
