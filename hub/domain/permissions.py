"""
Permissions par rôle de projet.

Ce module reprend la table des capacités attachées à chaque rôle et fournit les
vérifications utilisées par les services avant toute écriture.
"""

from __future__ import annotations

from typing import Literal

from hub.domain.entities import ProjectMember
from hub.domain.errors import NotAuthorized

Permission = Literal[
    "can_view_all_assets",
    "can_approve",
    "can_upload",
    "can_comment",
    "can_manage_settings",
    "can_view_queue",
]

_REVIEWER = frozenset({"can_view_all_assets", "can_approve", "can_comment", "can_view_queue"})

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": frozenset(
        {
            "can_view_all_assets",
            "can_approve",
            "can_upload",
            "can_comment",
            "can_manage_settings",
            "can_view_queue",
        }
    ),
    "brand": _REVIEWER,
    "league": _REVIEWER,
    "pa": frozenset({"can_approve", "can_comment", "can_view_queue"}),
    "club": frozenset(),
    "viewer": frozenset(),
}


def has_permission(role: str, permission: Permission) -> bool:
    """Indique si un rôle possède une capacité donnée."""
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def require_member(member: ProjectMember | None) -> ProjectMember:
    """Vérifie que l'utilisateur appartient bien au projet ciblé."""
    if member is None:
        raise NotAuthorized("You are not a member of this project")
    return member


def require_permission(member: ProjectMember | None, permission: Permission) -> ProjectMember:
    """
    Vérifie qu'un membre possède une capacité spécifique.

    Args:
        member: Rattachement du membre au projet (None si non membre).
        permission: Nom de la capacité requise.

    Raises:
        NotAuthorized: Si l'utilisateur n'est pas membre ou si son rôle ne le permet pas.
    """
    member = require_member(member)
    if not has_permission(member.role, permission):
        raise NotAuthorized(f"Role '{member.role}' is missing permission '{permission}'")
    return member


def require_admin(member: ProjectMember | None) -> ProjectMember:
    member = require_member(member)
    if member.role != "admin":
        raise NotAuthorized("Only project admins can perform this action")
    return member
