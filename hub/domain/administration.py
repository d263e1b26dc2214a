"""
Administration d'un projet: membres et chaînes d'approbation.

Toutes les écritures sont réservées aux administrateurs du projet et journalisées.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from hub.domain.activity import build_metadata
from hub.domain.entities import (
    CONTENT_CATEGORIES,
    USER_ROLES,
    ApprovalChain,
    ProjectMember,
    User,
)
from hub.domain.errors import AlreadyMember, NotFound, ValidationFailed
from hub.domain.permissions import require_admin, require_member, require_permission

log = structlog.get_logger(__name__)

CHAIN_TYPES = ("parallel", "sequential")


def _check_role(role: str) -> None:
    if role not in USER_ROLES:
        raise ValidationFailed(f"Unknown role '{role}'")


@dataclass
class MemberView:
    member: ProjectMember
    user: User | None


class MemberService:
    def __init__(self, repos):
        self.repos = repos

    def list_members(self, project_id: str, actor_id: str) -> list[MemberView]:
        require_member(self.repos.members.get_membership(project_id, actor_id))
        members = self.repos.members.list_for_project(project_id)
        users = self.repos.users.get_many(m.user_id for m in members)
        return [MemberView(member=m, user=users.get(m.user_id)) for m in members]

    def invite(
        self, project_id: str, actor_id: str, email: str, role: str, full_name: str
    ) -> ProjectMember:
        """Ajoute un utilisateur au projet.

        - utilisateur connu (par e-mail): rattachement direct, AlreadyMember s'il
          est déjà membre;
        - utilisateur inconnu: création du profil puis rattachement (l'invitation
          côté fournisseur d'authentification reste externe).
        """
        require_admin(self.repos.members.get_membership(project_id, actor_id))
        _check_role(role)
        user = self.repos.users.get_by_email(email)
        if user is None:
            user = self.repos.users.create(email=email, full_name=full_name)
        elif self.repos.members.get_membership(project_id, user.id) is not None:
            raise AlreadyMember()
        member = self.repos.members.add(project_id, user.id, role)
        self.repos.activity.log(
            project_id,
            actor_id,
            "user_invited",
            build_metadata("user_invited", invited_email=user.email, role=role),
        )
        log.info("member_invited", project_id=project_id, user_id=user.id, role=role)
        return member

    def update_role(self, project_id: str, actor_id: str, member_id: str, role: str) -> ProjectMember:
        require_admin(self.repos.members.get_membership(project_id, actor_id))
        _check_role(role)
        member = self.repos.members.update_role(member_id, project_id, role)
        if member is None:
            raise NotFound("Member not found")
        self.repos.activity.log(
            project_id,
            actor_id,
            "role_changed",
            build_metadata("role_changed", member_id=member_id, new_role=role),
        )
        return member

    def remove(self, project_id: str, actor_id: str, member_id: str) -> None:
        require_admin(self.repos.members.get_membership(project_id, actor_id))
        if not self.repos.members.remove(member_id, project_id):
            raise NotFound("Member not found")
        self.repos.activity.log(
            project_id,
            actor_id,
            "member_removed",
            build_metadata("member_removed", member_id=member_id),
        )


class ChainService:
    """Configuration des chaînes d'approbation par catégorie de contenu."""

    def __init__(self, repos):
        self.repos = repos

    def list_chains(self, project_id: str, actor_id: str) -> list[ApprovalChain]:
        require_member(self.repos.members.get_membership(project_id, actor_id))
        return self.repos.chains.list_for_project(project_id)

    def upsert_chain(
        self,
        project_id: str,
        actor_id: str,
        category: str,
        required_roles: list[str],
        chain_type: str = "parallel",
    ) -> ApprovalChain:
        require_permission(
            self.repos.members.get_membership(project_id, actor_id), "can_manage_settings"
        )
        if category not in CONTENT_CATEGORIES:
            raise ValidationFailed(f"Unknown content category '{category}'")
        if chain_type not in CHAIN_TYPES:
            raise ValidationFailed(f"Unknown chain type '{chain_type}'")
        roles = list(dict.fromkeys(required_roles))
        if not roles:
            raise ValidationFailed("An approval chain needs at least one role")
        for role in roles:
            _check_role(role)
        chain = self.repos.chains.upsert(project_id, category, roles, chain_type)
        self.repos.activity.log(
            project_id,
            actor_id,
            "chain_updated",
            build_metadata(
                "chain_updated",
                content_category=category,
                required_roles=roles,
                chain_type=chain_type,
            ),
        )
        return chain
