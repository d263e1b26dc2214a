"""
Moteur d'approbation: résolution des chaînes et des approbateurs, gestion des
enregistrements d'approbation par version, recalcul du statut des assets.

Le moteur ne possède aucun état: chaque appel interroge les dépôts (source de
vérité externe) et n'écrit qu'à travers eux. Les dépôts sont injectés.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from hub.app.metrics import ASSET_STATUS_TRANSITIONS
from hub.domain.entities import Asset, ApprovalChain, ApprovalRecord
from hub.domain.errors import NoApproversFound, NotAuthorized, NotConfigured, ValidationFailed
from hub.domain.status_engine import compute_asset_status

log = structlog.get_logger(__name__)

DECISIONS = frozenset({"approved", "changes_requested", "rejected"})


@dataclass
class ResolvedApprovers:
    chain: ApprovalChain
    user_ids: list[str]


class ApprovalEngine:
    """Chaînes, approbateurs et enregistrements d'approbation d'un projet.

    Dépendances:
    - chains: dépôt des chaînes (`get(project_id, category)`).
    - members: dépôt des membres (`with_roles(project_id, roles)`).
    - approvals: dépôt des enregistrements d'approbation.
    - assets: dépôt des assets (lecture + mise à jour du statut).
    """

    def __init__(self, chains, members, approvals, assets):
        self.chains = chains
        self.members = members
        self.approvals = approvals
        self.assets = assets

    def resolve_chain(self, project_id: str, category: str) -> ApprovalChain:
        """Retourne la chaîne configurée; lève NotConfigured sinon. Sans effet de bord."""
        chain = self.chains.get(project_id, category)
        if chain is None:
            raise NotConfigured()
        return chain

    def resolve_approvers(self, project_id: str, roles: Iterable[str]) -> list[str]:
        """Identifiants dédupliqués des membres détenant l'un des rôles requis.

        Un utilisateur couvrant plusieurs rôles n'apparaît qu'une fois. Lève
        NoApproversFound si aucun membre ne correspond.
        """
        role_set = set(roles)
        if not role_set:
            raise NoApproversFound()
        members = self.members.with_roles(project_id, role_set)
        user_ids = list(dict.fromkeys(m.user_id for m in members))
        if not user_ids:
            raise NoApproversFound()
        return user_ids

    def resolve(self, project_id: str, category: str) -> ResolvedApprovers:
        chain = self.resolve_chain(project_id, category)
        return ResolvedApprovers(chain, self.resolve_approvers(project_id, chain.required_roles))

    def create_records(
        self, asset_id: str, project_id: str, category: str, version: int
    ) -> list[ApprovalRecord]:
        """Crée un enregistrement `pending` par approbateur pour `version`.

        La résolution (chaîne puis membres) précède toute écriture: en cas
        d'échec, aucune ligne n'est insérée. La suppression des enregistrements
        en attente des versions précédentes incombe à l'appelant.
        """
        resolved = self.resolve(project_id, category)
        records = self.approvals.insert_pending(asset_id, resolved.user_ids, version)
        log.info(
            "approval_records_created",
            asset_id=asset_id,
            version=version,
            approvers=len(records),
            chain_type=resolved.chain.chain_type,
        )
        return records

    def record_decision(
        self,
        approval_id: str,
        approver_id: str,
        decision: str,
        comment: str | None,
        decided_at: datetime,
    ) -> ApprovalRecord:
        """Enregistre la décision de l'approbateur propriétaire de l'enregistrement.

        Lève NotAuthorized (sans écriture) si l'enregistrement n'existe pas,
        appartient à un autre utilisateur ou a déjà reçu une décision.
        """
        if decision not in DECISIONS:
            raise ValidationFailed(f"Invalid decision '{decision}'")
        record = self.approvals.update_decision(
            approval_id, approver_id, decision, comment, decided_at
        )
        if record is None:
            raise NotAuthorized("You cannot decide on this approval")
        return record

    def active_records(self, asset: Asset) -> list[ApprovalRecord]:
        return self.approvals.list_for_version(asset.id, asset.version)

    def recalculate_asset_status(self, asset_id: str) -> Asset | None:
        """Recalcule et persiste le statut de l'asset depuis son ensemble actif.

        Retourne l'asset (à jour ou inchangé), None s'il n'existe pas.
        """
        asset = self.assets.get(asset_id)
        if asset is None:
            return None
        new_status = compute_asset_status(self.active_records(asset))
        if new_status is None or new_status == asset.status:
            return asset
        updated = self.assets.update(asset_id, status=new_status)
        ASSET_STATUS_TRANSITIONS.labels(status=new_status, source="engine").inc()
        log.info(
            "asset_status_recomputed",
            asset_id=asset_id,
            version=asset.version,
            previous=asset.status,
            status=new_status,
        )
        return updated
