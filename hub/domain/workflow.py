"""
Service de workflow: soumission en revue, décisions d'approbation et
transitions manuelles des administrateurs.

Chaque opération s'exécute dans la transaction de la requête courante; les
notifications sont différées via `defer` (exécution après commit) et ne font
jamais échouer l'opération.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from hub.app.metrics import APPROVAL_DECISIONS, ASSET_STATUS_TRANSITIONS, WORKFLOW_SUBMISSIONS
from hub.domain.activity import build_metadata, status_action
from hub.domain.approval_engine import ApprovalEngine
from hub.domain.entities import ApprovalRecord, Asset
from hub.domain.errors import NotAuthorized, NotFound, WorkflowError
from hub.domain.permissions import has_permission, require_admin, require_member
from hub.domain.status_engine import check_admin_transition, submission_version
from hub.domain.timeutils import utcnow

log = structlog.get_logger(__name__)

Defer = Callable[..., None]


def run_now(func: Callable[..., None], *args, **kwargs) -> None:
    """`defer` immédiat (scripts, tests unitaires sans session)."""
    func(*args, **kwargs)


@dataclass
class DecisionOutcome:
    record: ApprovalRecord
    asset: Asset


class WorkflowService:
    """Orchestre le moteur d'approbation, le journal d'activité et les notifications.

    Paramètres:
    - repos: dépôts liés à la session (`Repositories`).
    - notifier: construit/délivre les e-mails (None = pas de notification).
    - defer: planifie un appel après commit (ex: `register_action_after_commit`).
    - clock: horloge injectable.
    """

    def __init__(
        self,
        repos,
        notifier=None,
        defer: Defer = run_now,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.notifier = notifier
        self.defer = defer
        self.clock = clock
        self.engine = ApprovalEngine(repos.chains, repos.members, repos.approvals, repos.assets)

    def _load_asset(self, asset_id: str) -> Asset:
        asset = self.repos.assets.get(asset_id)
        if asset is None:
            raise NotFound("Asset not found")
        return asset

    def submit_for_review(self, asset_id: str, actor_id: str) -> Asset:
        """Soumet (ou resoumet) un asset en revue.

        Étapes: contrôle d'accès, calcul de la version, création des
        enregistrements `pending` (la résolution chaîne/approbateurs précède toute
        écriture), purge des enregistrements en attente des versions antérieures,
        passage en `in_review`, recalcul, journal et notifications.
        """
        asset = self._load_asset(asset_id)
        member = require_member(self.repos.members.get_membership(asset.project_id, actor_id))
        if asset.created_by != actor_id and not has_permission(member.role, "can_upload"):
            raise NotAuthorized("Only the uploader or an admin can submit this asset")

        try:
            version = submission_version(
                asset.status,
                asset.version,
                self.repos.approvals.has_decisions(asset.id, asset.version),
            )
            records = self.engine.create_records(
                asset.id, asset.project_id, asset.content_category, version
            )
        except WorkflowError as err:
            WORKFLOW_SUBMISSIONS.labels(result=err.code).inc()
            log.info("asset_submission_refused", asset_id=asset.id, code=err.code)
            raise

        self.repos.approvals.delete_stale_pending(asset.id, version)
        self.repos.assets.update(asset.id, status="in_review", version=version)
        asset = self.engine.recalculate_asset_status(asset.id)

        self.repos.activity.log(
            asset.project_id,
            actor_id,
            "submitted_for_review",
            build_metadata("submitted_for_review", asset_title=asset.title, version=version),
            asset_id=asset.id,
        )
        if self.notifier is not None:
            approvers = self.repos.users.get_many(r.user_id for r in records)
            messages = self.notifier.review_requested(asset, list(approvers.values()))
            self.defer(self.notifier.deliver, messages)

        WORKFLOW_SUBMISSIONS.labels(result="ok").inc()
        log.info(
            "asset_submitted",
            asset_id=asset.id,
            version=version,
            approvers=len(records),
            status=asset.status,
        )
        return asset

    def submit_decision(
        self,
        approval_id: str,
        actor_id: str,
        decision: str,
        comment: str | None = None,
    ) -> DecisionOutcome:
        """Enregistre la décision de l'approbateur puis recalcule le statut de l'asset."""
        record = self.engine.record_decision(
            approval_id, actor_id, decision, comment, self.clock()
        )
        asset = self.engine.recalculate_asset_status(record.asset_id)
        if asset is None:
            raise NotFound("Asset not found")

        self.repos.activity.log(
            asset.project_id,
            actor_id,
            decision,
            build_metadata(decision, asset_title=asset.title, comment=comment),
            asset_id=asset.id,
        )
        if self.notifier is not None:
            users = self.repos.users.get_many({asset.created_by, actor_id})
            creator, approver = users.get(asset.created_by), users.get(actor_id)
            if creator is not None and approver is not None:
                messages = self.notifier.decision_made(asset, creator, approver, decision, comment)
                self.defer(self.notifier.deliver, messages)

        APPROVAL_DECISIONS.labels(decision=decision).inc()
        log.info(
            "approval_decided",
            approval_id=approval_id,
            asset_id=asset.id,
            decision=decision,
            status=asset.status,
        )
        return DecisionOutcome(record=record, asset=asset)

    def change_status(self, asset_id: str, actor_id: str, target: str) -> Asset:
        """Transition manuelle (publication, archivage, restauration).

        Réservée aux administrateurs du projet; jamais recalculée par le moteur.
        """
        asset = self._load_asset(asset_id)
        require_admin(self.repos.members.get_membership(asset.project_id, actor_id))
        check_admin_transition(asset.status, target)

        fields: dict = {"status": target}
        if target == "published":
            fields["publish_date"] = self.clock()
        updated = self.repos.assets.update(asset.id, **fields)

        action = status_action(target)
        self.repos.activity.log(
            asset.project_id,
            actor_id,
            action,
            build_metadata(action, asset_title=asset.title, new_status=target),
            asset_id=asset.id,
        )
        ASSET_STATUS_TRANSITIONS.labels(status=target, source="admin").inc()
        log.info("asset_status_changed", asset_id=asset.id, previous=asset.status, status=target)
        return updated
