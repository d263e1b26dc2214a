"""
Moteur de statut des assets (fonctions pures).

Le statut global d'un asset se déduit de ses approbations *actives*, c'est-à-dire
celles dont `version_reviewed` vaut la version courante de l'asset. Ordre de
priorité:

1. aucune approbation active -> pas de changement;
2. au moins un rejet -> `rejected` (un seul refus bloque l'asset);
3. au moins une demande de modifications -> `changes_requested`;
4. toutes approuvées -> `approved`;
5. sinon (mélange pending/approved) -> pas de changement (`in_review`).

Le type de chaîne (parallel/sequential) n'intervient pas: l'ensemble actif est
toujours évalué en entier.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from hub.domain.errors import InvalidTransition


class _HasStatus(Protocol):
    status: str


class _Versioned(Protocol):
    status: str
    version_reviewed: int


# Statuts depuis lesquels une soumission est possible
SUBMITTABLE_STATUSES = frozenset({"draft", "changes_requested", "rejected"})
# Statuts dont la resoumission ouvre une nouvelle version
RESUBMISSION_STATUSES = frozenset({"changes_requested", "rejected"})

# Transitions manuelles (admin), jamais recalculées par le moteur
ADMIN_TRANSITIONS: dict[str, frozenset[str]] = {
    "approved": frozenset({"published", "archived"}),
    "published": frozenset({"archived"}),
    "archived": frozenset({"draft"}),
}


def active_records(records: Iterable[_Versioned], version: int) -> list[_Versioned]:
    """Filtre les approbations qui portent sur la version courante."""
    return [r for r in records if r.version_reviewed == version]


def compute_asset_status(records: Iterable[_HasStatus]) -> str | None:
    """Calcule le statut d'un asset à partir de son ensemble actif.

    Retourne None lorsque le statut ne doit pas changer (ensemble vide ou
    revue encore en cours).
    """
    statuses = [r.status for r in records]
    if not statuses:
        return None
    if "rejected" in statuses:
        return "rejected"
    if "changes_requested" in statuses:
        return "changes_requested"
    if all(s == "approved" for s in statuses):
        return "approved"
    return None


def submission_version(status: str, version: int, has_decisions_for_version: bool) -> int:
    """Retourne la version sous laquelle l'asset part en revue.

    - première soumission d'un brouillon: version inchangée;
    - resoumission après `changes_requested` ou `rejected`: version + 1;
    - brouillon restauré qui porte déjà des décisions sur sa version: version + 1,
      pour que ces décisions sortent de l'ensemble actif.

    Lève InvalidTransition pour tout autre statut.
    """
    if status not in SUBMITTABLE_STATUSES:
        raise InvalidTransition(f"Cannot submit an asset with status '{status}' for review")
    if status in RESUBMISSION_STATUSES or has_decisions_for_version:
        return version + 1
    return version


def check_admin_transition(current: str, target: str) -> None:
    """Valide une transition manuelle; lève InvalidTransition sinon."""
    if target not in ADMIN_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(f"Cannot change status from '{current}' to '{target}'")
