"""
Tableau de bord d'un projet: indicateurs, timeline par phase, revues en attente
de l'utilisateur courant et flux d'activité.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from hub.core.http_constants import DEFAULT_ACTIVITY_FEED_LIMIT, PUBLISHED_WINDOW_DAYS
from hub.domain.entities import ActivityEntry, Asset, Athlete, Club, Phase, Project
from hub.domain.errors import NotFound
from hub.domain.permissions import require_member
from hub.domain.timeutils import as_utc, utcnow


@dataclass
class DashboardStats:
    total_assets: int = 0
    pending_approvals: int = 0
    overdue_items: int = 0
    published_this_week: int = 0


@dataclass
class PhaseColumn:
    phase: Phase
    assets: list[Asset] = field(default_factory=list)


@dataclass
class Dashboard:
    project: Project
    role: str
    stats: DashboardStats
    timeline: list[PhaseColumn]
    pending_for_me: list[Asset]
    activity: list[ActivityEntry]


@dataclass
class RosterEntry:
    athlete: Athlete
    club: Club | None
    content_count: int


def compute_stats(assets: Iterable[Asset], now: datetime) -> DashboardStats:
    """Indicateurs du projet.

    - pending_approvals: assets `in_review`;
    - overdue_items: `in_review` dont l'échéance est dépassée;
    - published_this_week: publiés depuis moins de 7 jours.
    """
    stats = DashboardStats()
    week_ago = now - timedelta(days=PUBLISHED_WINDOW_DAYS)
    for a in assets:
        stats.total_assets += 1
        if a.status == "in_review":
            stats.pending_approvals += 1
            due = as_utc(a.approval_due)
            if due is not None and due < now:
                stats.overdue_items += 1
        published = as_utc(a.publish_date)
        if a.status == "published" and published is not None and published >= week_ago:
            stats.published_this_week += 1
    return stats


def group_by_phase(phases: list[Phase], assets: Iterable[Asset]) -> list[PhaseColumn]:
    by_phase: dict[str, list[Asset]] = defaultdict(list)
    for a in assets:
        by_phase[a.phase_id].append(a)
    return [PhaseColumn(phase=p, assets=by_phase.get(p.id, [])) for p in phases]


class DashboardService:
    def __init__(
        self,
        repos,
        activity_limit: int = DEFAULT_ACTIVITY_FEED_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.activity_limit = activity_limit
        self.clock = clock

    def dashboard(self, project_id: str, actor_id: str) -> Dashboard:
        member = require_member(self.repos.members.get_membership(project_id, actor_id))
        project = self.repos.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found")
        assets = self.repos.assets.list_for_project(project_id)
        pending_ids = self.repos.approvals.pending_asset_ids(actor_id)
        return Dashboard(
            project=project,
            role=member.role,
            stats=compute_stats(assets, as_utc(self.clock())),
            timeline=group_by_phase(self.repos.projects.list_phases(project_id), assets),
            pending_for_me=[a for a in assets if a.id in pending_ids],
            activity=self.repos.activity.recent(project_id, self.activity_limit),
        )

    def roster(self, project_id: str, actor_id: str) -> list[RosterEntry]:
        require_member(self.repos.members.get_membership(project_id, actor_id))
        return [
            RosterEntry(athlete=a, club=c, content_count=n)
            for a, c, n in self.repos.projects.roster(project_id)
        ]

    def my_projects(self, actor_id: str) -> list[tuple[Project, str]]:
        """Projets de l'utilisateur avec son rôle, par ancienneté du rattachement."""
        result = []
        for m in self.repos.members.memberships_for_user(actor_id):
            project = self.repos.projects.get(m.project_id)
            if project is not None:
                result.append((project, m.role))
        return result
