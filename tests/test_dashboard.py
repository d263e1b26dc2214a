"""Tests du tableau de bord, du roster et de la liste des projets."""

from datetime import UTC, datetime, timedelta

import pytest

from hub.domain.dashboard import DashboardService, compute_stats
from hub.domain.entities import Asset
from hub.domain.errors import NotAuthorized
from hub.infra.repo.models import AssetAthleteORM, AthleteORM, ClubORM
from tests.factories import make_asset

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def _asset(status, **kw):
    return Asset(
        id=kw.pop("id", status),
        project_id="p",
        phase_id="ph",
        title="t",
        content_category="hype",
        format="static",
        external_url="https://x",
        created_by="u",
        status=status,
        **kw,
    )


def test_compute_stats():
    assets = [
        _asset("draft", id="a"),
        _asset("in_review", id="b", approval_due=NOW - timedelta(hours=1)),
        _asset("in_review", id="c", approval_due=NOW + timedelta(days=1)),
        _asset("in_review", id="d"),
        _asset("published", id="e", publish_date=NOW - timedelta(days=2)),
        _asset("published", id="f", publish_date=NOW - timedelta(days=9)),
        # date naïve (SQLite) traitée comme UTC
        _asset("published", id="g", publish_date=(NOW - timedelta(days=1)).replace(tzinfo=None)),
    ]
    stats = compute_stats(assets, NOW)
    assert stats.total_assets == 7
    assert stats.pending_approvals == 3
    assert stats.overdue_items == 1
    assert stats.published_this_week == 2


@pytest.fixture
def dashboards(repos):
    return DashboardService(repos, activity_limit=2, clock=lambda: NOW)


def test_dashboard(dashboards, repos, world):
    mine = make_asset(repos, world, title="Needs brand", status="in_review")
    make_asset(repos, world, title="Other")
    repos.approvals.insert_pending(mine.id, [world.brand], 1)
    for action in ("uploaded", "uploaded", "uploaded"):
        repos.activity.log(world.project_id, world.admin, action, {"asset_title": "x"})

    board = dashboards.dashboard(world.project_id, world.brand)

    assert board.role == "brand"
    assert board.stats.total_assets == 2
    assert board.stats.pending_approvals == 1
    assert [a.id for a in board.pending_for_me] == [mine.id]
    assert len(board.timeline) == 1
    assert len(board.timeline[0].assets) == 2
    assert len(board.activity) == 2


def test_dashboard_requires_membership(dashboards, repos, world):
    outsider = repos.users.create(email="o@example.com", full_name="O")
    with pytest.raises(NotAuthorized):
        dashboards.dashboard(world.project_id, outsider.id)


def test_roster_counts_tagged_assets(dashboards, session, repos, world):
    club = ClubORM(project_id=world.project_id, name="Harbor FC", market="Lisbon")
    session.add(club)
    session.flush()
    ana = AthleteORM(project_id=world.project_id, full_name="Ana Lima", club_id=club.id)
    ben = AthleteORM(project_id=world.project_id, full_name="Ben Okoro")
    session.add_all([ana, ben])
    session.flush()
    for title in ("One", "Two"):
        asset = make_asset(repos, world, title=title)
        session.add(AssetAthleteORM(asset_id=asset.id, athlete_id=ana.id))
    session.flush()

    roster = dashboards.roster(world.project_id, world.users["viewer"])

    assert [(e.athlete.full_name, e.content_count) for e in roster] == [
        ("Ana Lima", 2),
        ("Ben Okoro", 0),
    ]
    assert roster[0].club.name == "Harbor FC"
    assert roster[1].club is None


def test_my_projects(dashboards, world):
    projects = dashboards.my_projects(world.brand)
    assert [(p.id, role) for p, role in projects] == [(world.project_id, "brand")]
