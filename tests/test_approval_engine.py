"""Tests du moteur d'approbation: résolution des chaînes et des approbateurs,
création des enregistrements et recalcul du statut."""

import pytest

from hub.domain.approval_engine import ApprovalEngine
from hub.domain.errors import NoApproversFound, NotAuthorized, NotConfigured, ValidationFailed
from hub.domain.timeutils import utcnow

from tests.factories import make_asset


@pytest.fixture
def engine_(repos):
    return ApprovalEngine(repos.chains, repos.members, repos.approvals, repos.assets)


def test_resolve_chain_returns_configured_chain(engine_, world):
    chain = engine_.resolve_chain(world.project_id, "partnership")
    assert chain.required_roles == ["brand", "league"]
    assert chain.chain_type == "parallel"


def test_resolve_chain_not_configured(engine_, world):
    with pytest.raises(NotConfigured) as exc:
        engine_.resolve_chain(world.project_id, "hype")
    assert exc.value.code == "NOT_CONFIGURED"


def test_resolve_chain_is_scoped_to_project(engine_, world):
    with pytest.raises(NotConfigured):
        engine_.resolve_chain("other-project", "partnership")


def test_resolve_approvers_unions_roles(engine_, world):
    ids = engine_.resolve_approvers(world.project_id, ["brand", "league"])
    assert sorted(ids) == sorted([world.brand, world.league])


def test_resolve_approvers_no_member(engine_, world):
    with pytest.raises(NoApproversFound):
        engine_.resolve_approvers(world.project_id, ["club"])


def test_resolve_approvers_empty_roles(engine_, world):
    with pytest.raises(NoApproversFound):
        engine_.resolve_approvers(world.project_id, [])


def test_create_records_one_pending_per_approver(engine_, repos, world):
    asset = make_asset(repos, world)
    records = engine_.create_records(asset.id, world.project_id, "partnership", 1)
    assert len(records) == 2
    assert {r.status for r in records} == {"pending"}
    assert {r.version_reviewed for r in records} == {1}
    assert {r.user_id for r in records} == {world.brand, world.league}


def test_create_records_writes_nothing_when_unresolved(engine_, repos, world):
    asset = make_asset(repos, world, content_category="trust")
    with pytest.raises(NotConfigured):
        engine_.create_records(asset.id, world.project_id, "trust", 1)
    assert repos.approvals.history(asset.id) == []


def test_record_decision_by_owner(engine_, repos, world):
    asset = make_asset(repos, world)
    records = engine_.create_records(asset.id, world.project_id, "partnership", 1)
    mine = next(r for r in records if r.user_id == world.brand)
    updated = engine_.record_decision(mine.id, world.brand, "approved", "LGTM", utcnow())
    assert updated.status == "approved"
    assert updated.comment == "LGTM"
    assert updated.responded_at is not None


def test_record_decision_by_other_user_refused(engine_, repos, world):
    asset = make_asset(repos, world)
    records = engine_.create_records(asset.id, world.project_id, "partnership", 1)
    theirs = next(r for r in records if r.user_id == world.league)
    with pytest.raises(NotAuthorized):
        engine_.record_decision(theirs.id, world.brand, "approved", None, utcnow())
    assert repos.approvals.get(theirs.id).status == "pending"


def test_record_decision_twice_refused(engine_, repos, world):
    asset = make_asset(repos, world)
    records = engine_.create_records(asset.id, world.project_id, "partnership", 1)
    mine = next(r for r in records if r.user_id == world.brand)
    engine_.record_decision(mine.id, world.brand, "approved", None, utcnow())
    with pytest.raises(NotAuthorized):
        engine_.record_decision(mine.id, world.brand, "rejected", None, utcnow())
    assert repos.approvals.get(mine.id).status == "approved"


def test_record_decision_unknown_record(engine_, world):
    with pytest.raises(NotAuthorized):
        engine_.record_decision("missing", world.brand, "approved", None, utcnow())


def test_record_decision_invalid_value(engine_, world):
    with pytest.raises(ValidationFailed):
        engine_.record_decision("missing", world.brand, "maybe", None, utcnow())


def test_recalculate_asset_status(engine_, repos, world):
    asset = make_asset(repos, world)
    repos.assets.update(asset.id, status="in_review")
    records = engine_.create_records(asset.id, world.project_id, "partnership", 1)
    for r in records:
        engine_.record_decision(r.id, r.user_id, "approved", None, utcnow())
    assert engine_.recalculate_asset_status(asset.id).status == "approved"


def test_recalculate_without_active_records_is_noop(engine_, repos, world):
    asset = make_asset(repos, world)
    assert engine_.recalculate_asset_status(asset.id).status == "draft"


def test_recalculate_missing_asset(engine_, world):
    assert engine_.recalculate_asset_status("missing") is None
