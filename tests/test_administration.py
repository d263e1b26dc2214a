"""Tests de l'administration d'un projet: membres et chaînes d'approbation."""

import pytest

from hub.domain.administration import ChainService, MemberService
from hub.domain.errors import AlreadyMember, NotAuthorized, NotFound, ValidationFailed


@pytest.fixture
def members(repos):
    return MemberService(repos)


@pytest.fixture
def chains(repos):
    return ChainService(repos)


class TestMembers:
    def test_list_members_with_profiles(self, members, world):
        views = members.list_members(world.project_id, world.users["viewer"])
        assert len(views) == 5
        assert {v.user.email for v in views} >= {"admin@example.com", "brand@example.com"}

    def test_invite_new_user_creates_profile(self, members, repos, world):
        member = members.invite(world.project_id, world.admin, "Club@Example.com", "club", "Club Rep")
        assert member.role == "club"
        user = repos.users.get_by_email("club@example.com")
        assert user is not None and user.id == member.user_id
        entry = repos.activity.recent(world.project_id, 1)[0]
        assert entry.action == "user_invited"
        assert entry.metadata == {"invited_email": "club@example.com", "role": "club"}

    def test_invite_existing_user_into_project(self, members, repos, world):
        existing = repos.users.create(email="pr@agency.example.com", full_name="PR Agency")
        member = members.invite(world.project_id, world.admin, "pr@agency.example.com", "pa", "ignored")
        assert member.user_id == existing.id

    def test_invite_duplicate_member(self, members, world):
        with pytest.raises(AlreadyMember) as exc:
            members.invite(world.project_id, world.admin, "brand@example.com", "viewer", "Brand")
        assert exc.value.code == "CONFLICT"

    def test_invite_requires_admin(self, members, world):
        with pytest.raises(NotAuthorized) as exc:
            members.invite(world.project_id, world.brand, "x@example.com", "viewer", "X")
        assert exc.value.message == "Only project admins can perform this action"

    def test_invite_unknown_role(self, members, world):
        with pytest.raises(ValidationFailed):
            members.invite(world.project_id, world.admin, "x@example.com", "owner", "X")

    def test_update_role(self, members, repos, world):
        pa = repos.members.get_membership(world.project_id, world.users["pa"])
        updated = members.update_role(world.project_id, world.admin, pa.id, "league")
        assert updated.role == "league"
        assert repos.activity.recent(world.project_id, 1)[0].action == "role_changed"

    def test_update_role_unknown_member(self, members, world):
        with pytest.raises(NotFound):
            members.update_role(world.project_id, world.admin, "missing", "league")

    def test_remove(self, members, repos, world):
        viewer = repos.members.get_membership(world.project_id, world.users["viewer"])
        members.remove(world.project_id, world.admin, viewer.id)
        assert repos.members.get_membership(world.project_id, world.users["viewer"]) is None
        with pytest.raises(NotFound):
            members.remove(world.project_id, world.admin, viewer.id)


class TestChains:
    def test_list(self, chains, world):
        listed = chains.list_chains(world.project_id, world.brand)
        assert [c.content_category for c in listed] == ["partnership"]

    def test_upsert_creates_and_replaces(self, chains, repos, world):
        created = chains.upsert_chain(world.project_id, world.admin, "hype", ["pa"])
        assert created.required_roles == ["pa"]
        replaced = chains.upsert_chain(
            world.project_id, world.admin, "hype", ["brand", "brand", "pa"], "sequential"
        )
        assert replaced.id == created.id
        assert replaced.required_roles == ["brand", "pa"]
        assert replaced.chain_type == "sequential"
        entry = repos.activity.recent(world.project_id, 1)[0]
        assert entry.action == "chain_updated"
        assert entry.metadata["required_roles"] == ["brand", "pa"]

    def test_upsert_requires_manage_settings(self, chains, world):
        with pytest.raises(NotAuthorized):
            chains.upsert_chain(world.project_id, world.brand, "hype", ["pa"])

    @pytest.mark.parametrize(
        ("category", "roles", "chain_type"),
        [
            ("merch", ["pa"], "parallel"),
            ("hype", [], "parallel"),
            ("hype", ["owner"], "parallel"),
            ("hype", ["pa"], "round_robin"),
        ],
    )
    def test_upsert_validation(self, chains, world, category, roles, chain_type):
        with pytest.raises(ValidationFailed):
            chains.upsert_chain(world.project_id, world.admin, category, roles, chain_type)
