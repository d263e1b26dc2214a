"""Tests de la portée transactionnelle `session_scope`."""

from __future__ import annotations

import pytest

from hub.infra.repo.db import session_scope
from hub.infra.repo.unit import Repositories


def test_session_scope_commits_on_success(session_factory):
    with session_scope(session_factory) as s:
        Repositories.for_session(s).users.create(email="kept@example.com", full_name="Kept")

    with session_scope(session_factory) as s:
        assert Repositories.for_session(s).users.get_by_email("kept@example.com") is not None


def test_session_scope_rolls_back_on_error(session_factory):
    with pytest.raises(RuntimeError):
        with session_scope(session_factory) as s:
            Repositories.for_session(s).users.create(email="lost@example.com", full_name="Lost")
            raise RuntimeError("boom")

    with session_scope(session_factory) as s:
        assert Repositories.for_session(s).users.get_by_email("lost@example.com") is None
