"""Tests unitaires des actions post-commit.

Vérifie que les actions enregistrées via `register_action_after_commit` ne sont
exécutées qu'après un commit, jamais après un rollback, et qu'un échec d'action
n'est pas propagé.
"""

from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session

from hub.infra.ops.post_commit import register_action_after_commit


def _make_session() -> Session:
    engine = create_engine("sqlite:///:memory:")
    return Session(bind=engine)


def test_register_action_runs_after_commit():
    """Exécute l'action après commit et pas avant."""
    ran: list[str] = []

    s = _make_session()
    register_action_after_commit(s, ran.append, "sent")
    s.execute(text("SELECT 1"))
    assert ran == []
    s.commit()
    assert ran == ["sent"]
    # une seule exécution
    s.execute(text("SELECT 1"))
    s.commit()
    assert ran == ["sent"]


def test_register_action_cleared_on_rollback():
    """Purge les actions sur rollback et ne les exécute pas ensuite."""
    ran: list[str] = []

    s = _make_session()
    s.execute(text("SELECT 1"))
    register_action_after_commit(s, ran.append, "sent")
    s.rollback()
    assert ran == []
    s.execute(text("SELECT 1"))
    s.commit()
    assert ran == []


def test_rollback_without_transaction_discards():
    ran: list[str] = []

    s = _make_session()
    register_action_after_commit(s, ran.append, "sent")
    s.rollback()
    s.commit()
    assert ran == []


def test_failing_action_does_not_break_others():
    ran: list[str] = []

    def boom() -> None:
        raise RuntimeError("smtp down")

    s = _make_session()
    s.execute(text("SELECT 1"))
    register_action_after_commit(s, boom)
    register_action_after_commit(s, ran.append, "second")
    s.commit()
    assert ran == ["second"]
