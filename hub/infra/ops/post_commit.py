"""Post-commit helpers: side effects that must only run once data is durable.

Ce module permet de différer des actions (envoi d'e-mails, mise en file Celery)
jusqu'au commit effectif de la transaction SQLAlchemy. En cas de rollback, les
actions planifiées sont oubliées. Un échec d'action est journalisé mais ne
remonte jamais à l'appelant: la transaction est déjà validée.
"""

from __future__ import annotations

import functools
from collections.abc import Callable

import structlog
from sqlalchemy import event
from sqlalchemy.orm import Session

from hub.app.metrics import POSTCOMMIT_ACTIONS_TOTAL

log = structlog.get_logger(__name__)

_ACTIONS_KEY = "_post_commit_actions"
_BOUND_KEY = "_post_commit_bound"


def _ensure_action_list(session: Session) -> list[Callable[[], None]]:
    """Ensure action list container exists on session.info and return it."""
    actions = session.info.get(_ACTIONS_KEY)
    if actions is None:
        actions = []
        session.info[_ACTIONS_KEY] = actions
    _bind_session_events(session)
    return actions


def _discard(session: Session) -> None:
    dropped = len(session.info.get(_ACTIONS_KEY) or [])
    session.info[_ACTIONS_KEY] = []
    if dropped:
        POSTCOMMIT_ACTIONS_TOTAL.labels(result="discarded").inc(dropped)


def _bind_session_events(session: Session) -> None:
    """Bind commit/rollback hooks once for the given session instance."""
    if session.info.get(_BOUND_KEY):
        return
    session.info[_BOUND_KEY] = True

    # rollback() sans transaction active ne déclenche pas after_rollback
    original_rollback = session.rollback

    def _rollback_and_discard() -> None:
        try:
            original_rollback()
        finally:
            _discard(session)

    session.rollback = _rollback_and_discard  # type: ignore[method-assign]

    @event.listens_for(session, "after_commit")
    def _after_commit(_session: Session) -> None:
        actions = list(_session.info.get(_ACTIONS_KEY) or [])
        _session.info[_ACTIONS_KEY] = []
        for action in actions:
            try:
                action()
            except Exception as exc:
                POSTCOMMIT_ACTIONS_TOTAL.labels(result="failed").inc()
                log.warning("post_commit_action_failed", error=type(exc).__name__, detail=str(exc))
            else:
                POSTCOMMIT_ACTIONS_TOTAL.labels(result="ran").inc()

    @event.listens_for(session, "after_rollback")
    def _after_rollback(_session: Session) -> None:
        _discard(_session)


def register_action_after_commit(
    session: Session,
    func: Callable[..., None],
    *args,
    **kwargs,
) -> None:
    """Register an arbitrary callable to run after a successful commit.

    La fonction est stockée dans la session et exécutée lors de l'évènement
    `after_commit`. En cas de rollback, elle est oubliée.
    """
    _ensure_action_list(session).append(functools.partial(func, *args, **kwargs))


__all__ = ["register_action_after_commit"]
