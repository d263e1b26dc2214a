"""Configuration de test pour pytest.

Ajoute la racine du projet au sys.path et fournit une base SQLite en mémoire
par test, les dépôts liés à une session et le jeu de données `world`.
"""

import os
import sys
from collections.abc import Iterator

import pytest

# Ensure project root is on sys.path so that
# imports like `from hub...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from sqlalchemy.orm import Session  # noqa: E402

from hub.infra.repo.db import (  # noqa: E402
    MEMORY_URL,
    create_schema,
    get_engine,
    get_session_factory,
    session_scope,
)
from hub.infra.repo.unit import Repositories  # noqa: E402
from tests.factories import World, seed_world  # noqa: E402


@pytest.fixture
def engine():
    eng = get_engine(MEMORY_URL)
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def session(session_factory) -> Iterator[Session]:
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def repos(session) -> Repositories:
    return Repositories.for_session(session)


@pytest.fixture
def world(session, repos) -> World:
    return seed_world(session, repos)


@pytest.fixture
def client(session_factory):
    """TestClient dont les requêtes utilisent la base du test."""
    from fastapi.testclient import TestClient

    from hub.api.deps import get_session
    from hub.app.main import app

    def _session():
        with session_scope(session_factory) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
