from types import SimpleNamespace

import cherrypy
import pytest

from crmgraph.analytics.db import GraphDB
from crmgraph.web.auth import TokenVerifier
from tests.helpers import OTHER_OWNER, OWNER, SECRET, Seeder, make_token


@pytest.fixture
def db(tmp_path):
    graph_db = GraphDB(tmp_path / "crm.db")
    graph_db.init_schema()
    return graph_db


@pytest.fixture
def seed(db):
    return Seeder(db, OWNER)


@pytest.fixture
def other_seed(db):
    return Seeder(db, OTHER_OWNER)


@pytest.fixture
def scenario(seed):
    """Alice-Bob (5, friend), Bob-Charlie (3, colleague), plus Isolated."""
    people = SimpleNamespace(
        alice=seed.person("Alice", 1),
        bob=seed.person("Bob", 2),
        charlie=seed.person("Charlie", 3),
        isolated=seed.person("Isolated", 4),
    )
    seed.relate(people.alice, people.bob, 5, "friend")
    seed.relate(people.bob, people.charlie, 3, "colleague")
    return people


@pytest.fixture
def verifier():
    return TokenVerifier(SECRET)


@pytest.fixture
def http(monkeypatch):
    """
    Stub CherryPy request/response for calling handlers directly.

    Returns a namespace with ``request`` and ``response``; by default the
    request carries a valid bearer token for OWNER.
    """
    request = SimpleNamespace(
        method="GET",
        headers={"Authorization": f"Bearer {make_token()}"},
        params={},
        json=None,
        remote=SimpleNamespace(ip="127.0.0.1"),
    )
    response = SimpleNamespace(status=200, headers={})

    monkeypatch.setattr(cherrypy.serving, "request", request, raising=False)
    monkeypatch.setattr(cherrypy.serving, "response", response, raising=False)

    return SimpleNamespace(request=request, response=response)
