"""Shared test helpers for seeding CRM rows and minting tokens."""

import time

from crmgraph.analytics.db import GraphDB
from crmgraph.analytics.snapshot import GraphSnapshot
from crmgraph.web.auth import sign_token

SECRET = "test-secret"

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


def pid(n: int) -> str:
    """Deterministic person UUID; lower n sorts first."""
    return f"00000000-0000-0000-0000-{n:012d}"


class Seeder:
    """Writes CRM rows for one owner the way the CRUD layer would."""

    def __init__(self, db: GraphDB, owner_id: str = OWNER):
        self.db = db
        self.owner_id = owner_id
        self._next = 1 if owner_id == OWNER else 1001

    def person(self, name: str, n: int = None) -> str:
        if n is None:
            n = self._next
        self._next = max(self._next, n) + 1
        person_id = pid(n)
        with self.db.connection() as conn:
            conn.execute(
                "INSERT INTO people (id, user_id, name) VALUES (?, ?, ?)",
                (person_id, self.owner_id, name),
            )
        return person_id

    def relate(self, a: str, b: str, strength: int, rel_type: str = "friend", context: str = ""):
        with self.db.connection() as conn:
            conn.execute(
                "INSERT INTO relationships "
                "(user_id, person_a_id, person_b_id, relationship_type, strength, context) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (self.owner_id, a, b, rel_type, strength, context),
            )

    def unrelate(self, a: str, b: str):
        with self.db.connection() as conn:
            conn.execute(
                "DELETE FROM relationships WHERE user_id = ? AND "
                "((person_a_id = ? AND person_b_id = ?) OR (person_a_id = ? AND person_b_id = ?))",
                (self.owner_id, a, b, b, a),
            )

    def event(self, date: str, *people: str):
        with self.db.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO events (user_id, title, date) VALUES (?, ?, ?)",
                (self.owner_id, "event", date),
            )
            for person_id in people:
                conn.execute(
                    "INSERT INTO event_participants (event_id, person_id) VALUES (?, ?)",
                    (cursor.lastrowid, person_id),
                )

    def favor(self, giver: str, receiver: str, date: str):
        with self.db.connection() as conn:
            conn.execute(
                "INSERT INTO favors (user_id, giver_id, receiver_id, description, date) "
                "VALUES (?, ?, ?, ?, ?)",
                (self.owner_id, giver, receiver, "favor", date),
            )


def make_token(owner_id: str = OWNER, ttl: int = 3600, secret: str = SECRET) -> str:
    return sign_token({"userId": owner_id, "exp": int(time.time()) + ttl}, secret)


def build(edges, people=()):
    """Snapshot for OWNER from (a, b, strength[, type]) tuples; names are ids uppercased."""
    snap = GraphSnapshot(OWNER)
    names = set(people)
    for edge in edges:
        names.update(edge[:2])
    for name in sorted(names):
        snap.add_person(name, name.upper())
    for edge in edges:
        a, b, strength = edge[:3]
        rel_type = edge[3] if len(edge) > 3 else "friend"
        snap.add_relationship(a, b, strength, rel_type)
    return snap
