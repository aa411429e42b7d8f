import sqlite3

import pytest

from crmgraph.analytics.db import GraphDB, QueryError, run_query
from tests.helpers import OWNER


class TestGraphDB:

    def test_init_schema_is_idempotent(self, db):
        db.init_schema()
        tables = {row[0] for row in run_query(db, "SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert {"people", "relationships", "events", "event_participants", "favors"} <= tables

    def test_creates_parent_directories(self, tmp_path):
        graph_db = GraphDB(tmp_path / "nested" / "dir" / "crm.db")
        graph_db.init_schema()
        assert (tmp_path / "nested" / "dir" / "crm.db").exists()

    def test_query_errors_are_wrapped(self, db):
        with pytest.raises(QueryError):
            run_query(db, "SELECT * FROM nowhere")

    def test_reverse_duplicate_pair_rejected(self, seed, scenario):
        with pytest.raises(sqlite3.IntegrityError):
            seed.relate(scenario.bob, scenario.alice, 2)

    def test_self_relationship_rejected(self, seed, scenario):
        with pytest.raises(sqlite3.IntegrityError):
            seed.relate(scenario.alice, scenario.alice, 2)

    def test_strength_range_enforced(self, seed, scenario):
        with pytest.raises(sqlite3.IntegrityError):
            seed.relate(scenario.alice, scenario.isolated, 6)

    def test_rollback_on_error(self, db, scenario):
        with pytest.raises(RuntimeError):
            with db.connection() as conn:
                conn.execute("DELETE FROM people WHERE user_id = ?", (OWNER,))
                raise RuntimeError("abort")

        assert run_query(db, "SELECT COUNT(*) FROM people")[0][0] == 4
