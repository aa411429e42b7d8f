from crmgraph.analytics.centrality import find_isolated, rank_central_nodes
from crmgraph.analytics.snapshot import GraphSnapshot
from tests.helpers import build


class TestRankCentralNodes:

    def setup_method(self):
        self.snap = build(
            [("hub", "a", 1), ("hub", "b", 1), ("hub", "c", 1), ("a", "b", 1), ("c", "d", 1)],
            people=["loner"],
        )

    def test_descending_degree_with_id_ties(self):
        entries = rank_central_nodes(self.snap, 10)

        assert [(e.person_id, e.connection_count) for e in entries] == [
            ("hub", 3),
            ("a", 2),
            ("b", 2),
            ("c", 2),
            ("d", 1),
            ("loner", 0),
        ]

    def test_counts_never_increase(self):
        counts = [e.connection_count for e in rank_central_nodes(self.snap, 50)]
        assert counts == sorted(counts, reverse=True)

    def test_limit(self):
        entries = rank_central_nodes(self.snap, 2)
        assert [e.person_id for e in entries] == ["hub", "a"]
        assert entries[0].to_dict() == {"person_id": "hub", "name": "HUB", "connection_count": 3}

    def test_empty_network(self):
        assert rank_central_nodes(GraphSnapshot("nobody"), 10) == []


class TestFindIsolated:

    def setup_method(self):
        self.snap = build(
            [("hub", "a", 1), ("hub", "b", 1), ("hub", "c", 1), ("a", "b", 1)],
            people=["zed", "loner"],
        )

    def test_threshold_and_order(self):
        entries = find_isolated(self.snap, 1)

        assert [(e.person_id, e.connection_count) for e in entries] == [
            ("loner", 0),
            ("zed", 0),
            ("c", 1),
        ]
        assert all(e.connection_count <= 1 for e in entries)

    def test_zero_threshold(self):
        assert [e.person_id for e in find_isolated(self.snap, 0)] == ["loner", "zed"]

    def test_to_dict(self):
        assert find_isolated(self.snap, 0)[0].to_dict() == {
            "id": "loner",
            "name": "LONER",
            "connection_count": 0,
        }
